"""
Map events and the channel that carries them to the controller.

The map never calls into business logic. It emits typed events onto a
MapEventChannel; a single consumer (the AppController) handles them in
emission order.
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Annotated, Literal, Union

import structlog
from pydantic import BaseModel, Field

from geomind.models.schemas import LatLng

logger = structlog.get_logger(__name__)


class LocationChanged(BaseModel):
    """The cursor marker was dragged or the base map was clicked."""
    type: Literal["location_changed"] = "location_changed"
    coords: LatLng
    source: Literal["click", "drag", "gps"] = "click"


class ShopClicked(BaseModel):
    """A shop marker was clicked."""
    type: Literal["shop_clicked"] = "shop_clicked"
    shop_id: str


MapEvent = Annotated[Union[LocationChanged, ShopClicked], Field(discriminator="type")]


class MapEventChannel:
    """
    FIFO of map events with completion tracking.

    ``emit`` never blocks. ``drain`` waits until every emitted event has been
    marked handled by the consumer, which is how a caller observes the effect
    of an event it just sent.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Union[LocationChanged, ShopClicked]] = asyncio.Queue()

    def emit(self, event: Union[LocationChanged, ShopClicked]) -> None:
        self._queue.put_nowait(event)
        logger.debug("map_event_emitted", event_type=event.type, backlog=self._queue.qsize())

    async def events(self) -> AsyncIterator[Union[LocationChanged, ShopClicked]]:
        """Yield events forever; the consumer must call ``done`` after each."""
        while True:
            yield await self._queue.get()

    def done(self) -> None:
        self._queue.task_done()

    async def drain(self) -> None:
        await self._queue.join()

    @property
    def backlog(self) -> int:
        return self._queue.qsize()
