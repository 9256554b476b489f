"""
Map rendering adapters.

The controller describes what the map should show as a MapView (centre,
markers, selection) and hands it to a MapAdapter. The adapter owns marker
lifecycle and camera movement; the controller never inspects it.
"""

from typing import Literal, Optional, Protocol

import structlog
from pydantic import BaseModel, Field

from geomind.models.schemas import LatLng, Shop, VendorStatus

logger = structlog.get_logger(__name__)

INITIAL_ZOOM = 13
FOCUS_ZOOM = 15

# Camera only flies when the centre moved further than this, in degrees
RECENTER_TOLERANCE = 0.001


class MapMarker(BaseModel):
    """One shop marker."""
    shop_id: str
    label: str
    coords: LatLng
    kind: Literal["legend", "vendor"]
    emoji: Optional[str] = None
    live: bool = False

    @classmethod
    def from_shop(cls, shop: Shop) -> "MapMarker":
        return cls(
            shop_id=shop.id,
            label=shop.name,
            coords=shop.coords,
            kind="vendor" if shop.is_vendor else "legend",
            emoji=shop.emoji,
            live=shop.status == VendorStatus.ONLINE,
        )


class MapView(BaseModel):
    """Everything the map needs to draw one frame."""
    center: LatLng
    markers: list[MapMarker] = Field(default_factory=list)
    selected_shop_id: Optional[str] = None


class MapAdapter(Protocol):
    """Receives render requests from the controller."""

    def render(self, view: MapView) -> None:
        ...


class RenderedMap(BaseModel):
    """The adapter's current camera and the view it draws."""
    view: MapView
    zoom: int
    fly_to: bool = Field(
        default=False,
        description="Camera must animate to the new centre on this frame",
    )
    revision: int = 0


class SnapshotMapAdapter:
    """
    Keeps the latest rendered frame for a browser client to poll.

    The first frame sits at the initial zoom. Later frames whose centre moved
    beyond RECENTER_TOLERANCE are flagged ``fly_to`` at FOCUS_ZOOM; the cursor
    marker itself always follows the centre.
    """

    def __init__(self) -> None:
        self._frame: Optional[RenderedMap] = None

    @property
    def frame(self) -> Optional[RenderedMap]:
        return self._frame

    def render(self, view: MapView) -> None:
        previous = self._frame
        if previous is None:
            frame = RenderedMap(view=view, zoom=INITIAL_ZOOM)
        else:
            moved = view.center.distance_exceeds(previous.view.center, RECENTER_TOLERANCE)
            frame = RenderedMap(
                view=view,
                zoom=FOCUS_ZOOM if moved else previous.zoom,
                fly_to=moved,
                revision=previous.revision + 1,
            )
        self._frame = frame
        logger.debug(
            "map_rendered",
            revision=frame.revision,
            markers=len(view.markers),
            fly_to=frame.fly_to,
        )
