"""
Application Controller.

Owns the shop directory, location cursor and chat log, and routes user
actions into them. The only state machine in the application lives here:

    idle ──shop click──▶ shop_selected ──deselect──▶ idle
    idle ──open registration──▶ registering ──cancel / register──▶ idle

Map interaction arrives as events on a MapEventChannel and is handled by one
consumer task. A base-map click or cursor drag moves the location cursor
without changing state, so a selected shop stays selected. Selecting a legend
shop also asks the assistant about it; vendor shops are selected silently.
A vendor going live posts a notification; opening it selects that vendor.

After every change the controller pushes a fresh MapView to the map adapter.
"""

import asyncio
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union
from uuid import uuid4

import structlog

from geomind.chat.chat_log import ChatLog, SubmittedTurn
from geomind.core.exceptions import (
    EmptyInputError,
    InvalidTransitionError,
    NotificationNotFoundError,
    ShopNotFoundError,
    ValidationError,
)
from geomind.gateway.prompts import build_shop_context, build_shop_prompt
from geomind.map.adapter import MapAdapter, MapMarker, MapView
from geomind.map.events import LocationChanged, MapEventChannel, ShopClicked
from geomind.models.schemas import LatLng, LiveNotification, Shop, VendorStatus
from geomind.store.geo_store import GeoStore, MenuInput
from geomind.store.location import LocationCursor

logger = structlog.get_logger(__name__)


class ControllerMode(str, Enum):
    """Top-level UI state."""
    IDLE = "idle"
    SHOP_SELECTED = "shop_selected"
    REGISTERING = "registering"


@dataclass(frozen=True)
class ControllerState:
    """Current mode plus the selected shop when in SHOP_SELECTED."""

    mode: ControllerMode = ControllerMode.IDLE
    shop: Optional[Shop] = None


IDLE = ControllerState()


def _new_notification_id() -> str:
    return uuid4().hex


class AppController:
    """
    Composes GeoStore, LocationCursor and ChatLog behind user actions.

    Args:
        store: Shop directory.
        cursor: Shared location cursor.
        chat: Conversation log; expected to read ``cursor`` and the store
            context itself at submit time.
        map_adapter: Receives a MapView after every change.
        channel: Map event channel consumed by ``run``.
        notification_id_factory: Id generator for live notifications.
    """

    def __init__(
        self,
        store: GeoStore,
        cursor: LocationCursor,
        chat: ChatLog,
        map_adapter: MapAdapter,
        channel: Optional[MapEventChannel] = None,
        notification_id_factory: Callable[[], str] = _new_notification_id,
    ) -> None:
        self.store = store
        self.cursor = cursor
        self.chat = chat
        self.map_adapter = map_adapter
        self.channel = channel or MapEventChannel()
        self._notification_id_factory = notification_id_factory
        self._notifications: list[LiveNotification] = []
        self._state = IDLE
        self._consumer: Optional[asyncio.Task[None]] = None
        self._render()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def mode(self) -> ControllerMode:
        return self._state.mode

    @property
    def selected_shop(self) -> Optional[Shop]:
        return self._state.shop

    def _transition(self, state: ControllerState, trigger: str) -> None:
        previous = self._state
        self._state = state
        logger.info(
            "controller_transition",
            trigger=trigger,
            from_mode=previous.mode.value,
            to_mode=state.mode.value,
            shop_id=state.shop.id if state.shop else None,
        )

    def map_view(self) -> MapView:
        return MapView(
            center=self.cursor.current,
            markers=[MapMarker.from_shop(shop) for shop in self.store.list_all()],
            selected_shop_id=self._state.shop.id if self._state.shop else None,
        )

    def _render(self) -> None:
        self.map_adapter.render(self.map_view())

    def shop_context(self) -> str:
        """Known-shop summary passed to the assistant."""
        return build_shop_context(self.store.list_all())

    # -------------------------------------------------------------------------
    # Shop selection
    # -------------------------------------------------------------------------

    def select_shop(self, shop_id: str) -> Optional[SubmittedTurn]:
        """
        Focus a shop: move the cursor to it and, for legend shops, ask the
        assistant about it.

        Returns:
            The submitted chat turn for legend shops, None for vendors.

        Raises:
            ShopNotFoundError: If the id is unknown.
            InvalidTransitionError: While registering.
        """
        if self._state.mode == ControllerMode.REGISTERING:
            raise InvalidTransitionError("select a shop", self._state.mode.value)
        shop = self.store.get(shop_id)
        if not shop.is_vendor:
            # The assistant reply needs a loop; fail before anything changes
            asyncio.get_running_loop()

        self.cursor.set(shop.coords)
        self._transition(ControllerState(ControllerMode.SHOP_SELECTED, shop), "shop_click")

        turn = None
        if not shop.is_vendor:
            turn = self.chat.submit(build_shop_prompt(shop))
        self._render()
        return turn

    def deselect(self) -> None:
        """Close the selected shop; a no-op when nothing is selected."""
        if self._state.mode != ControllerMode.SHOP_SELECTED:
            return
        self._transition(IDLE, "deselect")
        self._render()

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def open_registration(self) -> None:
        """Enter registration, closing any selected shop first."""
        if self._state.mode == ControllerMode.REGISTERING:
            return
        self._transition(ControllerState(ControllerMode.REGISTERING), "open_registration")
        self._render()

    def cancel_registration(self) -> None:
        if self._state.mode != ControllerMode.REGISTERING:
            raise InvalidTransitionError("cancel registration", self._state.mode.value)
        self._transition(IDLE, "cancel_registration")
        self._render()

    def register_vendor(
        self,
        name: str,
        address: str,
        menu_items: Iterable[MenuInput] = (),
        coords: Optional[LatLng] = None,
        *,
        emoji: Optional[str] = None,
        cuisine: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Shop:
        """
        Register a vendor at ``coords`` (default: the location cursor).

        On success the controller returns to idle without selecting the new
        shop. On ValidationError it stays in registration.

        Raises:
            InvalidTransitionError: Outside registration.
            ValidationError: If the input is rejected.
        """
        if self._state.mode != ControllerMode.REGISTERING:
            raise InvalidTransitionError("register a vendor", self._state.mode.value)

        try:
            shop = self.store.register(
                name,
                address,
                coords or self.cursor.current,
                menu_items,
                emoji=emoji,
                cuisine=cuisine,
                description=description,
            )
        except ValidationError as e:
            logger.info("registration_rejected", field=e.field, reason=e.message)
            raise

        self._transition(IDLE, "register")
        self._render()
        return shop

    def set_vendor_status(self, shop_id: str, status: VendorStatus) -> Shop:
        """
        Take a vendor online or offline.

        Going online from any other status posts a live notification.
        """
        previous = self.store.get(shop_id).status
        shop = self.store.set_status(shop_id, status)
        if self._state.shop is not None and self._state.shop.id == shop_id:
            self._state = ControllerState(ControllerMode.SHOP_SELECTED, shop)
        if status == VendorStatus.ONLINE and previous != VendorStatus.ONLINE:
            self._announce_live(shop)
        self._render()
        return shop

    # -------------------------------------------------------------------------
    # Live notifications
    # -------------------------------------------------------------------------

    @property
    def notifications(self) -> list[LiveNotification]:
        """Open notifications, newest first."""
        return list(self._notifications)

    def _announce_live(self, shop: Shop) -> LiveNotification:
        notification = LiveNotification(
            id=self._notification_id_factory(),
            message=f"{shop.name} is LIVE!",
            emoji=shop.emoji,
            coords=shop.coords,
            shop_id=shop.id,
        )
        self._notifications.insert(0, notification)
        logger.info("vendor_live_announced", notification_id=notification.id, shop_id=shop.id)
        return notification

    def open_notification(self, notification_id: str) -> Optional[SubmittedTurn]:
        """
        Select the notified shop and dismiss the notification.

        A notification whose shop no longer exists is dismissed without a
        selection. While registering the notification stays open.

        Raises:
            NotificationNotFoundError: If the id is unknown.
            InvalidTransitionError: While registering.
        """
        notification = next(
            (n for n in self._notifications if n.id == notification_id), None
        )
        if notification is None:
            raise NotificationNotFoundError(notification_id)

        turn = None
        try:
            turn = self.select_shop(notification.shop_id)
        except ShopNotFoundError:
            logger.warning(
                "notification_shop_missing",
                notification_id=notification_id,
                shop_id=notification.shop_id,
            )
        self._notifications = [n for n in self._notifications if n.id != notification_id]
        return turn

    # -------------------------------------------------------------------------
    # Chat and location
    # -------------------------------------------------------------------------

    def submit_chat(self, text: str) -> Optional[SubmittedTurn]:
        """Send user text to the assistant; blank text is ignored."""
        try:
            return self.chat.submit(text)
        except EmptyInputError:
            logger.debug("empty_chat_ignored")
            return None

    def set_location(self, coords: LatLng) -> None:
        """Move the cursor without touching the selection."""
        self.cursor.set(coords)
        self._render()

    # -------------------------------------------------------------------------
    # Map events
    # -------------------------------------------------------------------------

    def handle_map_event(self, event: Union[LocationChanged, ShopClicked]) -> None:
        if isinstance(event, LocationChanged):
            self.set_location(event.coords)
            return

        if self._state.mode == ControllerMode.REGISTERING:
            logger.info("shop_click_ignored", shop_id=event.shop_id, reason="registering")
            return
        try:
            self.select_shop(event.shop_id)
        except ShopNotFoundError:
            logger.warning("shop_click_unknown", shop_id=event.shop_id)

    async def run(self) -> None:
        """Consume map events until cancelled."""
        async for event in self.channel.events():
            try:
                self.handle_map_event(event)
            except Exception as e:
                logger.error(
                    "map_event_failed",
                    event_type=event.type,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            finally:
                self.channel.done()

    def start(self) -> None:
        """Start the map event consumer on the running loop."""
        if self._consumer is not None and not self._consumer.done():
            return
        self._consumer = asyncio.get_running_loop().create_task(
            self.run(), name="map-event-consumer"
        )
        logger.info("controller_started")

    async def stop(self) -> None:
        """Stop consuming events and cancel in-flight assistant replies."""
        if self._consumer is not None:
            self._consumer.cancel()
            try:
                await self._consumer
            except asyncio.CancelledError:
                pass
            self._consumer = None
        await self.chat.aclose()
        logger.info("controller_stopped")

    @property
    def is_running(self) -> bool:
        return self._consumer is not None and not self._consumer.done()
