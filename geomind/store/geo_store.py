"""
Shop directory: curated legend shops plus owner-registered vendors.

Legend shops are fixed at construction. Vendor shops are appended by
registration and persisted in full, synchronously, after every change. The
vendor record is read once at startup; a missing or corrupt record starts the
directory with no vendors instead of failing, and malformed entries inside an
otherwise readable list are skipped one by one.

Usage:
    store = GeoStore(JsonFileStorage(path))
    shop = store.register("Anna Tiffin", "Adyar, Chennai", LatLng(lat=13.0, lng=80.25), [])
    store.filter("mess")
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Optional, Union
from uuid import uuid4

import structlog
from pydantic import ValidationError as PydanticValidationError

from geomind.core.exceptions import ShopNotFoundError, StorageError, ValidationError
from geomind.models.schemas import LatLng, MenuItem, Shop, VendorStatus
from geomind.store.legend import LEGEND_SHOPS
from geomind.store.storage import KeyValueStorage

logger = structlog.get_logger(__name__)

DEFAULT_STORAGE_KEY = "geomind_vendors"

MenuInput = Union[MenuItem, dict[str, Any]]


@dataclass(frozen=True)
class ShopSections:
    """Legend and vendor shops kept apart for display."""

    legend: list[Shop]
    vendors: list[Shop]

    def all(self) -> list[Shop]:
        return [*self.legend, *self.vendors]


def _new_vendor_id() -> str:
    return f"vendor-{uuid4().hex[:12]}"


def _require_text(field: str, value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise ValidationError(field, f"{field.capitalize()} is required", value)
    return value.strip()


def _validate_menu(items: Iterable[MenuInput]) -> list[MenuItem]:
    menu: list[MenuItem] = []
    for index, raw in enumerate(items):
        try:
            item = raw if isinstance(raw, MenuItem) else MenuItem.model_validate(raw)
        except PydanticValidationError as e:
            raise ValidationError("menu", f"Menu item {index + 1} is malformed", raw) from e
        if not item.name.strip():
            raise ValidationError("menu", f"Menu item {index + 1} needs a name", raw)
        if item.price < 0:
            raise ValidationError("menu", f"Menu item {index + 1} has a negative price", raw)
        menu.append(MenuItem(name=item.name.strip(), price=item.price))
    return menu


class GeoStore:
    """
    Holds every known shop and persists the vendor set.

    ``list_all()`` always returns legend shops in their fixed order followed by
    vendors in registration order. Ids are unique across both sets.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        legend: Sequence[Shop] = LEGEND_SHOPS,
        storage_key: str = DEFAULT_STORAGE_KEY,
        id_factory: Callable[[], str] = _new_vendor_id,
    ) -> None:
        self._storage = storage
        self._storage_key = storage_key
        self._id_factory = id_factory
        self._legend: list[Shop] = list(legend)
        self._vendors: list[Shop] = []

        if len({shop.id for shop in self._legend}) != len(self._legend):
            raise ValueError("Legend shop ids must be unique")

        self._vendors = self._load_vendors()
        logger.info(
            "geo_store_loaded",
            legend_count=len(self._legend),
            vendor_count=len(self._vendors),
        )

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _load_vendors(self) -> list[Shop]:
        try:
            raw = self._storage.read(self._storage_key)
        except StorageError as e:
            logger.warning("vendor_record_unreadable", error=str(e))
            return []

        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("vendor_record_malformed", type=type(raw).__name__)
            return []

        vendors: list[Shop] = []
        seen = {shop.id for shop in self._legend}
        for index, entry in enumerate(raw):
            try:
                shop = Shop.model_validate(entry)
            except PydanticValidationError as e:
                logger.warning("vendor_entry_malformed", index=index, error=str(e))
                continue
            if shop.id in seen:
                logger.warning("vendor_record_duplicate_id", shop_id=shop.id)
                continue
            seen.add(shop.id)
            vendors.append(shop if shop.is_vendor else shop.model_copy(update={"is_vendor": True}))
        return vendors

    def _persist(self, vendors: list[Shop]) -> None:
        self._storage.write(
            self._storage_key,
            [shop.model_dump(mode="json") for shop in vendors],
        )

    def _commit(self, vendors: list[Shop]) -> None:
        """Persist ``vendors`` and make it the live vendor set."""
        self._persist(vendors)
        self._vendors = vendors

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def legend(self) -> list[Shop]:
        return list(self._legend)

    @property
    def vendors(self) -> list[Shop]:
        return list(self._vendors)

    def list_all(self) -> list[Shop]:
        """Legend shops followed by vendor shops."""
        return [*self._legend, *self._vendors]

    def get(self, shop_id: str) -> Shop:
        """Look up a shop by id.

        Raises:
            ShopNotFoundError: If no legend or vendor shop has this id.
        """
        for shop in self.list_all():
            if shop.id == shop_id:
                return shop
        raise ShopNotFoundError(shop_id)

    def filter_sections(self, query: str) -> ShopSections:
        """Filter legend and vendor shops independently."""
        needle = (query or "").strip().lower()
        if not needle:
            return ShopSections(legend=self.legend, vendors=self.vendors)
        return ShopSections(
            legend=[shop for shop in self._legend if shop.matches(needle)],
            vendors=[shop for shop in self._vendors if shop.matches(needle)],
        )

    def filter(self, query: str) -> list[Shop]:
        """Case-insensitive substring search over name and address.

        An empty query returns every shop in ``list_all()`` order.
        """
        return self.filter_sections(query).all()

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def register(
        self,
        name: str,
        address: str,
        coords: LatLng,
        menu_items: Iterable[MenuInput] = (),
        *,
        emoji: Optional[str] = None,
        cuisine: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Shop:
        """
        Register a new vendor shop and persist the vendor set.

        Args:
            name: Shop name; must not be blank.
            address: Street address; must not be blank.
            coords: Marker position, usually the current location cursor.
            menu_items: Ordered menu entries.

        Returns:
            The created Shop, offline until the owner goes live.

        Raises:
            ValidationError: If name, address or a menu item is invalid.
            StorageError: If the vendor set could not be persisted; the
                registration is not kept.
        """
        clean_name = _require_text("name", name)
        clean_address = _require_text("address", address)
        menu = _validate_menu(menu_items)

        shop = Shop(
            id=self._fresh_id(),
            name=clean_name,
            address=clean_address,
            coords=coords,
            is_vendor=True,
            status=VendorStatus.OFFLINE,
            menu=menu,
            emoji=emoji,
            cuisine=cuisine,
            description=description,
        )
        self._commit([*self._vendors, shop])

        logger.info("vendor_registered", shop_id=shop.id, name=shop.name, menu_items=len(menu))
        return shop

    def set_status(self, shop_id: str, status: VendorStatus) -> Shop:
        """
        Change a vendor's live status and persist the vendor set.

        Raises:
            ShopNotFoundError: If the id is unknown.
            ValidationError: If the shop is a legend shop.
        """
        shop = self.get(shop_id)
        if not shop.is_vendor:
            raise ValidationError("status", "Only vendor shops have a live status", shop_id)
        if shop.status == status:
            return shop

        updated = shop.model_copy(update={"status": status})
        self._commit([updated if s.id == shop_id else s for s in self._vendors])

        logger.info("vendor_status_changed", shop_id=shop_id, status=status.value)
        return updated

    def _fresh_id(self) -> str:
        taken = {shop.id for shop in self.list_all()}
        shop_id = self._id_factory()
        while shop_id in taken:
            shop_id = self._id_factory()
        return shop_id
