"""Unit tests for the shop directory."""

import pytest

from geomind.core.exceptions import ShopNotFoundError, StorageError, ValidationError
from geomind.models.schemas import LatLng, MenuItem, Shop, VendorStatus
from geomind.store.geo_store import DEFAULT_STORAGE_KEY, GeoStore
from geomind.store.legend import LEGEND_SHOPS
from geomind.store.storage import InMemoryStorage

from tests.conftest import counter_ids

HERE = LatLng(lat=13.05, lng=80.25)


class FailingStorage(InMemoryStorage):
    """Storage whose writes always fail."""

    def write(self, key, value):
        raise StorageError("disk full")


class TestListing:
    """Test listing and lookup."""

    def test_starts_with_legend_only(self, store):
        """An empty vendor record lists exactly the legend."""
        assert store.list_all() == list(LEGEND_SHOPS)
        assert store.vendors == []

    def test_registrations_extend_listing(self, store):
        """Length is legend count plus valid registrations."""
        for i in range(5):
            store.register(f"Cart {i}", f"Street {i}", HERE, [])

        assert len(store.list_all()) == len(LEGEND_SHOPS) + 5

    def test_vendors_follow_legend_in_insertion_order(self, store):
        """Legend first, then vendors as registered."""
        first = store.register("Anna Tiffin", "Adyar", HERE, [])
        second = store.register("Beach Sundal", "Marina", HERE, [])

        shops = store.list_all()
        assert shops[: len(LEGEND_SHOPS)] == list(LEGEND_SHOPS)
        assert shops[len(LEGEND_SHOPS):] == [first, second]

    def test_get_returns_shop(self, store):
        assert store.get("seed-1").name == "Jannal Kadai"

    def test_get_unknown_raises(self, store):
        with pytest.raises(ShopNotFoundError):
            store.get("nope")

    def test_duplicate_legend_ids_rejected(self, storage):
        with pytest.raises(ValueError):
            GeoStore(storage, legend=[LEGEND_SHOPS[0], LEGEND_SHOPS[0]])


class TestRegister:
    """Test vendor registration."""

    def test_creates_vendor(self, store):
        """Registered shops are offline vendors at the given coords."""
        shop = store.register(
            "Anna Tiffin",
            "Adyar, Chennai",
            HERE,
            [{"name": "Podi Dosa", "price": 60}],
            emoji="🥞",
            cuisine="Tiffin",
        )

        assert shop.id == "vendor-1"
        assert shop.is_vendor is True
        assert shop.status == VendorStatus.OFFLINE
        assert shop.coords == HERE
        assert shop.menu == [MenuItem(name="Podi Dosa", price=60)]
        assert shop.emoji == "🥞"

    def test_trims_name_and_address(self, store):
        shop = store.register("  Anna Tiffin ", " Adyar ", HERE, [])

        assert shop.name == "Anna Tiffin"
        assert shop.address == "Adyar"

    @pytest.mark.parametrize(
        "name,address,field",
        [("", "Adyar", "name"), ("   ", "Adyar", "name"), ("Anna", "", "address"), ("Anna", "\t", "address")],
    )
    def test_blank_fields_rejected(self, store, storage, name, address, field):
        """Blank name or address fails without touching the vendor set."""
        with pytest.raises(ValidationError) as exc_info:
            store.register(name, address, HERE, [])

        assert exc_info.value.field == field
        assert store.vendors == []
        assert storage.read(DEFAULT_STORAGE_KEY) is None

    @pytest.mark.parametrize(
        "item",
        [{"name": "", "price": 10}, {"name": "Vada", "price": -1}, {"price": 10}],
    )
    def test_bad_menu_items_rejected(self, store, item):
        with pytest.raises(ValidationError) as exc_info:
            store.register("Anna", "Adyar", HERE, [item])

        assert exc_info.value.field == "menu"
        assert store.vendors == []

    def test_persists_synchronously(self, store, storage):
        """The vendor record is written before register returns."""
        shop = store.register("Anna Tiffin", "Adyar", HERE, [])

        persisted = storage.read(DEFAULT_STORAGE_KEY)
        assert [entry["id"] for entry in persisted] == [shop.id]

    def test_storage_failure_keeps_vendor_set(self):
        """A failed write rolls the registration back."""
        store = GeoStore(FailingStorage())

        with pytest.raises(StorageError):
            store.register("Anna", "Adyar", HERE, [])

        assert store.vendors == []

    def test_fresh_ids_skip_taken_ids(self, storage):
        """Generated ids never collide with existing shops."""
        ids = iter(["seed-1", "vendor-x", "vendor-x", "vendor-y"])
        store = GeoStore(storage, id_factory=lambda: next(ids))

        first = store.register("A", "a", HERE, [])
        second = store.register("B", "b", HERE, [])

        assert first.id == "vendor-x"
        assert second.id == "vendor-y"


class TestFilter:
    """Test search."""

    def test_empty_query_returns_everything_in_order(self, store):
        store.register("Anna Tiffin", "Adyar", HERE, [])

        assert store.filter("") == store.list_all()
        assert store.filter("   ") == store.list_all()

    def test_case_insensitive_name_match(self, store):
        names = [shop.name for shop in store.filter("mess")]
        assert names == ["Amma Mess"]

    def test_matches_address(self, store):
        names = [shop.name for shop in store.filter("MYLAPORE")]
        assert names == ["Jannal Kadai"]

    def test_sections_filtered_independently(self, store):
        """Legend and vendor matches are never merged."""
        vendor = store.register("Chennai Chaat Cart", "Besant Nagar", HERE, [])

        sections = store.filter_sections("chennai")

        assert all(not shop.is_vendor for shop in sections.legend)
        assert sections.vendors == [vendor]
        assert sections.all() == store.filter("chennai")

    def test_no_match(self, store):
        assert store.filter("pizza") == []


class TestStatus:
    """Test vendor live status."""

    def test_set_status_persists(self, store, storage):
        shop = store.register("Anna", "Adyar", HERE, [])

        updated = store.set_status(shop.id, VendorStatus.ONLINE)

        assert updated.status == VendorStatus.ONLINE
        assert store.get(shop.id).status == VendorStatus.ONLINE
        assert storage.read(DEFAULT_STORAGE_KEY)[0]["status"] == "online"

    def test_status_change_keeps_order(self, store):
        first = store.register("A", "a", HERE, [])
        second = store.register("B", "b", HERE, [])

        store.set_status(first.id, VendorStatus.ONLINE)

        assert [s.id for s in store.vendors] == [first.id, second.id]

    def test_legend_shop_has_no_status(self, store):
        with pytest.raises(ValidationError):
            store.set_status("seed-1", VendorStatus.ONLINE)

    def test_unknown_shop(self, store):
        with pytest.raises(ShopNotFoundError):
            store.set_status("vendor-404", VendorStatus.ONLINE)


class TestPersistence:
    """Test reloading the vendor record."""

    def test_restart_reproduces_listing(self, store, storage):
        """A new store over the same storage lists the same shops."""
        for name in ["Anna Tiffin", "Beach Sundal", "Chaat Corner"]:
            store.register(name, "Chennai", HERE, [{"name": "Special", "price": 50}])

        restarted = GeoStore(storage, id_factory=counter_ids("other"))

        assert restarted.list_all() == store.list_all()

    @pytest.mark.parametrize("raw", ["not a list", {"id": "x"}, [{"id": "x"}], 42])
    def test_malformed_record_starts_empty(self, raw):
        store = GeoStore(InMemoryStorage({DEFAULT_STORAGE_KEY: raw}))

        assert store.vendors == []

    def test_corrupt_file_starts_empty(self, tmp_path):
        from geomind.store.storage import JsonFileStorage

        path = tmp_path / "state.json"
        path.write_text("{broken", encoding="utf-8")

        store = GeoStore(JsonFileStorage(path))

        assert store.list_all() == list(LEGEND_SHOPS)

    def test_ids_colliding_with_legend_are_dropped(self):
        clash = Shop(id="seed-1", name="Impostor", address="x", coords=HERE, is_vendor=True)
        ok = Shop(id="vendor-9", name="Real", address="y", coords=HERE, is_vendor=True)
        storage = InMemoryStorage(
            {DEFAULT_STORAGE_KEY: [clash.model_dump(mode="json"), ok.model_dump(mode="json")]}
        )

        store = GeoStore(storage)

        assert store.vendors == [ok]

    def test_malformed_entry_skipped_valid_vendors_kept(self, storage):
        """One bad entry does not cost the valid vendors around it."""
        first = Shop(id="vendor-1", name="Anna Tiffin", address="Adyar", coords=HERE, is_vendor=True)
        second = Shop(id="vendor-2", name="Beach Sundal", address="Marina", coords=HERE, is_vendor=True)
        storage.write(
            DEFAULT_STORAGE_KEY,
            [first.model_dump(mode="json"), {"id": "broken"}, second.model_dump(mode="json")],
        )

        store = GeoStore(storage, id_factory=counter_ids("new"))
        assert store.vendors == [first, second]

        store.register("Chaat Corner", "Besant Nagar", HERE, [])

        persisted = [entry["id"] for entry in storage.read(DEFAULT_STORAGE_KEY)]
        assert persisted == ["vendor-1", "vendor-2", "new-1"]
