"""Unit tests for map markers, frames and the event channel."""

import pytest
from pydantic import TypeAdapter

from geomind.map.adapter import (
    FOCUS_ZOOM,
    INITIAL_ZOOM,
    MapMarker,
    MapView,
    SnapshotMapAdapter,
)
from geomind.map.events import LocationChanged, MapEvent, MapEventChannel, ShopClicked
from geomind.models.schemas import LatLng, Shop, VendorStatus
from geomind.store.legend import LEGEND_SHOPS

CENTRE = LatLng(lat=13.0827, lng=80.2707)


def view_at(lat: float, lng: float) -> MapView:
    return MapView(center=LatLng(lat=lat, lng=lng))


class TestMapMarker:
    """Test marker construction from shops."""

    def test_legend_marker(self):
        marker = MapMarker.from_shop(LEGEND_SHOPS[0])

        assert marker.kind == "legend"
        assert marker.live is False
        assert marker.label == "Jannal Kadai"

    def test_online_vendor_is_live(self):
        shop = Shop(
            id="vendor-1",
            name="Anna Tiffin",
            address="Adyar",
            coords=CENTRE,
            is_vendor=True,
            status=VendorStatus.ONLINE,
        )

        marker = MapMarker.from_shop(shop)

        assert marker.kind == "vendor"
        assert marker.live is True


class TestSnapshotMapAdapter:
    """Test camera behaviour across frames."""

    def test_no_frame_before_render(self):
        assert SnapshotMapAdapter().frame is None

    def test_first_frame_at_initial_zoom(self):
        adapter = SnapshotMapAdapter()

        adapter.render(MapView(center=CENTRE))

        assert adapter.frame.zoom == INITIAL_ZOOM
        assert adapter.frame.fly_to is False
        assert adapter.frame.revision == 0

    def test_moved_centre_flies_to_focus_zoom(self):
        adapter = SnapshotMapAdapter()
        adapter.render(MapView(center=CENTRE))

        adapter.render(view_at(13.0336, 80.2697))

        assert adapter.frame.fly_to is True
        assert adapter.frame.zoom == FOCUS_ZOOM
        assert adapter.frame.revision == 1

    def test_tiny_move_keeps_camera(self):
        adapter = SnapshotMapAdapter()
        adapter.render(MapView(center=CENTRE))

        adapter.render(view_at(CENTRE.lat + 0.0005, CENTRE.lng))

        assert adapter.frame.fly_to is False
        assert adapter.frame.zoom == INITIAL_ZOOM


class TestMapEventChannel:
    """Test event parsing and delivery."""

    def test_events_parse_by_type(self):
        adapter = TypeAdapter(MapEvent)

        click = adapter.validate_python({"type": "shop_clicked", "shop_id": "seed-1"})
        move = adapter.validate_python(
            {"type": "location_changed", "coords": {"lat": 1.0, "lng": 2.0}}
        )

        assert isinstance(click, ShopClicked)
        assert isinstance(move, LocationChanged)
        assert move.source == "click"

    @pytest.mark.asyncio
    async def test_events_delivered_in_order(self):
        channel = MapEventChannel()
        channel.emit(ShopClicked(shop_id="a"))
        channel.emit(ShopClicked(shop_id="b"))

        received = []
        stream = channel.events()
        for _ in range(2):
            event = await stream.__anext__()
            received.append(event.shop_id)
            channel.done()
        await stream.aclose()

        assert received == ["a", "b"]
        assert channel.backlog == 0
        await channel.drain()
