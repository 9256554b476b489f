"""
Map Collaborator.

- events: typed map events and the channel delivering them to the controller
- adapter: MapView render model and the snapshot adapter served over HTTP
"""

from geomind.map.adapter import (
    FOCUS_ZOOM,
    INITIAL_ZOOM,
    MapAdapter,
    MapMarker,
    MapView,
    RenderedMap,
    SnapshotMapAdapter,
)
from geomind.map.events import LocationChanged, MapEvent, MapEventChannel, ShopClicked

__all__ = [
    "FOCUS_ZOOM",
    "INITIAL_ZOOM",
    "LocationChanged",
    "MapAdapter",
    "MapEvent",
    "MapEventChannel",
    "MapMarker",
    "MapView",
    "RenderedMap",
    "ShopClicked",
    "SnapshotMapAdapter",
]
