"""
Shop Directory and Location State.

- geo_store: legend + vendor shops with synchronous persistence
- storage: durable key/value backends (JSON file, in-memory)
- location: the shared location cursor
- legend: curated legend shops
"""

from geomind.store.geo_store import GeoStore, ShopSections
from geomind.store.legend import LEGEND_SHOPS
from geomind.store.location import DEFAULT_CENTER, LocationCursor
from geomind.store.storage import InMemoryStorage, JsonFileStorage, KeyValueStorage

__all__ = [
    "DEFAULT_CENTER",
    "GeoStore",
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorage",
    "LEGEND_SHOPS",
    "LocationCursor",
    "ShopSections",
]
