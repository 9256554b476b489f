"""The single current-focus coordinate shared by map, registration and assistant."""

import structlog

from geomind.models.schemas import LatLng

logger = structlog.get_logger(__name__)

DEFAULT_CENTER = LatLng(lat=13.0827, lng=80.2707)


class LocationCursor:
    """
    Holds the current focus coordinate.

    ``set`` is the only mutator. Consumers read ``current`` whenever they need
    the location instead of keeping a copy, so a completed ``set`` is visible
    to the next render or assistant query.
    """

    def __init__(self, initial: LatLng = DEFAULT_CENTER) -> None:
        self._current = initial

    @property
    def current(self) -> LatLng:
        return self._current

    def set(self, coords: LatLng) -> LatLng:
        """Move the cursor."""
        self._current = coords
        logger.debug("location_cursor_moved", lat=coords.lat, lng=coords.lng)
        return coords
