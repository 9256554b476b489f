"""
Core Infrastructure.

- exceptions: GeoMindError hierarchy
- container: dependency container wiring the application from settings
"""

from geomind.core.exceptions import (
    EmptyInputError,
    GatewayError,
    GeoMindError,
    InitializationError,
    InvalidTransitionError,
    NotificationNotFoundError,
    ShopNotFoundError,
    StorageError,
    ValidationError,
)

__all__ = [
    "EmptyInputError",
    "GatewayError",
    "GeoMindError",
    "InitializationError",
    "InvalidTransitionError",
    "NotificationNotFoundError",
    "ShopNotFoundError",
    "StorageError",
    "ValidationError",
]
