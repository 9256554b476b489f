"""
Data Models.

Pydantic models shared by the store, chat log, gateway and API layers.
"""

from geomind.models.schemas import (
    ChatMessage,
    ChatRole,
    CitationLink,
    LatLng,
    LiveNotification,
    MenuItem,
    Shop,
    VendorStatus,
)

__all__ = [
    "ChatMessage",
    "ChatRole",
    "CitationLink",
    "LatLng",
    "LiveNotification",
    "MenuItem",
    "Shop",
    "VendorStatus",
]
