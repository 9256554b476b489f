"""Pydantic models for GeoMind core entities."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class VendorStatus(str, Enum):
    """Live status of a vendor shop."""
    ONLINE = "online"
    OFFLINE = "offline"


class ChatRole(str, Enum):
    """Author of a chat message."""
    USER = "user"
    ASSISTANT = "assistant"


# =============================================================================
# Geography
# =============================================================================


class LatLng(BaseModel):
    """A latitude/longitude pair in degrees.

    Ranges are not validated; whatever the map reports is accepted.
    """

    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float

    def distance_exceeds(self, other: "LatLng", tolerance: float) -> bool:
        """True when either axis differs from ``other`` by more than ``tolerance``."""
        return abs(self.lat - other.lat) > tolerance or abs(self.lng - other.lng) > tolerance


# =============================================================================
# Shops
# =============================================================================


class MenuItem(BaseModel):
    """A single dish on a vendor menu."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Dish name")
    price: float = Field(..., description="Price in local currency")


class Shop(BaseModel):
    """A point of interest: either a curated legend shop or a registered vendor."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique shop identifier")
    name: str = Field(..., description="Display name")
    address: str = Field(default="", description="Short street address")
    coords: LatLng = Field(..., description="Marker position")
    is_vendor: bool = Field(default=False, description="Owner-registered vendor entry")
    status: Optional[VendorStatus] = Field(None, description="Vendor live status")
    menu: list[MenuItem] = Field(default_factory=list, description="Ordered menu")
    emoji: Optional[str] = Field(None, description="Marker emoji")
    cuisine: Optional[str] = Field(None, description="Cuisine or specialty")
    description: Optional[str] = Field(None, description="One-line story")

    def matches(self, needle: str) -> bool:
        """Case-insensitive substring match on name and address.

        ``needle`` must already be lower-cased.
        """
        return needle in self.name.lower() or needle in self.address.lower()


# =============================================================================
# Chat
# =============================================================================


class CitationLink(BaseModel):
    """A source link attached to an assistant reply."""

    model_config = ConfigDict(frozen=True)

    title: str
    uri: str


class ChatMessage(BaseModel):
    """One turn of the conversation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Message identifier")
    role: ChatRole = Field(..., description="Message author")
    content: str = Field(default="", description="Message text")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the message was created",
    )
    is_loading: bool = Field(default=False, description="Assistant reply still pending")
    citations: list[CitationLink] = Field(default_factory=list, description="Source links")


# =============================================================================
# Notifications
# =============================================================================


class LiveNotification(BaseModel):
    """Announces that a vendor has gone live; opening it selects the vendor."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Notification identifier")
    title: str = Field(default="LIVE", description="Headline")
    message: str = Field(..., description="Notification text")
    emoji: Optional[str] = Field(None, description="Vendor marker emoji")
    coords: LatLng = Field(..., description="Where the vendor is")
    shop_id: str = Field(..., description="Vendor to select when opened")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the vendor went live",
    )
