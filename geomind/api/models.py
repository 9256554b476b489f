"""Pydantic models for API requests and responses.

Domain models (Shop, ChatMessage, MapView) are returned as-is; this module
holds the request bodies and the wrappers around them.
"""

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from geomind.controller.app_controller import ControllerMode
from geomind.map.adapter import RenderedMap
from geomind.models.schemas import (
    ChatMessage,
    LatLng,
    LiveNotification,
    MenuItem,
    Shop,
    VendorStatus,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Shop Models
# =============================================================================


class ShopRegistration(BaseModel):
    """Request model for registering a vendor shop.

    Blank names and addresses are rejected by the store, not here, so the
    error comes back naming the field.
    """

    name: str = Field(
        default="",
        max_length=120,
        description="Shop name",
        json_schema_extra={"example": "Anna Tiffin Cart"},
    )
    address: str = Field(
        default="",
        max_length=255,
        description="Street address",
        json_schema_extra={"example": "2nd Main Rd, Adyar, Chennai"},
    )
    coords: Optional[LatLng] = Field(
        None,
        description="Marker position; defaults to the current location cursor",
    )
    menu: list[MenuItem] = Field(default_factory=list, description="Ordered menu")
    emoji: Optional[str] = Field(None, max_length=8, description="Marker emoji")
    cuisine: Optional[str] = Field(None, max_length=80, description="Cuisine or specialty")
    description: Optional[str] = Field(None, max_length=280, description="One-line story")


class ShopStatusUpdate(BaseModel):
    """Request model for taking a vendor online or offline."""

    status: VendorStatus = Field(..., description="New live status")


class ShopListResponse(BaseModel):
    """Filtered shops, legend and vendors kept apart."""

    query: str = Field(default="", description="Search text applied")
    legend: list[Shop] = Field(..., description="Matching legend shops")
    vendors: list[Shop] = Field(..., description="Matching vendor shops")
    total: int = Field(..., description="Number of matching shops")


# =============================================================================
# Session Models
# =============================================================================


class SessionResponse(BaseModel):
    """Controller state and location cursor."""

    mode: ControllerMode = Field(..., description="Current UI mode")
    selected_shop: Optional[Shop] = Field(None, description="Shop in focus")
    location: LatLng = Field(..., description="Location cursor")
    chat_message_id: Optional[str] = Field(
        None,
        description="Placeholder id of the assistant reply triggered by a selection",
    )
    notifications: list[LiveNotification] = Field(
        default_factory=list,
        description="Open live-vendor notifications, newest first",
    )


class NotificationListResponse(BaseModel):
    """Open live-vendor notifications."""

    notifications: list[LiveNotification] = Field(..., description="Newest first")


# =============================================================================
# Chat Models
# =============================================================================


class ChatSubmission(BaseModel):
    """Request model for a chat message."""

    text: str = Field(default="", max_length=2000, description="Message text")


class ChatSubmissionResponse(BaseModel):
    """Result of a chat submission."""

    accepted: bool = Field(..., description="False when the text was blank and ignored")
    message_id: Optional[str] = Field(None, description="Id of the user message")
    placeholder_id: Optional[str] = Field(None, description="Id of the pending reply")


class ChatHistoryResponse(BaseModel):
    """Full conversation."""

    messages: list[ChatMessage] = Field(..., description="Messages in order")
    pending: int = Field(..., description="Replies still loading")


# =============================================================================
# Map Models
# =============================================================================


class MapEventRequest(BaseModel):
    """A map interaction reported by the browser."""

    type: Literal["location_changed", "shop_clicked"] = Field(..., description="Event type")
    coords: Optional[LatLng] = Field(None, description="Required for location_changed")
    source: Literal["click", "drag", "gps"] = Field(default="click")
    shop_id: Optional[str] = Field(None, description="Required for shop_clicked")


class MapResponse(BaseModel):
    """The current map frame."""

    frame: RenderedMap


# =============================================================================
# Health Models
# =============================================================================


class HealthStatus(BaseModel):
    """Health status for a single component."""

    status: Literal["healthy", "degraded", "unhealthy"] = Field(..., description="Component status")
    message: Optional[str] = Field(None, description="Status details")


class HealthCheckResponse(BaseModel):
    """Response for the health check endpoint."""

    status: Literal["healthy", "degraded", "unhealthy"] = Field(..., description="Overall status")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(..., description="Check timestamp")
    services: dict[str, HealthStatus] = Field(..., description="Component statuses")
    uptime_seconds: Optional[float] = Field(None, description="Server uptime")


# =============================================================================
# Error Models
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    path: Optional[str] = Field(None, description="Request path that caused the error")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error timestamp")


class ValidationErrorDetail(BaseModel):
    """Details for validation errors."""

    field: str = Field(..., description="Field that failed validation")
    message: str = Field(..., description="Validation error message")
    value: Optional[Any] = Field(None, description="Invalid value provided")


class ValidationErrorResponse(BaseModel):
    """Response for validation errors."""

    error: str = Field(default="validation_error", description="Error type")
    message: str = Field(default="Request validation failed", description="Error message")
    errors: list[ValidationErrorDetail] = Field(..., description="List of validation errors")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error timestamp")
