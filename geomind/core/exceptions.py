"""
Core exception hierarchy for GeoMind.

Every error raised by the store, chat log, gateway and controller derives from
GeoMindError. None of them is fatal to the process: validation errors are
reported back to the input that caused them, blank chat input is ignored and
gateway failures turn into an apology message in the conversation.
"""

from typing import Any, Optional


# =============================================================================
# Base Exceptions
# =============================================================================


class GeoMindError(Exception):
    """Base exception for all GeoMind errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# Initialization Errors
# =============================================================================


class InitializationError(GeoMindError):
    """Raised when a critical component fails to initialize."""

    def __init__(self, component: str, message: str, details: Optional[dict[str, Any]] = None):
        self.component = component
        super().__init__(f"[{component}] {message}", details)


# =============================================================================
# Input Errors
# =============================================================================


class ValidationError(GeoMindError):
    """
    Raised when registration input is rejected.

    Carries the name of the offending input field so the caller can report
    the problem next to it.
    """

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.value = value
        super().__init__(message, {"field": field})


class EmptyInputError(GeoMindError):
    """Raised when a chat submission is blank after trimming."""

    def __init__(self, message: str = "Chat message is empty"):
        super().__init__(message)


# =============================================================================
# Lookup / State Errors
# =============================================================================


class ShopNotFoundError(GeoMindError):
    """Raised when a shop id is not known to the store."""

    def __init__(self, shop_id: str):
        self.shop_id = shop_id
        super().__init__(f"Shop not found: {shop_id}", {"shop_id": shop_id})


class NotificationNotFoundError(GeoMindError):
    """Raised when a live notification id is unknown or already dismissed."""

    def __init__(self, notification_id: str):
        self.notification_id = notification_id
        super().__init__(
            f"Notification not found: {notification_id}",
            {"notification_id": notification_id},
        )


class InvalidTransitionError(GeoMindError):
    """Raised when an action is not allowed in the controller's current state."""

    def __init__(self, action: str, mode: str):
        self.action = action
        self.mode = mode
        super().__init__(
            f"Cannot {action} while {mode}",
            {"action": action, "mode": mode},
        )


# =============================================================================
# Collaborator Errors
# =============================================================================


class GatewayError(GeoMindError):
    """Raised when the assistant gateway fails (network, API or parse failure)."""

    pass


class StorageError(GeoMindError):
    """Raised when durable storage cannot be read or written."""

    pass
