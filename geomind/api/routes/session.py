"""Session endpoints: shop selection and the registration form.

Each endpoint drives one controller transition and answers with the
resulting session state.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends

from geomind.api.dependencies import get_controller
from geomind.api.models import ErrorResponse, NotificationListResponse, SessionResponse
from geomind.controller.app_controller import AppController

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/session", tags=["Session"])


def _session(controller: AppController, chat_message_id: Optional[str] = None) -> SessionResponse:
    return SessionResponse(
        mode=controller.mode,
        selected_shop=controller.selected_shop,
        location=controller.cursor.current,
        chat_message_id=chat_message_id,
        notifications=controller.notifications,
    )


@router.get("", response_model=SessionResponse, summary="Current session state")
async def get_session(controller: AppController = Depends(get_controller)) -> SessionResponse:
    return _session(controller)


@router.post(
    "/select/{shop_id}",
    response_model=SessionResponse,
    summary="Select a shop",
    description=(
        "Focus a shop and move the location cursor to it. Legend shops also "
        "start an assistant reply about the place."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Shop not found"},
        409: {"model": ErrorResponse, "description": "Registration form is open"},
    },
)
async def select_shop(
    shop_id: str,
    controller: AppController = Depends(get_controller),
) -> SessionResponse:
    turn = controller.select_shop(shop_id)
    return _session(controller, turn.placeholder_id if turn else None)


@router.post("/deselect", response_model=SessionResponse, summary="Close the selected shop")
async def deselect(controller: AppController = Depends(get_controller)) -> SessionResponse:
    controller.deselect()
    return _session(controller)


@router.post(
    "/registration",
    response_model=SessionResponse,
    summary="Open the registration form",
)
async def open_registration(
    controller: AppController = Depends(get_controller),
) -> SessionResponse:
    controller.open_registration()
    return _session(controller)


@router.delete(
    "/registration",
    response_model=SessionResponse,
    summary="Cancel registration",
    responses={409: {"model": ErrorResponse, "description": "Registration is not open"}},
)
async def cancel_registration(
    controller: AppController = Depends(get_controller),
) -> SessionResponse:
    controller.cancel_registration()
    return _session(controller)


@router.get(
    "/notifications",
    response_model=NotificationListResponse,
    summary="Live-vendor notifications",
)
async def list_notifications(
    controller: AppController = Depends(get_controller),
) -> NotificationListResponse:
    return NotificationListResponse(notifications=controller.notifications)


@router.post(
    "/notifications/{notification_id}/open",
    response_model=SessionResponse,
    summary="Open a notification",
    description="Select the vendor that went live and dismiss the notification.",
    responses={
        404: {"model": ErrorResponse, "description": "Notification not found"},
        409: {"model": ErrorResponse, "description": "Registration form is open"},
    },
)
async def open_notification(
    notification_id: str,
    controller: AppController = Depends(get_controller),
) -> SessionResponse:
    turn = controller.open_notification(notification_id)
    return _session(controller, turn.placeholder_id if turn else None)
