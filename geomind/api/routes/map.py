"""Map endpoints for the GeoMind API.

The browser map posts interactions as events and renders the frame returned.
Events go through the controller's event channel; the response is sent once
the controller has handled the event.
"""

from typing import Union

import structlog
from fastapi import APIRouter, Depends, HTTPException

from geomind.api.dependencies import get_controller
from geomind.api.models import MapEventRequest, MapResponse, ValidationErrorResponse
from geomind.controller.app_controller import AppController
from geomind.core.exceptions import ValidationError
from geomind.map.events import LocationChanged, ShopClicked

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/map", tags=["Map"])


def _to_event(request: MapEventRequest) -> Union[LocationChanged, ShopClicked]:
    if request.type == "location_changed":
        if request.coords is None:
            raise ValidationError("coords", "coords is required for location_changed")
        return LocationChanged(coords=request.coords, source=request.source)
    if not request.shop_id:
        raise ValidationError("shop_id", "shop_id is required for shop_clicked")
    return ShopClicked(shop_id=request.shop_id)


def _frame(controller: AppController) -> MapResponse:
    frame = controller.map_adapter.frame
    if frame is None:
        raise HTTPException(status_code=503, detail="Map has not been rendered yet")
    return MapResponse(frame=frame)


@router.get("", response_model=MapResponse, summary="Current map frame")
async def get_map(controller: AppController = Depends(get_controller)) -> MapResponse:
    return _frame(controller)


@router.post(
    "/events",
    response_model=MapResponse,
    summary="Report a map interaction",
    description=(
        "location_changed moves the location cursor (base-map click, cursor "
        "drag or GPS fix); shop_clicked selects a shop marker."
    ),
    responses={422: {"model": ValidationErrorResponse, "description": "Malformed event"}},
)
async def post_map_event(
    request: MapEventRequest,
    controller: AppController = Depends(get_controller),
) -> MapResponse:
    if not controller.is_running:
        raise HTTPException(status_code=503, detail="Map event consumer not running")

    event = _to_event(request)
    controller.channel.emit(event)
    await controller.channel.drain()

    return _frame(controller)
