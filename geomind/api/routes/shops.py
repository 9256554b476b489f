"""Shop directory endpoints for the GeoMind API.

Listing and searching shops, vendor registration and vendor live status.
"""

import structlog
from fastapi import APIRouter, Depends, Query

from geomind.api.dependencies import get_controller
from geomind.api.models import (
    ErrorResponse,
    ShopListResponse,
    ShopRegistration,
    ShopStatusUpdate,
    ValidationErrorResponse,
)
from geomind.controller.app_controller import AppController
from geomind.models.schemas import Shop

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/shops", tags=["Shops"])


@router.get(
    "",
    response_model=ShopListResponse,
    summary="List shops",
    description="List legend and vendor shops, optionally filtered by name or address.",
)
async def list_shops(
    q: str = Query(default="", max_length=120, description="Case-insensitive search text"),
    controller: AppController = Depends(get_controller),
) -> ShopListResponse:
    sections = controller.store.filter_sections(q)
    return ShopListResponse(
        query=q,
        legend=sections.legend,
        vendors=sections.vendors,
        total=len(sections.legend) + len(sections.vendors),
    )


@router.get(
    "/{shop_id}",
    response_model=Shop,
    summary="Get a shop",
    responses={404: {"model": ErrorResponse, "description": "Shop not found"}},
)
async def get_shop(
    shop_id: str,
    controller: AppController = Depends(get_controller),
) -> Shop:
    return controller.store.get(shop_id)


@router.post(
    "",
    response_model=Shop,
    status_code=201,
    summary="Register a vendor",
    description=(
        "Register a vendor shop from the open registration form. "
        "Coordinates default to the current location cursor."
    ),
    responses={
        201: {"description": "Vendor registered"},
        409: {"model": ErrorResponse, "description": "Registration is not open"},
        422: {"model": ValidationErrorResponse, "description": "Invalid input field"},
    },
)
async def register_shop(
    registration: ShopRegistration,
    controller: AppController = Depends(get_controller),
) -> Shop:
    """
    Register a vendor shop.

    **Parameters:**
    - **name**: Shop name (required)
    - **address**: Street address (required)
    - **coords**: Marker position; defaults to the location cursor
    - **menu**: Ordered list of `{name, price}` items
    """
    return controller.register_vendor(
        registration.name,
        registration.address,
        registration.menu,
        registration.coords,
        emoji=registration.emoji,
        cuisine=registration.cuisine,
        description=registration.description,
    )


@router.patch(
    "/{shop_id}/status",
    response_model=Shop,
    summary="Set vendor live status",
    responses={
        404: {"model": ErrorResponse, "description": "Shop not found"},
        422: {"model": ValidationErrorResponse, "description": "Shop is not a vendor"},
    },
)
async def update_shop_status(
    shop_id: str,
    update: ShopStatusUpdate,
    controller: AppController = Depends(get_controller),
) -> Shop:
    return controller.set_vendor_status(shop_id, update.status)
