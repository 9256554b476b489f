"""Health check endpoints for the GeoMind API.

Reports on durable storage, the assistant gateway and the map event consumer.
"""

from datetime import datetime, timezone
import time
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException

from geomind import __version__
from geomind.api.dependencies import get_container
from geomind.api.models import HealthCheckResponse, HealthStatus
from geomind.core.container import DependencyContainer
from geomind.gateway.assistant import UnconfiguredAssistantGateway

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Health"])

# Track server start time for uptime calculation
_server_start_time: Optional[float] = None


def set_server_start_time() -> None:
    """Set the server start time. Called on application startup."""
    global _server_start_time
    _server_start_time = time.time()


def get_uptime_seconds() -> Optional[float]:
    """Get server uptime in seconds."""
    if _server_start_time is None:
        return None
    return time.time() - _server_start_time


def check_storage_health(container: DependencyContainer) -> HealthStatus:
    """Check that the vendor record can be written."""
    try:
        if container.storage.is_writable():
            return HealthStatus(status="healthy", message="Storage writable")
        return HealthStatus(status="unhealthy", message="Storage is read-only")
    except Exception as e:
        logger.error("storage_health_check_failed", error=str(e))
        return HealthStatus(
            status="unhealthy",
            message=f"Storage check failed: {str(e)[:100]}",
        )


def check_assistant_health(container: DependencyContainer) -> HealthStatus:
    """The assistant only degrades the service; chat still answers with an apology."""
    if isinstance(container.gateway, UnconfiguredAssistantGateway):
        return HealthStatus(status="degraded", message="No Anthropic API key configured")
    return HealthStatus(status="healthy", message="Assistant configured")


def check_controller_health(container: DependencyContainer) -> HealthStatus:
    if container.is_initialized and container.controller.is_running:
        return HealthStatus(status="healthy", message="Map event consumer running")
    return HealthStatus(status="unhealthy", message="Map event consumer not running")


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Health Check",
    description="Check the health status of the API and its dependencies.",
)
async def health_check(
    container: DependencyContainer = Depends(get_container),
) -> HealthCheckResponse:
    """
    Report the status of:
    - Storage (vendor registry persistence)
    - Assistant (Anthropic gateway)
    - Controller (map event consumer)
    """
    services = {
        "storage": check_storage_health(container),
        "assistant": check_assistant_health(container),
        "controller": check_controller_health(container),
    }

    statuses = [s.status for s in services.values()]
    if all(s == "healthy" for s in statuses):
        overall_status = "healthy"
    elif any(s == "unhealthy" for s in statuses):
        overall_status = "unhealthy"
    else:
        overall_status = "degraded"

    return HealthCheckResponse(
        status=overall_status,
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        services=services,
        uptime_seconds=get_uptime_seconds(),
    )


@router.get(
    "/health/live",
    summary="Liveness Check",
    description="Simple liveness check for container orchestration.",
)
async def liveness() -> dict:
    """Returns 200 if the service is alive."""
    return {"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get(
    "/health/ready",
    summary="Readiness Check",
    description="Check if the service is ready to accept traffic.",
)
async def readiness(
    container: DependencyContainer = Depends(get_container),
) -> dict:
    """Returns 200 only when the controller is consuming map events."""
    if check_controller_health(container).status != "healthy":
        raise HTTPException(
            status_code=503,
            detail="Service not ready: controller not running",
        )

    return {"status": "ready", "timestamp": datetime.now(timezone.utc).isoformat()}
