"""API route modules."""

from geomind.api.routes.chat import router as chat_router
from geomind.api.routes.health import router as health_router
from geomind.api.routes.map import router as map_router
from geomind.api.routes.session import router as session_router
from geomind.api.routes.shops import router as shops_router

__all__ = ["chat_router", "health_router", "map_router", "session_router", "shops_router"]
