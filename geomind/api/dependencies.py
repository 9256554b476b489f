"""FastAPI dependency injection providers.

The application lifespan installs one DependencyContainer; route handlers
reach the controller through these functions.
"""

from typing import Optional

from geomind.controller.app_controller import AppController
from geomind.core.container import DependencyContainer

_container: Optional[DependencyContainer] = None


def set_container(container: DependencyContainer) -> None:
    """Install the container. Called during application startup."""
    global _container
    _container = container


def get_container() -> DependencyContainer:
    """
    Get the installed container.

    Raises:
        RuntimeError: If the application startup has not run.
    """
    if _container is None:
        raise RuntimeError(
            "Container not initialized. Ensure the application startup event has run."
        )
    return _container


def get_controller() -> AppController:
    return get_container().controller


def reset_dependencies() -> None:
    """Forget the installed container (shutdown and tests)."""
    global _container
    _container = None
