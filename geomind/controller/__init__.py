"""Application controller and its state machine."""

from geomind.controller.app_controller import (
    AppController,
    ControllerMode,
    ControllerState,
)

__all__ = ["AppController", "ControllerMode", "ControllerState"]
