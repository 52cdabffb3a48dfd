"""HTTP exposure: controllers, routers and the application factory."""

from .app import create_app
from .results import ActionResult
from .routing import ControllerKind, Resource, build_router

__all__ = [
    "create_app",
    "build_router",
    "Resource",
    "ControllerKind",
    "ActionResult",
]
