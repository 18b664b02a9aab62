"""API route modules for matterdeploy."""

from .health import router as health_router
from .rendering import router as rendering_router

__all__ = [
    "health_router",
    "rendering_router",
]
