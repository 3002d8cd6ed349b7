"""API route handlers."""

from .discovery import router as discovery_router
from .health import router as health_router
from .models import router as models_router

__all__ = [
    "discovery_router",
    "health_router",
    "models_router",
]
