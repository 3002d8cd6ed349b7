"""Health and status endpoints."""

import logging
import time

from fastapi import APIRouter, Depends

from ... import __version__
from ...discovery import LocalModelDiscovery
from ...models import ModelRegistry
from ...schemas.catalog import HealthStatus
from ..dependencies import get_discovery, get_registry

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])

# Track server start time for uptime
_start_time = time.time()


@router.get("/health", response_model=HealthStatus)
async def health_check(
    registry: ModelRegistry = Depends(get_registry),
    discovery: LocalModelDiscovery = Depends(get_discovery),
) -> HealthStatus:
    """Health check endpoint.

    Returns server health and catalog size.
    """
    return HealthStatus(
        status="healthy",
        discovery_enabled=discovery.enabled,
        models_registered=len(registry),
        version=__version__,
        uptime_seconds=time.time() - _start_time,
    )


@router.get("/ready")
async def readiness_check() -> dict[str, str]:
    """Kubernetes-style readiness check."""
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> dict[str, str]:
    """Kubernetes-style liveness check.

    Returns 200 if server is alive.
    """
    return {"status": "alive"}
