"""Discovery status and re-trigger endpoints."""

import logging

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from ...discovery import DiscoveryResult, LocalModelDiscovery
from ...schemas.catalog import DiscoveryStatus
from ..dependencies import get_discovery, verify_api_key

logger = logging.getLogger(__name__)
router = APIRouter(tags=["discovery"])


def _status(discovery: LocalModelDiscovery, result: DiscoveryResult | None) -> DiscoveryStatus:
    if result is None:
        return DiscoveryStatus(enabled=discovery.enabled, endpoint=discovery.endpoint)
    return DiscoveryStatus(
        enabled=result.enabled,
        endpoint=result.endpoint,
        models_found=len(result.models),
        slots_found=result.slots_found,
        cancelled=result.cancelled,
        completed_at=result.completed_at,
        models=[model.id for model in result.models],
    )


@router.get("/admin/discovery", response_model=DiscoveryStatus)
async def discovery_status(
    discovery: LocalModelDiscovery = Depends(get_discovery),
    _: str | None = Depends(verify_api_key),
) -> DiscoveryStatus:
    """Outcome of the most recent discovery pass."""
    return _status(discovery, discovery.last_result)


@router.post("/admin/discovery/refresh", response_model=DiscoveryStatus)
async def refresh_discovery(
    discovery: LocalModelDiscovery = Depends(get_discovery),
    _: str | None = Depends(verify_api_key),
) -> DiscoveryStatus:
    """Run a discovery pass now.

    Blocking HTTP calls run in the thread pool so the event loop stays free.
    """
    result = await run_in_threadpool(discovery.discover)
    logger.info(f"Discovery refreshed: {len(result.models)} models")
    return _status(discovery, result)
