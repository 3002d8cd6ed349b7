"""FastAPI dependencies for registry and discovery injection."""

import logging
import secrets
from typing import Any

from fastapi import Header, HTTPException

from ..config import Config, get_config
from ..defaults import DefaultsStore
from ..discovery import LocalModelDiscovery
from ..models import ModelRegistry
from ..refresh import DiscoveryRefresher

logger = logging.getLogger(__name__)

# Global instance cache
_server_state: dict[str, Any] = {}


def configure_server(
    config: Config | None = None,
    registry: ModelRegistry | None = None,
    defaults: DefaultsStore | None = None,
) -> None:
    """Configure the server before starting.

    Args:
        config: Configuration (uses get_config() if not provided)
        registry: Registry to serve; a new one is created otherwise
        defaults: Defaults store to serve; a new one is created otherwise
    """
    shutdown_discovery()
    config = config or get_config()
    registry = registry if registry is not None else ModelRegistry()
    defaults = defaults if defaults is not None else DefaultsStore()

    _server_state.clear()
    _server_state.update(
        {
            "config": config,
            "registry": registry,
            "defaults": defaults,
            "discovery": LocalModelDiscovery(config.discovery, registry, defaults),
            "refresher": None,
        }
    )


def _state() -> dict[str, Any]:
    if not _server_state:
        configure_server()
    return _server_state


def get_server_config() -> Config:
    return _state()["config"]


def get_registry() -> ModelRegistry:
    return _state()["registry"]


def get_defaults() -> DefaultsStore:
    return _state()["defaults"]


def get_discovery() -> LocalModelDiscovery:
    """Get the discovery instance shared across requests."""
    return _state()["discovery"]


def start_refresher() -> DiscoveryRefresher | None:
    """Start periodic discovery if an interval is configured."""
    state = _state()
    interval = state["config"].discovery.refresh_interval
    if interval <= 0 or not state["discovery"].enabled:
        return None

    refresher = state.get("refresher")
    if refresher is None:
        refresher = DiscoveryRefresher(state["discovery"], interval)
        state["refresher"] = refresher
    refresher.start()
    return refresher


async def verify_api_key(authorization: str | None = Header(None)) -> str | None:
    """Verify API key if configured.

    For local use, this can be disabled by not setting LLM_DISCOVERY_API_KEY.
    Expects "Bearer <token>" format in Authorization header.
    """
    expected_key = get_server_config().server.api_key

    if not expected_key:
        # No auth required
        return None

    if not authorization:
        raise HTTPException(
            status_code=401, detail="API key required", headers={"WWW-Authenticate": "Bearer"}
        )

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(
            status_code=401, detail="Invalid authorization header format. Use 'Bearer <token>'"
        )

    token = parts[1]
    # Use constant-time comparison to prevent timing attacks
    if not secrets.compare_digest(token, expected_key):
        raise HTTPException(status_code=401, detail="Invalid API key")

    return token


def shutdown_discovery() -> None:
    """Cleanup function to call on server shutdown."""
    if not _server_state:
        return

    refresher = _server_state.get("refresher")
    if refresher is not None:
        refresher.stop()
        _server_state["refresher"] = None

    discovery = _server_state.get("discovery")
    if discovery is not None:
        logger.info("Shutting down local model discovery")
        discovery.cancel()
        discovery.close()
