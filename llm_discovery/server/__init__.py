"""Model catalog REST API server for llm_discovery."""

from .app import DiscoveryServer, create_app
from .dependencies import get_defaults, get_discovery, get_registry

__all__ = [
    "create_app",
    "DiscoveryServer",
    "get_defaults",
    "get_discovery",
    "get_registry",
]
