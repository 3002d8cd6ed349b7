"""
LLM Discovery v1.0
~~~~~~~~~~~~~~~~~~

Discovers the models served by a local inference server (LM Studio,
llama.cpp ``llama-server`` or any OpenAI-compatible local server) and turns
them into catalog records.

Basic usage:

    >>> from llm_discovery import DefaultsStore, ModelRegistry, discover_local_models
    >>> from llm_discovery.config import DiscoveryConfig
    >>>
    >>> registry, defaults = ModelRegistry(), DefaultsStore()
    >>> result = discover_local_models(
    ...     DiscoveryConfig(endpoint="http://localhost:1234"), registry, defaults
    ... )
    >>> for model in registry.models("local"):
    ...     print(model.id, model.name, model.context_window)
    >>> defaults.get("agents.coder.model")

Display names only:

    >>> from llm_discovery import friendly_model_name
    >>> friendly_model_name("qwen-2.5-coder@q4_k_m")
    'Qwen 2.5 Coder q4_k_m'

:license: MIT
"""

__version__ = "1.0.0"
__license__ = "MIT"

# HTTP client
from .client import LocalServerClient

# Configuration System
from .config import (
    Config,
    ConfigValidationError,
    DiscoveryConfig,
    LoggingConfig,
    ServerConfig,
    clear_config_cache,
    create_default_config,
    get_config,
    load_config,
    reload_config,
    setup_logging,
)

# Defaults store
from .defaults import DefaultsStore

# Discovery
from .discovery import (
    DEFAULT_ROLE_KEYS,
    DiscoveryResult,
    LocalModelDiscovery,
    convert_local_model,
    discover_local_models,
    load_local_models,
    merge_slot_context,
    probe_models,
)

# Exceptions
from .exceptions import (
    DiscoveryCancelledError,
    DiscoveryError,
    FetchDecodeError,
    FetchError,
    FetchStatusError,
    FetchTransportError,
    ModelNotFoundError,
)

# Models & Registry
from .models import ModelRegistry, UnifiedModel

# Display names
from .naming import friendly_model_name
from .refresh import DiscoveryRefresher
from .schemas.local import RawModel, RawSlot

# Server (optional, import may fail if fastapi not installed)
try:
    from .server import DiscoveryServer, create_app

    _server_available = True
except ImportError:
    _server_available = False
    DiscoveryServer = None  # type: ignore
    create_app = None  # type: ignore

__all__ = [
    "clear_config_cache",
    "Config",
    "ConfigValidationError",
    "convert_local_model",
    "create_app",
    "create_default_config",
    "DEFAULT_ROLE_KEYS",
    "DefaultsStore",
    "discover_local_models",
    "DiscoveryCancelledError",
    "DiscoveryConfig",
    "DiscoveryError",
    "DiscoveryRefresher",
    "DiscoveryResult",
    "DiscoveryServer",
    "FetchDecodeError",
    "FetchError",
    "FetchStatusError",
    "FetchTransportError",
    "friendly_model_name",
    "get_config",
    "load_config",
    "load_local_models",
    "LocalModelDiscovery",
    "LocalServerClient",
    "LoggingConfig",
    "merge_slot_context",
    "ModelNotFoundError",
    "ModelRegistry",
    "probe_models",
    "RawModel",
    "RawSlot",
    "reload_config",
    "ServerConfig",
    "setup_logging",
    "UnifiedModel",
]
