"""
Discovery of models served by a local inference server.

A discovery pass probes the server's model listing, overlays the context
sizes of its active slots, converts every model into a ``UnifiedModel`` and
publishes the result to a ``ModelRegistry``. Models that are loaded on the
server (and the first model listed) are also offered as defaults for the
application's agent roles through a ``DefaultsStore``.

Usage:
    >>> from llm_discovery import discover_local_models
    >>> result = discover_local_models()  # doctest: +SKIP
    >>> [model.id for model in result.models]  # doctest: +SKIP
    ['local.qwen2.5-7b-instruct']
"""

import logging
import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from urllib.parse import urlsplit, urlunsplit

from .client import LocalServerClient
from .config import DiscoveryConfig, get_config
from .defaults import DefaultsStore
from .exceptions import DiscoveryCancelledError
from .models import (
    DEFAULT_CONTEXT_WINDOW,
    LOCAL_CAN_REASON,
    LOCAL_SUPPORTS_ATTACHMENTS,
    PROVIDER_LOCAL,
    ModelRegistry,
    UnifiedModel,
)
from .naming import friendly_model_name
from .schemas.local import RawModel, RawSlot

logger = logging.getLogger(__name__)

DEFAULT_ROLE_KEYS = (
    "agents.coder.model",
    "agents.summarizer.model",
    "agents.task.model",
    "agents.title.model",
)

LOADED_STATE = "loaded"

# The local server ignores the key, but clients refuse to start without one.
PLACEHOLDER_API_KEY = "dummy"


# =============================================================================
# Endpoint handling
# =============================================================================


def parse_endpoint(endpoint: str | None) -> str | None:
    """
    Validate a discovery target address.

    Returns:
        The address, or None if it is empty or lacks a scheme or host
    """
    if not endpoint or not endpoint.strip():
        return None

    endpoint = endpoint.strip()
    try:
        parts = urlsplit(endpoint)
    except ValueError as e:
        logger.debug(f"Failed to parse local endpoint {endpoint!r}: {e}")
        return None

    if not parts.scheme or not parts.netloc:
        logger.debug(f"Failed to parse local endpoint {endpoint!r}: missing scheme or host")
        return None
    return endpoint


def resolve_endpoint(endpoint: str, path: str) -> str:
    """
    Replace the path of ``endpoint`` with ``path``.

    Examples:
        >>> resolve_endpoint("http://localhost:1234/ignored", "v1/models")
        'http://localhost:1234/v1/models'
    """
    parts = urlsplit(endpoint)
    return urlunsplit(
        (parts.scheme, parts.netloc, "/" + path.lstrip("/"), parts.query, parts.fragment)
    )


# =============================================================================
# Discovery steps
# =============================================================================


def probe_models(
    client: LocalServerClient, endpoint: str, paths: Sequence[str]
) -> list[RawModel]:
    """
    Try each model-list path in order and return the first non-empty listing.

    Args:
        client: Client used for the requests
        endpoint: Base address of the local server
        paths: Candidate listing paths, preferred first

    Returns:
        Models from the first path that listed any, else an empty list
    """
    for path in paths:
        models = client.list_models(resolve_endpoint(endpoint, path))
        if models:
            logger.debug(f"Loaded {len(models)} models from {path}")
            return models
    return []


def merge_slot_context(models: Sequence[RawModel], slots: Sequence[RawSlot]) -> list[RawModel]:
    """
    Overlay slot context sizes onto models by position.

    Slot ``i`` is assumed to serve model ``i``; the server offers no key to
    join on, so mismatched orders or lengths pair the wrong entries. Models
    past the last slot keep their reported context, extra slots are ignored.

    Args:
        models: Models in listing order
        slots: Slots in server order

    Returns:
        New list of models; the inputs are not modified
    """
    merged = list(models)
    for index, slot in enumerate(slots[: len(merged)]):
        logger.debug(f"Setting context of {merged[index].id!r} from slot {slot.id}: {slot.n_ctx}")
        merged[index] = merged[index].model_copy(
            update={"max_context_length": slot.n_ctx, "loaded_context_length": slot.n_ctx}
        )
    return merged


def convert_local_model(
    model: RawModel,
    provider: str = PROVIDER_LOCAL,
    fallback_context: int = DEFAULT_CONTEXT_WINDOW,
) -> UnifiedModel:
    """
    Convert a local model listing entry into a catalog record.

    Args:
        model: Entry as reported by the server (after slot merge)
        provider: Provider tag, also used as the id namespace
        fallback_context: Context size used when none is loaded

    Returns:
        UnifiedModel for the catalog
    """
    context = model.loaded_context_length or fallback_context
    return UnifiedModel(
        id=f"{provider}.{model.id}",
        name=friendly_model_name(model.id),
        provider=provider,
        api_model=model.id,
        context_window=context,
        default_max_tokens=context,
        can_reason=LOCAL_CAN_REASON,
        supports_attachments=LOCAL_SUPPORTS_ATTACHMENTS,
    )


def load_local_models(
    models: Sequence[RawModel],
    registry: ModelRegistry,
    defaults: DefaultsStore,
    provider: str = PROVIDER_LOCAL,
    fallback_context: int = DEFAULT_CONTEXT_WINDOW,
) -> list[UnifiedModel]:
    """
    Publish converted models and offer role defaults.

    The first model and every model in the ``loaded`` state set the defaults
    for all agent roles. Each one replaces the previous default, so the last
    qualifying model wins; explicit values in ``defaults`` are never touched.

    Returns:
        Converted models in listing order
    """
    converted = []
    role_defaults = []
    for index, model in enumerate(models):
        unified = convert_local_model(model, provider, fallback_context)
        converted.append(unified)
        if index == 0 or model.state == LOADED_STATE:
            role_defaults.append(unified.id)

    registry.replace_provider(provider, converted)

    for model_id in role_defaults:
        for key in DEFAULT_ROLE_KEYS:
            defaults.set_default(key, model_id)

    if converted:
        defaults.set_default(f"providers.{provider}.apiKey", PLACEHOLDER_API_KEY)
        registry.set_popularity(provider, 0)
        logger.info(
            f"Registered {len(converted)} {provider} models, default: {role_defaults[-1]}"
        )

    return converted


def withdraw_local_defaults(defaults: DefaultsStore, provider: str = PROVIDER_LOCAL) -> None:
    """
    Drop role defaults and provider hints that point into ``provider``.

    Used when a pass finds nothing, so no default names a model that has
    left the registry. Defaults naming other providers are kept.
    """
    current = defaults.defaults()
    prefix = f"{provider}."
    for key in DEFAULT_ROLE_KEYS:
        value = current.get(key)
        if isinstance(value, str) and value.startswith(prefix):
            defaults.unset_default(key)
    defaults.unset_default(f"providers.{provider}.apiKey")


# =============================================================================
# Discovery pass
# =============================================================================


@dataclass
class DiscoveryResult:
    """Outcome of one discovery pass."""

    enabled: bool
    endpoint: str | None = None
    models: list[UnifiedModel] = field(default_factory=list)
    slots_found: int = 0
    cancelled: bool = False
    completed_at: float = field(default_factory=time.time)


class LocalModelDiscovery:
    """
    Runs discovery passes against one local server.

    Passes are serialized; running ``discover`` again rebuilds the provider's
    registry entries from scratch. ``cancel`` stops an in-flight pass before
    its next request and before it publishes anything.

    Example:
        >>> discovery = LocalModelDiscovery(DiscoveryConfig(endpoint="http://localhost:1234"))
        >>> result = discovery.discover()  # doctest: +SKIP
    """

    def __init__(
        self,
        config: DiscoveryConfig | None = None,
        registry: ModelRegistry | None = None,
        defaults: DefaultsStore | None = None,
        client: LocalServerClient | None = None,
    ):
        """
        Args:
            config: Discovery settings (uses get_config().discovery if not provided)
            registry: Registry receiving the models
            defaults: Store receiving role defaults
            client: HTTP client; one is created and owned otherwise
        """
        self.config = config or get_config().discovery
        self.registry = registry if registry is not None else ModelRegistry()
        self.defaults = defaults if defaults is not None else DefaultsStore()
        self._owns_client = client is None
        self.client = client or LocalServerClient(timeout=self.config.timeout)
        self._lock = threading.Lock()
        self._cancel_lock = threading.Lock()
        self._generation = 0
        self._last_result: DiscoveryResult | None = None

    @property
    def endpoint(self) -> str | None:
        return parse_endpoint(self.config.endpoint)

    @property
    def enabled(self) -> bool:
        return self.endpoint is not None

    @property
    def last_result(self) -> DiscoveryResult | None:
        return self._last_result

    def cancel(self) -> None:
        """Cancel the pass in flight and any pass waiting to start."""
        with self._cancel_lock:
            self._generation += 1

    def _ticket(self) -> int:
        with self._cancel_lock:
            return self._generation

    def _check_cancelled(self, ticket: int) -> None:
        if self._ticket() != ticket:
            raise DiscoveryCancelledError("Discovery cancelled", {"endpoint": self.endpoint})

    def discover(self) -> DiscoveryResult:
        """
        Run one discovery pass.

        Never raises for server-side problems; an unreachable or unsupported
        server yields a result without models.
        """
        # Passes requested before a cancel() are cancelled, even while queued.
        ticket = self._ticket()
        with self._lock:
            try:
                result = self._run(ticket)
            except DiscoveryCancelledError:
                logger.info(f"Discovery cancelled for {self.endpoint}")
                result = DiscoveryResult(enabled=True, endpoint=self.endpoint, cancelled=True)
            self._last_result = result
            return result

    def _run(self, ticket: int) -> DiscoveryResult:
        endpoint = self.endpoint
        if endpoint is None:
            logger.debug("Local discovery disabled: no endpoint configured")
            return DiscoveryResult(enabled=False)

        self._check_cancelled(ticket)
        provider = self.config.provider
        models = probe_models(self.client, endpoint, self.config.models_paths)
        self._check_cancelled(ticket)

        if not models:
            logger.debug(f"No local models found at {endpoint}")
            self.registry.replace_provider(provider, [])
            withdraw_local_defaults(self.defaults, provider)
            return DiscoveryResult(enabled=True, endpoint=endpoint)

        slots = self.client.list_slots(resolve_endpoint(endpoint, self.config.slots_path))
        self._check_cancelled(ticket)

        if slots:
            models = merge_slot_context(models, slots)

        converted = load_local_models(
            models, self.registry, self.defaults, provider, self.config.fallback_context
        )
        return DiscoveryResult(
            enabled=True, endpoint=endpoint, models=converted, slots_found=len(slots)
        )

    def close(self) -> None:
        """Release the HTTP client if this instance created it."""
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "LocalModelDiscovery":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def discover_local_models(
    config: DiscoveryConfig | None = None,
    registry: ModelRegistry | None = None,
    defaults: DefaultsStore | None = None,
    client: LocalServerClient | None = None,
) -> DiscoveryResult:
    """
    Run a single discovery pass.

    Intended to be called from the host application's startup sequence.
    Calling it again re-discovers and replaces the previous local models.

    Args:
        config: Discovery settings (uses get_config().discovery if not provided)
        registry: Registry receiving the models
        defaults: Store receiving role defaults
        client: HTTP client to reuse

    Returns:
        DiscoveryResult describing the pass
    """
    with LocalModelDiscovery(config, registry, defaults, client) as discovery:
        return discovery.discover()


__all__ = [
    "DEFAULT_ROLE_KEYS",
    "DiscoveryResult",
    "LocalModelDiscovery",
    "convert_local_model",
    "discover_local_models",
    "load_local_models",
    "merge_slot_context",
    "parse_endpoint",
    "probe_models",
    "resolve_endpoint",
    "withdraw_local_defaults",
]
