"""
Unified model records and the in-process model registry.
"""

import logging
import threading
from collections.abc import Iterable, Iterator
from dataclasses import asdict, dataclass
from typing import Any

from .exceptions import ModelNotFoundError

logger = logging.getLogger(__name__)

PROVIDER_LOCAL = "local"

# Local servers do not report these; both are fixed placeholders.
LOCAL_CAN_REASON = True
LOCAL_SUPPORTS_ATTACHMENTS = True

DEFAULT_CONTEXT_WINDOW = 4096


@dataclass(frozen=True, slots=True)
class UnifiedModel:
    """
    Catalog record for a model, independent of the provider that serves it.

    Attributes:
        id: Namespaced identifier, ``<provider>.<api_model>``
        name: Display name
        provider: Provider tag
        api_model: Identifier to send to the provider's API
        context_window: Context window size in tokens
        default_max_tokens: Default completion budget in tokens
        can_reason: Whether the model supports reasoning output
        supports_attachments: Whether the model accepts attachments
    """
    id: str
    name: str
    provider: str
    api_model: str
    context_window: int
    default_max_tokens: int
    can_reason: bool = False
    supports_attachments: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


class ModelRegistry:
    """
    Thread-safe registry of catalog models keyed by namespaced id.

    Providers publish their models as a whole with ``replace_provider``,
    which swaps in a new snapshot so readers never see a half-built list.
    """

    def __init__(self) -> None:
        self._models: dict[str, UnifiedModel] = {}
        self._popularity: dict[str, int] = {}
        self._lock = threading.RLock()

    def register(self, model: UnifiedModel) -> None:
        """
        Add or overwrite a single model.

        Args:
            model: Model to register
        """
        with self._lock:
            models = dict(self._models)
            models[model.id] = model
            self._models = models

    def replace_provider(self, provider: str, models: Iterable[UnifiedModel]) -> int:
        """
        Replace every model of ``provider`` with ``models``.

        Later entries with a duplicate id overwrite earlier ones.

        Args:
            provider: Provider tag whose entries are replaced
            models: New entries for that provider

        Returns:
            Number of entries now registered for the provider
        """
        with self._lock:
            snapshot = {
                model_id: model
                for model_id, model in self._models.items()
                if model.provider != provider
            }
            for model in models:
                snapshot[model.id] = model
            self._models = snapshot
            count = sum(1 for model in snapshot.values() if model.provider == provider)

        logger.debug(f"Registry now holds {count} '{provider}' models")
        return count

    def get(self, model_id: str) -> UnifiedModel | None:
        """
        Get a model by namespaced id.

        Returns:
            UnifiedModel or None if not found
        """
        return self._models.get(model_id)

    def get_or_raise(self, model_id: str) -> UnifiedModel:
        """
        Get a model or raise exception.

        Raises:
            ModelNotFoundError: If model not in registry
        """
        model = self.get(model_id)
        if model is None:
            raise ModelNotFoundError(
                f"Model not found in registry: {model_id}",
                {"model_id": model_id, "available": self.list_models()},
            )
        return model

    def list_models(self, provider: str | None = None) -> list[str]:
        """Get ids of all models, optionally limited to one provider."""
        return [model.id for model in self.models(provider)]

    def models(self, provider: str | None = None) -> list[UnifiedModel]:
        """Get all models in registration order, optionally limited to one provider."""
        snapshot = self._models
        return [
            model for model in snapshot.values()
            if provider is None or model.provider == provider
        ]

    def search(self, **criteria: Any) -> list[UnifiedModel]:
        """
        Search for models whose attributes equal the given values.

        Examples:
            >>> registry.search(provider="local", can_reason=True)
            [UnifiedModel(...), ...]
        """
        return [
            model for model in self.models()
            if all(getattr(model, key, None) == value for key, value in criteria.items())
        ]

    def set_popularity(self, provider: str, rank: int) -> None:
        """Set the sort rank of a provider (lower sorts first)."""
        with self._lock:
            self._popularity[provider] = rank

    def popularity(self, provider: str) -> int | None:
        """Get the sort rank of a provider, None if never set."""
        return self._popularity.get(provider)

    def clear(self) -> None:
        """Remove all models and provider ranks."""
        with self._lock:
            self._models = {}
            self._popularity.clear()

    def __len__(self) -> int:
        return len(self._models)

    def __contains__(self, model_id: str) -> bool:
        return model_id in self._models

    def __iter__(self) -> Iterator[UnifiedModel]:
        return iter(self.models())


__all__ = [
    "DEFAULT_CONTEXT_WINDOW",
    "LOCAL_CAN_REASON",
    "LOCAL_SUPPORTS_ATTACHMENTS",
    "PROVIDER_LOCAL",
    "ModelRegistry",
    "UnifiedModel",
]
