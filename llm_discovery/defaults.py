"""
Layered key/value store for application defaults.

Two layers are kept: explicit values set by the host application and
defaults contributed by discovery. ``get`` prefers the explicit layer, so a
discovered default only applies where nothing was configured.
"""

import logging
import threading
from typing import Any

logger = logging.getLogger(__name__)


class DefaultsStore:
    """
    Thread-safe configuration-defaults store with dotted keys.

    Example:
        >>> store = DefaultsStore()
        >>> store.set_default("agents.coder.model", "local.qwen2.5-7b")
        >>> store.get("agents.coder.model")
        'local.qwen2.5-7b'
        >>> store.set("agents.coder.model", "openai.gpt-4o")
        >>> store.get("agents.coder.model")
        'openai.gpt-4o'
    """

    def __init__(self, values: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(values or {})
        self._defaults: dict[str, Any] = {}
        self._lock = threading.Lock()

    def set(self, key: str, value: Any) -> None:
        """Set an explicit value."""
        with self._lock:
            self._values[key] = value

    def set_default(self, key: str, value: Any) -> None:
        """Set the default for ``key``, replacing any earlier default."""
        with self._lock:
            self._defaults[key] = value
        logger.debug(f"Default set: {key}={value!r}")

    def unset_default(self, key: str) -> None:
        """Remove the default for ``key``, if any. Explicit values are kept."""
        with self._lock:
            removed = self._defaults.pop(key, None)
        if removed is not None:
            logger.debug(f"Default removed: {key}={removed!r}")

    def get(self, key: str, fallback: Any = None) -> Any:
        """Get the explicit value, else the default, else ``fallback``."""
        with self._lock:
            if key in self._values:
                return self._values[key]
            return self._defaults.get(key, fallback)

    def is_set(self, key: str) -> bool:
        """True if an explicit value exists for ``key``."""
        with self._lock:
            return key in self._values

    def defaults(self) -> dict[str, Any]:
        """Copy of the default layer."""
        with self._lock:
            return dict(self._defaults)

    def effective(self) -> dict[str, Any]:
        """Copy of all keys with explicit values applied over defaults."""
        with self._lock:
            return {**self._defaults, **self._values}

    def clear_defaults(self) -> None:
        """Drop every default, keeping explicit values."""
        with self._lock:
            self._defaults.clear()


__all__ = ["DefaultsStore"]
