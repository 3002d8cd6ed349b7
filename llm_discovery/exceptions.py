"""
Custom exceptions for local model discovery.

All exceptions inherit from DiscoveryError for easy catching of all
discovery-related errors.
"""

__all__ = [
    "DiscoveryCancelledError",
    "DiscoveryError",
    "FetchDecodeError",
    "FetchError",
    "FetchStatusError",
    "FetchTransportError",
    "ModelNotFoundError",
]


from typing import Any


class DiscoveryError(Exception):
    """Base exception for all discovery errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FetchError(DiscoveryError):
    """Raised when a listing endpoint cannot be read."""

    @property
    def endpoint(self) -> str | None:
        return self.details.get("endpoint")


class FetchTransportError(FetchError):
    """Raised when the server cannot be reached."""

    pass


class FetchStatusError(FetchError):
    """Raised when the server answers with a non-200 status."""

    @property
    def status_code(self) -> int | None:
        return self.details.get("status")


class FetchDecodeError(FetchError):
    """Raised when the response body is not the expected JSON document."""

    pass


class DiscoveryCancelledError(DiscoveryError):
    """Raised when a discovery pass is cancelled mid-flight."""

    pass


class ModelNotFoundError(DiscoveryError):
    """Raised when a model is not in the registry."""

    pass
