"""Response schemas for the catalog server.

The model listing follows the OpenAI ``/v1/models`` shape so existing
clients can read it, with catalog fields added per entry.
"""

import time
from typing import Literal

from pydantic import BaseModel, Field

from ..models import UnifiedModel


class CatalogModel(BaseModel):
    """A registry entry as served over HTTP."""

    id: str
    object: Literal["model"] = "model"
    created: int = Field(default_factory=lambda: int(time.time()))
    owned_by: str
    name: str
    api_model: str
    context_window: int
    default_max_tokens: int
    can_reason: bool
    supports_attachments: bool

    @classmethod
    def from_unified(cls, model: UnifiedModel) -> "CatalogModel":
        return cls(
            id=model.id,
            owned_by=model.provider,
            name=model.name,
            api_model=model.api_model,
            context_window=model.context_window,
            default_max_tokens=model.default_max_tokens,
            can_reason=model.can_reason,
            supports_attachments=model.supports_attachments,
        )


class CatalogList(BaseModel):
    """List of catalog models."""

    object: Literal["list"] = "list"
    data: list[CatalogModel]


class DiscoveryStatus(BaseModel):
    """Outcome of the most recent discovery pass."""

    enabled: bool
    endpoint: str | None = None
    models_found: int = 0
    slots_found: int = 0
    cancelled: bool = False
    completed_at: float | None = None
    models: list[str] = Field(default_factory=list)


class HealthStatus(BaseModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"] = "healthy"
    discovery_enabled: bool = False
    models_registered: int = 0
    version: str = "1.0.0"
    uptime_seconds: float = 0.0


__all__ = ["CatalogList", "CatalogModel", "DiscoveryStatus", "HealthStatus"]
