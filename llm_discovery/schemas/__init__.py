"""Wire and API schemas."""

from .catalog import (
    # Catalog server
    CatalogList,
    CatalogModel,
    DiscoveryStatus,
    HealthStatus,
)
from .local import (
    # Local inference server
    RawModel,
    RawModelList,
    RawSlot,
    SlotListAdapter,
)

__all__ = [
    "CatalogList",
    "CatalogModel",
    "DiscoveryStatus",
    "HealthStatus",
    "RawModel",
    "RawModelList",
    "RawSlot",
    "SlotListAdapter",
]
