"""Catalog endpoints (/v1/models, /v1/defaults)."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from ...defaults import DefaultsStore
from ...exceptions import ModelNotFoundError
from ...models import ModelRegistry
from ...schemas.catalog import CatalogList, CatalogModel
from ..dependencies import get_defaults, get_registry

logger = logging.getLogger(__name__)
router = APIRouter(tags=["models"])


@router.get("/v1/models", response_model=CatalogList)
async def list_models(
    provider: str | None = None,
    registry: ModelRegistry = Depends(get_registry),
) -> CatalogList:
    """List catalog models.

    Optionally restricted to one provider with ``?provider=local``.
    """
    return CatalogList(
        data=[CatalogModel.from_unified(model) for model in registry.models(provider)]
    )


@router.get("/v1/models/{model_id:path}", response_model=CatalogModel)
async def get_model(
    model_id: str,
    registry: ModelRegistry = Depends(get_registry),
) -> CatalogModel:
    """Get a catalog model by namespaced id."""
    try:
        return CatalogModel.from_unified(registry.get_or_raise(model_id))
    except ModelNotFoundError as e:
        raise HTTPException(status_code=404, detail=f"Model '{model_id}' not found") from e


@router.get("/v1/defaults")
async def list_defaults(defaults: DefaultsStore = Depends(get_defaults)) -> dict[str, Any]:
    """Effective defaults, with explicit values applied over discovered ones."""
    return defaults.effective()
