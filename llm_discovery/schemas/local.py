"""Wire schemas for the local inference server.

Covers the two model-list shapes (LM Studio's ``api/v0/models`` and the
OpenAI-compatible ``v1/models``) and the llama.cpp ``/slots`` listing.
Fields the server leaves out or sends as ``null`` decode to empty values;
unknown fields are ignored.
"""

from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationInfo,
    field_validator,
)


class _NullTolerantModel(BaseModel):
    """Base model that maps explicit ``null`` values to the field default."""

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None and info.field_name is not None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value


def _null_items_as_empty(value: Any) -> Any:
    """Decode ``null`` list entries as empty objects instead of rejecting the list."""
    if isinstance(value, list):
        return [{} if item is None else item for item in value]
    return value


# =============================================================================
# Models
# =============================================================================


class RawModel(_NullTolerantModel):
    """A model entry as reported by the local server."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "qwen2.5-7b-instruct",
                "object": "model",
                "type": "llm",
                "publisher": "lmstudio-community",
                "arch": "qwen2",
                "compatibility_type": "gguf",
                "quantization": "Q4_K_M",
                "state": "loaded",
                "max_context_length": 32768,
                "loaded_context_length": 8192,
            }
        },
    )

    id: str = ""
    object: str = ""
    type: str = ""
    publisher: str = ""
    arch: str = ""
    compatibility_type: str = ""
    quantization: str = ""
    state: str = ""
    max_context_length: int = 0
    loaded_context_length: int = 0

    def is_llm(self) -> bool:
        """True for chat/completion models, False for embeddings and other artifacts."""
        return self.object == "model" and self.type == "llm"


class RawModelList(_NullTolerantModel):
    """Envelope of a model-list response."""

    object: str = "list"
    data: Annotated[list[RawModel], BeforeValidator(_null_items_as_empty)] = Field(
        default_factory=list
    )


# =============================================================================
# Slots
# =============================================================================


class RawSlot(_NullTolerantModel):
    """An inference slot as reported by ``/slots``.

    Only ``n_ctx`` is used; sampling parameters and token state are kept as
    opaque mappings.
    """

    model_config = ConfigDict(extra="allow")

    id: int = 0
    id_task: int = 0
    n_ctx: int = 0
    speculative: bool = False
    is_processing: bool = False
    params: dict[str, Any] = Field(default_factory=dict)
    prompt: str = ""
    next_token: dict[str, Any] = Field(default_factory=dict)


SlotListAdapter: TypeAdapter[list[RawSlot]] = TypeAdapter(
    Annotated[list[RawSlot], BeforeValidator(_null_items_as_empty)]
)


__all__ = ["RawModel", "RawModelList", "RawSlot", "SlotListAdapter"]
