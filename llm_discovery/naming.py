"""
Friendly display names for opaque model identifiers.

Local servers report ids in many unrelated conventions
(``qwen2.5-7b-instruct``, ``lmstudio-community/phi3``, ``gemma-2b@q4_k_m``).
The heuristic here splits an id into family, version and label and renders
them for humans. It is best effort: some inputs produce odd names, and the
decomposition is kept stable rather than tuned per model family.
"""

import re

# family, optional version ([rv] prefix + digits/dots), optional letters-only label
_MODEL_INFO_PATTERN = re.compile(
    r"^([a-z0-9]+)(?:[-_]?([rv]?\d[.\d]*))?(?:[-_]?([a-z]+))?.*",
    re.IGNORECASE | re.ASCII,
)


def _capitalize(text: str) -> str:
    """Upper-case the first character only, leaving the rest verbatim."""
    return text[:1].upper() + text[1:]


def friendly_model_name(model_id: str) -> str:
    """
    Build a display name from a raw model identifier.

    Args:
        model_id: Identifier as reported by the local server

    Returns:
        Display name, or ``model_id`` unchanged when nothing can be parsed

    Examples:
        >>> friendly_model_name("llama")
        'Llama'
        >>> friendly_model_name("phi3@q8_0")
        'Phi3 q8_0'
        >>> friendly_model_name("qwen-2.5-coder")
        'Qwen 2.5 Coder'
        >>> friendly_model_name("lmstudio-community/deepseek-r1-distill")
        'Deepseek R1 Distill'
    """
    main_id = model_id
    tag = ""

    slash = main_id.rfind("/")
    if slash != -1:
        main_id = main_id[slash + 1 :]

    # The variant split works on the full id, so it wins over the slash trim.
    at = model_id.find("@")
    if at != -1:
        main_id = model_id[:at]
        tag = model_id[at + 1 :]

    match = _MODEL_INFO_PATTERN.match(main_id)
    if match is None:
        return model_id

    family, version, label = match.groups()

    parts = [
        _capitalize(family),
        (version or "").upper(),
        _capitalize(label or ""),
        tag,
    ]
    return " ".join(part for part in parts if part)


__all__ = ["friendly_model_name"]
