"""Static model catalog served by GET /v1/models.

The catalog does not depend on the upstream; OpenAI clients only need a
non-empty, stable list to populate their model pickers.
"""

from typing import Any

CATALOG_CREATED = 1677610602

_CATALOG: tuple[tuple[str, str], ...] = (
    ("deepseek-3.2", "deepseek"),
    ("gpt-3.5-turbo", "openai"),
)


def list_catalog_models() -> list[dict[str, Any]]:
    """Return fresh OpenAI ``model`` objects for every catalog entry."""
    return [
        {
            "id": model_id,
            "object": "model",
            "created": CATALOG_CREATED,
            "owned_by": owner,
            "permission": [],
            "root": model_id,
            "parent": None,
        }
        for model_id, owner in _CATALOG
    ]


def models_list_payload() -> dict[str, Any]:
    return {"object": "list", "data": list_catalog_models()}
