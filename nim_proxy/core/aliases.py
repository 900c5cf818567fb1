"""Model alias resolution.

Inbound OpenAI-style model names are never forwarded as-is: every name goes
through this table, and anything unknown (including a missing model) lands on
the default NIM model.
"""

from collections.abc import Mapping
from logging import getLogger
from types import MappingProxyType

logger = getLogger(__name__)

DEFAULT_UPSTREAM_MODEL = "deepseek/deepseek-chat"

MODEL_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "gpt-3.5-turbo": "deepseek/deepseek-chat",
        "gpt-4": "deepseek/deepseek-chat",
        "gpt-4-turbo": "deepseek/deepseek-chat",
        "deepseek-chat": "deepseek/deepseek-chat",
        "deepseek-3.2": "deepseek/deepseek-chat",
    }
)


def resolve_upstream_model(model: object) -> str:
    """Map an inbound model identifier to exactly one upstream model.

    Total: never raises, whatever ``model`` is.
    """
    if isinstance(model, str) and model in MODEL_ALIASES:
        return MODEL_ALIASES[model]

    logger.debug(f"No alias for model {model!r}, using {DEFAULT_UPSTREAM_MODEL}")
    return DEFAULT_UPSTREAM_MODEL
