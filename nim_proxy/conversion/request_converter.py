"""OpenAI Chat Completions request -> NVIDIA NIM request."""

from typing import Any

from nim_proxy.core.aliases import resolve_upstream_model
from nim_proxy.models.chat import ChatCompletionRequest

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2048
DEFAULT_TOP_P = 1.0
DEFAULT_FREQUENCY_PENALTY = 0
DEFAULT_PRESENCE_PENALTY = 0


def _default(value: Any, fallback: Any) -> Any:
    # Only absent values are defaulted; an explicit 0 is kept.
    return fallback if value is None else value


def openai_to_nim_request(request: ChatCompletionRequest) -> dict[str, Any]:
    """Build the upstream payload for ``request``.

    Pure and total: the model goes through the alias table, messages are
    reduced to role/content in their original order, and sampling parameters
    get their defaults here rather than on the inbound model.
    """
    return {
        "model": resolve_upstream_model(request.model),
        "messages": [{"role": msg.role, "content": msg.content} for msg in request.messages],
        "temperature": _default(request.temperature, DEFAULT_TEMPERATURE),
        "max_tokens": _default(request.max_tokens, DEFAULT_MAX_TOKENS),
        "top_p": _default(request.top_p, DEFAULT_TOP_P),
        "frequency_penalty": _default(request.frequency_penalty, DEFAULT_FREQUENCY_PENALTY),
        "presence_penalty": _default(request.presence_penalty, DEFAULT_PRESENCE_PENALTY),
        "stream": bool(request.stream),
    }
