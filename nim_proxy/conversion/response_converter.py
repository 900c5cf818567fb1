"""NVIDIA NIM chat completion -> OpenAI chat completion."""

from __future__ import annotations

import itertools
import time
from typing import Any

from nim_proxy.core.exceptions import TranslationError

_id_sequence = itertools.count()


def new_completion_id() -> str:
    """Return a fresh ``chatcmpl-`` id derived from the current time.

    A process-wide sequence suffix keeps ids unique when several responses
    are produced within the same nanosecond tick.
    """
    return f"chatcmpl-{time.time_ns()}{next(_id_sequence) % 1000:03d}"


def first_choice(upstream: Any) -> dict[str, Any]:
    """Return ``upstream["choices"][0]`` or raise TranslationError."""
    if not isinstance(upstream, dict):
        raise TranslationError(
            f"Upstream response is not a JSON object (got {type(upstream).__name__})"
        )
    choices = upstream.get("choices")
    if not isinstance(choices, list) or not choices:
        raise TranslationError("Upstream response contained no choices")
    choice = choices[0]
    if not isinstance(choice, dict):
        raise TranslationError("Upstream choice is not a JSON object")
    return choice


def _count(usage: dict[str, Any], key: str) -> int | float:
    value = usage.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def nim_to_openai_response(upstream: Any, requested_model: str | None) -> dict[str, Any]:
    """Translate a buffered upstream response.

    Only the first choice is kept. The upstream's own id and model are
    discarded: the caller sees a fresh id and the model name it asked for.

    Raises:
        TranslationError: If the upstream body has no usable choice
    """
    choice = first_choice(upstream)
    message = choice.get("message") or {}
    usage = upstream.get("usage") or {}
    if not isinstance(usage, dict):
        usage = {}

    return {
        "id": new_completion_id(),
        "object": "chat.completion",
        "created": int(time.time()),
        "model": requested_model,
        "choices": [
            {
                "index": 0,
                "message": {
                    "role": "assistant",
                    "content": message.get("content") if isinstance(message, dict) else None,
                },
                "finish_reason": choice.get("finish_reason") or "stop",
            }
        ],
        "usage": {
            "prompt_tokens": _count(usage, "prompt_tokens"),
            "completion_tokens": _count(usage, "completion_tokens"),
            "total_tokens": _count(usage, "total_tokens"),
        },
    }
