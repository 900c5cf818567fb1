"""OpenAI Chat Completions request models accepted by the proxy."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """A single conversation turn.

    Role and content are deliberately untyped: the proxy does not validate
    them and lets the upstream reject anything it cannot handle. Any other
    message fields are dropped.
    """

    model_config = ConfigDict(extra="ignore")

    role: Any = None
    content: Any = None


class ChatCompletionRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    model: str | None = Field(None, description="Inbound model name, resolved through the alias table")
    messages: list[ChatMessage] = Field(default_factory=list)
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    stream: bool | None = False

    @property
    def is_streaming(self) -> bool:
        return bool(self.stream)
