"""Relay NVIDIA NIM server-sent events as OpenAI chat completion chunks.

Upstream bytes arrive in arbitrary network-sized pieces. They are decoded
incrementally and split into lines by a persistent buffer, so an event whose
``data:`` line straddles two reads is reassembled before it is parsed.

Each upstream ``data: {...}`` event becomes one outgoing chunk:

    data: {"id": "chatcmpl-...", "object": "chat.completion.chunk", ...}\\n\\n

and the outgoing stream always ends with exactly one

    data: [DONE]\\n\\n

unless the upstream fails mid-stream or the caller goes away, in which case
the output simply stops.
"""

from __future__ import annotations

import codecs
import json
import logging
import time
from collections import Counter
from collections.abc import AsyncGenerator, AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx

from nim_proxy.conversion.response_converter import first_choice, new_completion_id
from nim_proxy.core.error_types import SkipReason
from nim_proxy.core.exceptions import TranslationError, UpstreamConnectionError

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"
DONE_EVENT = f"data: {DONE_SENTINEL}\n\n"

_UPSTREAM_STREAM_ERRORS = (httpx.HTTPError, httpx.StreamError, UpstreamConnectionError)


class RelayState(str, Enum):
    IDLE = "idle"
    RELAYING = "relaying"
    DONE_SENTINEL_FORWARDED = "done_sentinel_forwarded"
    UPSTREAM_ENDED = "upstream_ended"
    UPSTREAM_ERRORED = "upstream_errored"
    CLIENT_DISCONNECTED = "client_disconnected"


class SSELineBuffer:
    """Turn a sequence of byte chunks into complete text lines.

    Only newline-terminated lines are returned by ``feed``; the trailing
    partial line stays buffered until more bytes arrive or ``flush`` is
    called at end of stream. Multi-byte UTF-8 sequences split across chunks
    are decoded correctly.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = ""

    @property
    def pending(self) -> str:
        return self._pending

    def feed(self, chunk: bytes) -> list[str]:
        text = self._pending + self._decoder.decode(chunk)
        *lines, self._pending = text.split("\n")
        return [line.rstrip("\r") for line in lines]

    def flush(self) -> list[str]:
        text = self._pending + self._decoder.decode(b"", final=True)
        self._pending = ""
        if not text:
            return []
        return [line.rstrip("\r") for line in text.split("\n") if line]


@dataclass
class RelayStats:
    """Counters for a single relayed stream."""

    chunks_relayed: int = 0
    events_skipped: int = 0
    skip_reasons: Counter[str] = field(default_factory=Counter)
    state: RelayState = RelayState.IDLE
    error: str | None = None


class StreamObserver:
    """Hooks called by the relay; the base implementation only counts."""

    def __init__(self) -> None:
        self.stats = RelayStats()

    def on_start(self) -> None:
        self.stats.state = RelayState.RELAYING

    def on_chunk_relayed(self, chunk: dict[str, Any]) -> None:
        self.stats.chunks_relayed += 1

    def on_event_skipped(self, reason: SkipReason, payload: str, error: Exception) -> None:
        self.stats.events_skipped += 1
        self.stats.skip_reasons[reason.value] += 1

    def on_sentinel(self) -> None:
        self.stats.state = RelayState.DONE_SENTINEL_FORWARDED

    def on_upstream_end(self) -> None:
        self.stats.state = RelayState.UPSTREAM_ENDED

    def on_upstream_error(self, error: Exception) -> None:
        self.stats.state = RelayState.UPSTREAM_ERRORED
        self.stats.error = str(error) or type(error).__name__

    def on_client_disconnect(self) -> None:
        self.stats.state = RelayState.CLIENT_DISCONNECTED

    def on_closed(self) -> None:
        pass


class LoggingStreamObserver(StreamObserver):
    """Observer that also reports skips, failures and a closing summary."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        super().__init__()
        self.log = log or logger

    def on_event_skipped(self, reason: SkipReason, payload: str, error: Exception) -> None:
        super().on_event_skipped(reason, payload, error)
        self.log.warning(f"Skipping stream event ({reason.value}): {error} | {payload[:200]}")

    def on_upstream_error(self, error: Exception) -> None:
        super().on_upstream_error(error)
        self.log.error(f"Upstream stream error: {error!r}")

    def on_client_disconnect(self) -> None:
        super().on_client_disconnect()
        self.log.info("Client disconnected, stopping stream relay")

    def on_closed(self) -> None:
        self.log.info(
            f"STREAM CLOSED | Outcome: {self.stats.state.value} | "
            f"Chunks: {self.stats.chunks_relayed} | "
            f"Skipped: {self.stats.events_skipped}"
        )


def build_stream_chunk(event: Any, requested_model: str | None) -> dict[str, Any]:
    """Wrap one parsed upstream event in an OpenAI chunk envelope.

    Raises:
        TranslationError: If the event has no usable choice
    """
    choice = first_choice(event)
    delta = choice.get("delta")
    return {
        "id": new_completion_id(),
        "object": "chat.completion.chunk",
        "created": int(time.time()),
        "model": requested_model,
        "choices": [
            {
                "index": 0,
                "delta": delta if delta is not None else {},
                "finish_reason": choice.get("finish_reason"),
            }
        ],
    }


def format_sse(chunk: dict[str, Any]) -> str:
    return f"data: {json.dumps(chunk, ensure_ascii=False)}\n\n"


def _data_payload(line: str) -> str | None:
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX) :]
    # SSE allows a single optional space after the colon.
    return payload[1:] if payload.startswith(" ") else payload


async def relay_nim_stream(
    upstream_bytes: AsyncIterator[bytes],
    *,
    requested_model: str | None,
    observer: StreamObserver | None = None,
    is_disconnected: Callable[[], Awaitable[bool]] | None = None,
) -> AsyncGenerator[str, None]:
    """Translate an upstream SSE byte stream into OpenAI SSE strings.

    Args:
        upstream_bytes: Raw bytes from the upstream response body
        requested_model: Model name the caller asked for, echoed in every chunk
        observer: Receives relay events; a LoggingStreamObserver by default
        is_disconnected: Polled before each upstream chunk; a True result
            stops the relay without a terminator
    """
    observer = observer or LoggingStreamObserver()
    buffer = SSELineBuffer()
    observer.on_start()

    def handle_line(line: str) -> tuple[str | None, bool]:
        """Return (outgoing event or None, sentinel seen)."""
        payload = _data_payload(line)
        if payload is None:
            return None, False
        if payload.strip() == DONE_SENTINEL:
            return DONE_EVENT, True
        try:
            event = json.loads(payload)
        except (ValueError, RecursionError) as e:
            # Deeply nested payloads raise RecursionError rather than JSONDecodeError.
            observer.on_event_skipped(SkipReason.INVALID_JSON, payload, e)
            return None, False
        try:
            chunk = build_stream_chunk(event, requested_model)
        except TranslationError as e:
            observer.on_event_skipped(SkipReason.UNTRANSLATABLE, payload, e)
            return None, False
        observer.on_chunk_relayed(chunk)
        return format_sse(chunk), False

    try:
        try:
            async for raw_chunk in upstream_bytes:
                if is_disconnected is not None and await is_disconnected():
                    observer.on_client_disconnect()
                    return

                for line in buffer.feed(raw_chunk):
                    outgoing, done = handle_line(line)
                    if outgoing is not None:
                        yield outgoing
                    if done:
                        # Nothing after the sentinel is relayed, not even the
                        # rest of this chunk.
                        observer.on_sentinel()
                        return
        except _UPSTREAM_STREAM_ERRORS as e:
            observer.on_upstream_error(e)
            return

        for line in buffer.flush():
            outgoing, done = handle_line(line)
            if done:
                observer.on_sentinel()
                yield DONE_EVENT
                return
            if outgoing is not None:
                yield outgoing

        observer.on_upstream_end()
        yield DONE_EVENT
    finally:
        if observer.stats.state == RelayState.RELAYING:
            # Closed by the consumer (e.g. the server cancelled the response
            # because the caller went away) before reaching a terminal state.
            observer.on_client_disconnect()
        observer.on_closed()
