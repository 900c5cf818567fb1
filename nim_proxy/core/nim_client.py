"""NVIDIA NIM API client.

Sends already-translated chat completion payloads upstream and maps httpx
failures onto the proxy's exception hierarchy:

- non-2xx status      -> UpstreamAPIError
- timeout             -> UpstreamTimeoutError
- network failure     -> UpstreamConnectionError
- non-JSON 2xx body   -> TranslationError
"""

import json
import time
from typing import Any

import httpx

from nim_proxy.core.config import Config
from nim_proxy.core.exceptions import (
    MissingCredentialError,
    TranslationError,
    UpstreamAPIError,
    UpstreamConnectionError,
    UpstreamTimeoutError,
)
from nim_proxy.core.logging import conversation_logger

DEFAULT_API_ERROR_MESSAGE = "API request failed"


def extract_error_message(body: Any) -> str:
    """Pull a human-readable message out of an upstream error body."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if body.get("detail"):
            return str(body["detail"])
        if body.get("message"):
            return str(body["message"])
    return DEFAULT_API_ERROR_MESSAGE


def _decode_body(content: bytes) -> Any:
    if not content:
        return None
    try:
        return json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return content.decode("utf-8", errors="replace")


class NIMClient:
    """Async client for the NIM ``/chat/completions`` endpoint."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str,
        request_timeout: float = 120,
        streaming_connect_timeout: float = 120,
        streaming_read_timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self.streaming_timeout = httpx.Timeout(
            streaming_connect_timeout, read=streaming_read_timeout
        )
        self.client = httpx.AsyncClient(timeout=request_timeout, transport=transport)

    @classmethod
    def from_config(
        cls, config: Config, transport: httpx.AsyncBaseTransport | None = None
    ) -> "NIMClient":
        return cls(
            api_key=config.nvidia_api_key,
            base_url=config.nvidia_base_url,
            request_timeout=config.request_timeout,
            streaming_connect_timeout=config.streaming_connect_timeout,
            streaming_read_timeout=config.streaming_read_timeout,
            transport=transport,
        )

    @property
    def chat_completions_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _headers(self, accept: str) -> dict[str, str]:
        if not self.api_key:
            raise MissingCredentialError()
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": accept,
        }

    async def create_chat_completion(self, payload: dict[str, Any]) -> Any:
        """Send a buffered chat completion and return the decoded JSON body."""
        headers = self._headers("application/json")
        start_time = time.time()
        conversation_logger.debug(f"📤 NIM REQUEST | Model: {payload.get('model', 'unknown')}")

        try:
            response = await self.client.post(
                self.chat_completions_url, json=payload, headers=headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = _decode_body(e.response.content)
            raise UpstreamAPIError(
                e.response.status_code, extract_error_message(body), body
            ) from e
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(
                f"NVIDIA API request timed out after {self.request_timeout}s"
            ) from e
        except httpx.TransportError as e:
            raise UpstreamConnectionError(f"Cannot connect to NVIDIA API: {e}") from e

        duration_ms = (time.time() - start_time) * 1000
        conversation_logger.debug(f"📥 NIM RESPONSE | Duration: {duration_ms:.0f}ms")

        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise TranslationError("Upstream response is not valid JSON") from e

    async def open_chat_completion_stream(self, payload: dict[str, Any]) -> httpx.Response:
        """Open a streaming chat completion.

        The returned response has a verified 2xx status and an unread body;
        the caller owns it and must ``aclose()`` it.
        """
        headers = self._headers("text/event-stream")
        conversation_logger.debug(f"📤 NIM STREAM | Model: {payload.get('model', 'unknown')}")

        request = self.client.build_request(
            "POST",
            self.chat_completions_url,
            json=payload,
            headers=headers,
            timeout=self.streaming_timeout,
        )
        try:
            response = await self.client.send(request, stream=True)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError("Timed out opening NVIDIA API stream") from e
        except httpx.TransportError as e:
            raise UpstreamConnectionError(f"Cannot connect to NVIDIA API: {e}") from e

        if response.is_error:
            try:
                content = await response.aread()
            except httpx.HTTPError:
                content = b""
            finally:
                await response.aclose()
            body = _decode_body(content)
            raise UpstreamAPIError(response.status_code, extract_error_message(body), body)

        return response

    async def aclose(self) -> None:
        await self.client.aclose()
