"""Chat completions service.

Runs one /v1/chat/completions request end to end: credential check,
request translation, upstream call (buffered or streamed) and response
translation. Every failure is converted to a JSON error envelope here, at the
boundary of the endpoint.
"""

import json
import time
import uuid
from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from nim_proxy.api.services.error_handling import (
    ErrorResponseBuilder,
    error_response_from_exception,
    stream_open_error_response,
)
from nim_proxy.api.services.streaming import (
    sse_headers,
    streaming_response,
    with_upstream_release,
)
from nim_proxy.conversion.nim_sse_to_openai import LoggingStreamObserver, relay_nim_stream
from nim_proxy.conversion.request_converter import openai_to_nim_request
from nim_proxy.conversion.response_converter import nim_to_openai_response
from nim_proxy.core.config import Config
from nim_proxy.core.logging import ConversationLogger, conversation_logger
from nim_proxy.core.nim_client import NIMClient
from nim_proxy.models.chat import ChatCompletionRequest


class ChatCompletionsService:
    def __init__(self, config: Config, client: NIMClient) -> None:
        self.config = config
        self.client = client

    def _log_body(self, label: str, body: Any) -> None:
        if self.config.log_request_bodies:
            conversation_logger.debug(f"{label}:\n{json.dumps(body, indent=2, ensure_ascii=False)}")

    async def handle(self, request: ChatCompletionRequest, http_request: Request) -> Response:
        request_id = str(uuid.uuid4())

        with ConversationLogger.correlation_context(request_id):
            conversation_logger.info(
                f"🚀 START | Model: {request.model} | "
                f"Stream: {request.is_streaming} | "
                f"Messages: {len(request.messages)}"
            )
            start_time = time.time()

            if not self.config.is_api_key_configured():
                conversation_logger.error("❌ NVIDIA_API_KEY is not configured")
                return ErrorResponseBuilder.missing_credential()

            self._log_body("Received request", request.model_dump(exclude_none=True))
            nim_request = openai_to_nim_request(request)
            self._log_body("Converted to NIM format", nim_request)

            if request.is_streaming:
                return await self._handle_streaming(request, nim_request, http_request)

            try:
                nim_response = await self.client.create_chat_completion(nim_request)
                self._log_body("NIM response", nim_response)
                openai_response = nim_to_openai_response(nim_response, request.model)
            except Exception as e:
                duration_ms = (time.time() - start_time) * 1000
                conversation_logger.error(f"❌ ERROR | Duration: {duration_ms:.0f}ms | {e!r}")
                return error_response_from_exception(e)

            usage = openai_response["usage"]
            duration_ms = (time.time() - start_time) * 1000
            conversation_logger.info(
                f"✅ COMPLETE | Duration: {duration_ms:.0f}ms | "
                f"Upstream: {nim_request['model']} | "
                f"Input Tokens: {usage['prompt_tokens']:,} | "
                f"Output Tokens: {usage['completion_tokens']:,}"
            )
            return JSONResponse(status_code=200, content=openai_response)

    async def _handle_streaming(
        self,
        request: ChatCompletionRequest,
        nim_request: dict[str, Any],
        http_request: Request,
    ) -> Response:
        try:
            upstream_response = await self.client.open_chat_completion_stream(nim_request)
        except Exception as e:
            return stream_open_error_response(e)

        relayed: AsyncGenerator[str, None] = relay_nim_stream(
            upstream_response.aiter_bytes(),
            requested_model=request.model,
            observer=LoggingStreamObserver(conversation_logger),
            is_disconnected=http_request.is_disconnected,
        )
        return streaming_response(
            stream=with_upstream_release(
                original_stream=relayed,
                upstream_response=upstream_response,
            ),
            headers=sse_headers(),
        )
