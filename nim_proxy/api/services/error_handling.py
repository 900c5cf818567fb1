"""Error handling services for API endpoints.

Every failure the proxy reports uses the OpenAI error envelope:

    {"error": {"message": "...", "type": "...", "code": "..."}}

``code`` is omitted when there is nothing specific to say.
"""

import logging
import traceback
from dataclasses import dataclass
from typing import Any

from fastapi.responses import JSONResponse

from nim_proxy.core.error_types import ErrorCode, ErrorType
from nim_proxy.core.exceptions import (
    MissingCredentialError,
    ProxyError,
    TranslationError,
    UpstreamAPIError,
    UpstreamConnectionError,
    UpstreamTimeoutError,
)

logger = logging.getLogger(__name__)


def error_body(message: str, error_type: str, code: str | None = None) -> dict[str, Any]:
    error: dict[str, Any] = {"message": message, "type": error_type}
    if code is not None:
        error["code"] = code
    return {"error": error}


@dataclass(frozen=True, slots=True)
class ErrorResponseBuilder:
    """Centralized builder for consistent error responses across all endpoints."""

    @staticmethod
    def build(
        status_code: int, message: str, error_type: str, code: str | None = None
    ) -> JSONResponse:
        return JSONResponse(status_code=status_code, content=error_body(message, error_type, code))

    @staticmethod
    def missing_credential(message: str = "NVIDIA API key not configured") -> JSONResponse:
        """500 for a completions call made without NVIDIA_API_KEY."""
        return ErrorResponseBuilder.build(
            500, message, ErrorType.INVALID_CONFIGURATION, ErrorCode.MISSING_API_KEY
        )

    @staticmethod
    def upstream_api_error(status_code: int, message: str) -> JSONResponse:
        """Mirror the upstream's status and message."""
        return ErrorResponseBuilder.build(
            status_code, message, ErrorType.API_ERROR, str(status_code)
        )

    @staticmethod
    def connection_error(message: str = "Cannot connect to NVIDIA API") -> JSONResponse:
        return ErrorResponseBuilder.build(
            500, message, ErrorType.CONNECTION_ERROR, ErrorCode.SERVER_ERROR
        )

    @staticmethod
    def upstream_timeout(message: str = "NVIDIA API request timed out") -> JSONResponse:
        return ErrorResponseBuilder.build(
            500, message, ErrorType.CONNECTION_ERROR, ErrorCode.TIMEOUT
        )

    @staticmethod
    def translation_error(message: str) -> JSONResponse:
        return ErrorResponseBuilder.build(
            500, message, ErrorType.TRANSLATION_ERROR, ErrorCode.INVALID_UPSTREAM_RESPONSE
        )

    @staticmethod
    def stream_error(status_code: int = 500, detail: str | None = None) -> JSONResponse:
        """Returned instead of an event stream when the stream cannot be opened."""
        message = "Streaming request failed"
        if detail:
            message += f": {detail}"
        code = str(status_code) if status_code != 500 else None
        return ErrorResponseBuilder.build(status_code, message, ErrorType.STREAM_ERROR, code)

    @staticmethod
    def invalid_request(message: str, status_code: int = 400) -> JSONResponse:
        return ErrorResponseBuilder.build(
            status_code, message, ErrorType.INVALID_REQUEST, ErrorCode.INVALID_REQUEST
        )

    @staticmethod
    def http_error(status_code: int, message: str) -> JSONResponse:
        return ErrorResponseBuilder.build(status_code, message, ErrorType.INVALID_REQUEST)

    @staticmethod
    def internal_error(message: str = "Internal server error") -> JSONResponse:
        return ErrorResponseBuilder.build(
            500, message, ErrorType.INTERNAL_ERROR, ErrorCode.SERVER_ERROR
        )


def _log_traceback(log: Any = logger) -> None:
    log.error(traceback.format_exc())


def error_response_from_exception(exc: Exception) -> JSONResponse:
    """Convert any failure from the non-streaming path into an envelope."""
    if isinstance(exc, MissingCredentialError):
        return ErrorResponseBuilder.missing_credential(exc.message)
    if isinstance(exc, UpstreamAPIError):
        logger.error(f"Upstream API error {exc.status_code}: {exc.message}")
        return ErrorResponseBuilder.upstream_api_error(exc.status_code, exc.message)
    if isinstance(exc, UpstreamTimeoutError):
        logger.error(f"Upstream timeout: {exc.message}")
        return ErrorResponseBuilder.upstream_timeout(exc.message)
    if isinstance(exc, UpstreamConnectionError):
        logger.error(f"Upstream connection error: {exc.message}")
        return ErrorResponseBuilder.connection_error()
    if isinstance(exc, TranslationError):
        logger.error(f"Cannot translate upstream response: {exc.message}")
        return ErrorResponseBuilder.translation_error(exc.message)
    if isinstance(exc, ProxyError):
        logger.error(f"Proxy error: {exc.message}")
        return ErrorResponseBuilder.internal_error(exc.message)

    logger.error(f"Unexpected error: {exc!r}")
    _log_traceback()
    return ErrorResponseBuilder.internal_error()


def stream_open_error_response(exc: Exception) -> JSONResponse:
    """Convert a failure to open the upstream stream into a single envelope."""
    if isinstance(exc, MissingCredentialError):
        return ErrorResponseBuilder.missing_credential(exc.message)
    if isinstance(exc, UpstreamAPIError):
        logger.error(f"Streaming request rejected by upstream {exc.status_code}: {exc.message}")
        return ErrorResponseBuilder.stream_error(exc.status_code, exc.message)
    if isinstance(exc, ProxyError):
        logger.error(f"Streaming request failed: {exc.message}")
        return ErrorResponseBuilder.stream_error(500, exc.message)

    logger.error(f"Streaming request failed: {exc!r}")
    _log_traceback()
    return ErrorResponseBuilder.stream_error()
