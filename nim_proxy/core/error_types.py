"""Error type enumeration for NIM Proxy.

Provides the ``type`` values used in JSON error envelopes and the stream
relay's skip reasons.
"""

from enum import Enum


class ErrorType(str, Enum):
    """Error categories reported in ``{"error": {"type": ...}}``."""

    # Configuration
    INVALID_CONFIGURATION = "invalid_configuration"  # Upstream credential missing

    # Upstream
    API_ERROR = "api_error"  # Upstream answered with a non-success status
    CONNECTION_ERROR = "connection_error"  # Upstream unreachable or timed out
    TRANSLATION_ERROR = "translation_error"  # Upstream body could not be translated

    # Streaming
    STREAM_ERROR = "stream_error"  # Upstream stream could not be opened

    # Inbound
    INVALID_REQUEST = "invalid_request_error"  # Malformed inbound request

    # Catch-all
    INTERNAL_ERROR = "internal_error"  # Unhandled/unexpected error


class ErrorCode(str, Enum):
    """Values for the optional ``code`` field of the error envelope."""

    MISSING_API_KEY = "missing_api_key"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"
    INVALID_UPSTREAM_RESPONSE = "invalid_upstream_response"
    INVALID_REQUEST = "invalid_request"


class SkipReason(str, Enum):
    """Why the stream relay dropped a single upstream event."""

    INVALID_JSON = "invalid_json"
    UNTRANSLATABLE = "untranslatable"
