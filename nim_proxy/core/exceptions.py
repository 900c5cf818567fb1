"""
Exception hierarchy for the proxy.

All exceptions inherit from ProxyError, allowing the endpoint layer to
catch every proxy-specific failure with a single except clause and turn it
into a JSON error envelope.
"""

from __future__ import annotations


class ProxyError(Exception):
    """Base exception for all proxy errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingCredentialError(ProxyError):
    """Raised before any network call when NVIDIA_API_KEY is not configured."""

    def __init__(self, message: str = "NVIDIA API key not configured") -> None:
        super().__init__(message)


class UpstreamAPIError(ProxyError):
    """The upstream answered with a non-success HTTP status.

    Attributes:
        status_code: The upstream's HTTP status
        body: The decoded upstream body (dict when JSON, else text)
    """

    def __init__(self, status_code: int, message: str, body: object = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __repr__(self) -> str:
        return f"UpstreamAPIError(status_code={self.status_code!r}, message={self.message!r})"


class UpstreamConnectionError(ProxyError):
    """The upstream could not be reached."""


class UpstreamTimeoutError(UpstreamConnectionError):
    """The upstream did not answer within the configured timeout."""


class TranslationError(ProxyError):
    """An upstream body could not be translated (e.g. it had no choices)."""
