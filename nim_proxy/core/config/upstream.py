"""Upstream (NVIDIA NIM) configuration module.

This module handles the settings needed to reach the upstream API:
- Base URL and bearer credential
- Buffered request timeout
- Streaming connect/read timeouts
"""

from dataclasses import dataclass

from nim_proxy.core.config.schema import DEFAULT_NVIDIA_BASE_URL, ConfigSchema
from nim_proxy.core.config.validation import load_env_var


@dataclass(frozen=True)
class UpstreamConfig:
    """Immutable upstream settings.

    A missing ``api_key`` is allowed here; the completions endpoint reports
    it per request instead of refusing to start.
    """

    api_key: str | None = None
    base_url: str = DEFAULT_NVIDIA_BASE_URL
    request_timeout: int = 120
    streaming_connect_timeout: float = 120.0
    streaming_read_timeout: float | None = None


class UpstreamSettings:
    """Loads upstream configuration from environment variables."""

    @staticmethod
    def load() -> UpstreamConfig:
        """Load upstream configuration using schema-based validation.

        Raises:
            ConfigError: If any environment variable fails validation
        """
        return UpstreamConfig(
            api_key=load_env_var(ConfigSchema.NVIDIA_API_KEY),
            base_url=load_env_var(ConfigSchema.NVIDIA_BASE_URL),
            request_timeout=load_env_var(ConfigSchema.REQUEST_TIMEOUT),
            streaming_connect_timeout=load_env_var(
                ConfigSchema.STREAMING_CONNECT_TIMEOUT_SECONDS
            ),
            streaming_read_timeout=load_env_var(ConfigSchema.STREAMING_READ_TIMEOUT_SECONDS),
        )
