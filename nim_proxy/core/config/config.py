"""Configuration object for NIM Proxy.

Configuration is organized into focused modules:
- server: Server settings (host, port, log level)
- upstream: NVIDIA NIM settings (base URL, credential, timeouts)

Unlike a module-level singleton, a ``Config`` is built once (usually via
``Config.from_env()``) and handed to ``create_app``; request handlers read it
from ``app.state``. Tests construct one directly with fake credentials.
"""

import hashlib
from typing import Any

from nim_proxy.core.config.server import ServerConfig, ServerSettings
from nim_proxy.core.config.upstream import UpstreamConfig, UpstreamSettings


class Config:
    """Direct property access to all settings."""

    def __init__(
        self,
        server: ServerConfig | None = None,
        upstream: UpstreamConfig | None = None,
    ) -> None:
        self._server = server or ServerConfig()
        self._upstream = upstream or UpstreamConfig()

    @classmethod
    def from_env(cls) -> "Config":
        """Load every configuration module from the environment.

        Raises:
            ConfigError: If any environment variable fails validation
        """
        return cls(server=ServerSettings.load(), upstream=UpstreamSettings.load())

    # Server settings
    @property
    def host(self) -> str:
        return self._server.host

    @property
    def port(self) -> int:
        return self._server.port

    @property
    def log_level(self) -> str:
        return self._server.log_level

    @property
    def log_request_bodies(self) -> bool:
        return self._server.log_request_bodies

    # Upstream settings
    @property
    def upstream(self) -> UpstreamConfig:
        return self._upstream

    @property
    def nvidia_api_key(self) -> str | None:
        return self._upstream.api_key

    @property
    def nvidia_base_url(self) -> str:
        return self._upstream.base_url

    @property
    def request_timeout(self) -> int:
        return self._upstream.request_timeout

    @property
    def streaming_connect_timeout(self) -> float:
        return self._upstream.streaming_connect_timeout

    @property
    def streaming_read_timeout(self) -> float | None:
        return self._upstream.streaming_read_timeout

    # Utility methods
    def is_api_key_configured(self) -> bool:
        return bool(self.nvidia_api_key)

    @property
    def api_key_hash(self) -> str:
        return (
            "<not-set>"
            if not self.nvidia_api_key
            else "sha256:" + hashlib.sha256(self.nvidia_api_key.encode()).hexdigest()[:16] + "..."
        )

    def to_dict(self) -> dict[str, Any]:
        """Return configuration as a display-safe dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "log_level": self.log_level,
            "log_request_bodies": self.log_request_bodies,
            "nvidia_base_url": self.nvidia_base_url,
            "nvidia_api_key": self.api_key_hash,
            "request_timeout": self.request_timeout,
            "streaming_connect_timeout": self.streaming_connect_timeout,
            "streaming_read_timeout": self.streaming_read_timeout,
        }
