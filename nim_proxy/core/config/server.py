"""Server configuration module.

Handles the bind address, port and logging settings of the proxy process.
"""

from dataclasses import dataclass

from nim_proxy.core.config.schema import ConfigSchema
from nim_proxy.core.config.validation import load_env_var


@dataclass(frozen=True)
class ServerConfig:
    """Immutable server settings.

    Attributes:
        host: Address uvicorn binds to
        port: Listen port
        log_level: Root logging level name
        log_request_bodies: Whether JSON bodies are logged at DEBUG level
    """

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    log_request_bodies: bool = False


class ServerSettings:
    """Loads server configuration from environment variables."""

    @staticmethod
    def load() -> ServerConfig:
        """Load server configuration using schema-based validation.

        Raises:
            ConfigError: If any environment variable fails validation
        """
        return ServerConfig(
            host=load_env_var(ConfigSchema.HOST),
            port=load_env_var(ConfigSchema.PORT),
            log_level=load_env_var(ConfigSchema.LOG_LEVEL),
            log_request_bodies=load_env_var(ConfigSchema.LOG_REQUEST_BODIES),
        )
