from nim_proxy.core.config.config import Config
from nim_proxy.core.config.server import ServerConfig
from nim_proxy.core.config.upstream import UpstreamConfig
from nim_proxy.core.config.validation import ConfigError

__all__ = ["Config", "ConfigError", "ServerConfig", "UpstreamConfig"]
