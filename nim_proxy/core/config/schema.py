"""Declarative schema for environment variable configuration.

This module provides a single source of truth for all environment variables,
including automatic type coercion, validation, and documentation generation.
"""

from collections.abc import Callable
from dataclasses import dataclass, fields
from typing import Any

DEFAULT_NVIDIA_BASE_URL = "https://integrate.api.nvidia.com/v1"


@dataclass(frozen=True)
class EnvVarSpec:
    """Specification for a single environment variable.

    Attributes:
        name: Environment variable name (e.g., "PORT", "LOG_LEVEL")
        default: Default value if env var not set
        type_hint: Type for validation (int, str, float, bool)
        description: Human-readable description for docs
        validator: Optional custom validation function
        coerce: Optional function to convert string to target type
        secret: Whether the value must be masked when displayed
    """

    name: str
    default: Any
    type_hint: type
    description: str
    validator: Callable[[Any], bool] | None = None
    coerce: Callable[[str], Any] | None = None
    secret: bool = False


class ConfigSchema:
    """Registry of all configuration environment variables."""

    # === Server Settings ===

    HOST = EnvVarSpec(
        name="HOST",
        default="0.0.0.0",
        type_hint=str,
        description="Server host address to bind to",
    )

    PORT = EnvVarSpec(
        name="PORT",
        default=3000,
        type_hint=int,
        description="Server port number",
        validator=lambda x: 1 <= x <= 65535,
    )

    LOG_LEVEL = EnvVarSpec(
        name="LOG_LEVEL",
        default="INFO",
        type_hint=str,
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        validator=lambda x: x.split()[0].upper()
        in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )

    LOG_REQUEST_BODIES = EnvVarSpec(
        name="LOG_REQUEST_BODIES",
        default=False,
        type_hint=bool,
        description="Log inbound, upstream and outbound JSON bodies at DEBUG level",
    )

    # === Upstream Settings ===

    NVIDIA_API_KEY = EnvVarSpec(
        name="NVIDIA_API_KEY",
        default=None,
        type_hint=str,
        description="Bearer credential for the NVIDIA NIM API",
        secret=True,
    )

    NVIDIA_BASE_URL = EnvVarSpec(
        name="NVIDIA_BASE_URL",
        default=DEFAULT_NVIDIA_BASE_URL,
        type_hint=str,
        description="Base URL of the NVIDIA NIM API",
        validator=lambda x: x.startswith(("http://", "https://")),
    )

    # === Timeout Settings ===

    REQUEST_TIMEOUT = EnvVarSpec(
        name="REQUEST_TIMEOUT",
        default=120,
        type_hint=int,
        description="Request timeout in seconds for non-streaming requests",
        validator=lambda x: x > 0,
    )

    STREAMING_CONNECT_TIMEOUT_SECONDS = EnvVarSpec(
        name="STREAMING_CONNECT_TIMEOUT_SECONDS",
        default=120.0,
        type_hint=float,
        description="Timeout for establishing a streaming request",
        validator=lambda x: x > 0,
    )

    STREAMING_READ_TIMEOUT_SECONDS = EnvVarSpec(
        name="STREAMING_READ_TIMEOUT_SECONDS",
        default=None,
        type_hint=float,
        description="Read timeout between streamed chunks (None = unlimited)",
        validator=lambda x: x is None or x > 0,
    )

    @classmethod
    def all_specs(cls) -> dict[str, EnvVarSpec]:
        """Return every declared spec keyed by environment variable name."""
        return {
            value.name: value
            for value in vars(cls).values()
            if isinstance(value, EnvVarSpec)
        }

    @classmethod
    def describe(cls) -> list[dict[str, Any]]:
        """Return a documentation-friendly view of the schema."""
        rows = []
        for spec in cls.all_specs().values():
            row = {f.name: getattr(spec, f.name) for f in fields(spec)}
            row.pop("validator")
            row.pop("coerce")
            row["type_hint"] = spec.type_hint.__name__
            rows.append(row)
        return rows
