"""Configuration models for the transport and default request settings."""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

from ..exceptions import ConfigurationError

DEFAULT_KEEP_ALIVE = 60.0
DEFAULT_HANDSHAKE_TIMEOUT = 10.0
DEFAULT_MAX_CONNECTIONS = 100


@dataclass(frozen=True)
class TransportConfig:
    """Settings used to build the pooled connection of one client.

    Durations are in seconds.
    """

    keep_alive: float = DEFAULT_KEEP_ALIVE
    handshake_timeout: float = DEFAULT_HANDSHAKE_TIMEOUT
    max_connections: int = DEFAULT_MAX_CONNECTIONS
    trust_env: bool = True

    def __post_init__(self):
        """Validate transport configuration after initialization."""
        _require_duration(self.keep_alive, "keep_alive", "Keep-alive")
        _require_duration(self.handshake_timeout, "handshake_timeout", "Handshake timeout")

        if isinstance(self.max_connections, bool) or not isinstance(self.max_connections, int):
            raise ConfigurationError(
                f"Max connections must be an integer, got {self.max_connections!r}",
                field="max_connections",
            )

        if self.max_connections <= 0:
            raise ConfigurationError(
                "Max connections must be positive", field="max_connections"
            )

        if not isinstance(self.trust_env, bool):
            raise ConfigurationError(
                f"trust_env must be a boolean, got {self.trust_env!r}",
                field="trust_env",
            )


def _require_duration(value: Any, field_name: str, label: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(
            f"{label} must be a number of seconds, got {value!r}", field=field_name
        )

    if not math.isfinite(value):
        raise ConfigurationError(f"{label} must be finite", field=field_name)

    if value < 0:
        raise ConfigurationError(f"{label} cannot be negative", field=field_name)


TransportOption = Callable[[TransportConfig], TransportConfig]


def with_keep_alive(seconds: float) -> TransportOption:
    """Set how long idle pooled connections are kept alive."""

    def option(config: TransportConfig) -> TransportConfig:
        return replace(config, keep_alive=seconds)

    return option


def with_handshake_timeout(seconds: float) -> TransportOption:
    """Set the timeout for establishing a connection, TLS handshake included."""

    def option(config: TransportConfig) -> TransportConfig:
        return replace(config, handshake_timeout=seconds)

    return option


def with_max_connections(limit: int) -> TransportOption:
    """Set the maximum number of pooled connections."""

    def option(config: TransportConfig) -> TransportConfig:
        return replace(config, max_connections=limit)

    return option


def with_trust_env(trust_env: bool) -> TransportOption:
    """Toggle proxy resolution from HTTP_PROXY/HTTPS_PROXY/NO_PROXY."""

    def option(config: TransportConfig) -> TransportConfig:
        return replace(config, trust_env=trust_env)

    return option


def apply_transport_options(*options: TransportOption) -> TransportConfig:
    """Apply options in order to the default configuration.

    Raises:
      ConfigurationError: If any option fails
    """
    config = TransportConfig()
    for option in options:
        config = option(config)
    return config


@dataclass
class FetcherConfig:
    """Transport settings and request defaults loaded from a config file."""

    transport: TransportConfig = field(default_factory=TransportConfig)
    default_headers: dict[str, str] = field(default_factory=dict)
    max_attempts: int = 1
    source: Optional[str] = None

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ConfigurationError(
                "max_attempts must be at least 1",
                config_file=self.source,
                field="request.max_attempts",
            )

    def transport_options(self) -> list[TransportOption]:
        """Options that reproduce this file's transport settings."""
        return [
            with_keep_alive(self.transport.keep_alive),
            with_handshake_timeout(self.transport.handshake_timeout),
            with_max_connections(self.transport.max_connections),
            with_trust_env(self.transport.trust_env),
        ]

    def request_options(self) -> list[Any]:
        """Default request options (headers and attempt limit)."""
        from ..http.request import with_headers, with_max_attempts

        options = [with_max_attempts(self.max_attempts)]
        if self.default_headers:
            options.insert(0, with_headers(self.default_headers))
        return options
