"""Configuration for fetcher clients."""

from .loader import ConfigLoader
from .models import (
    FetcherConfig,
    TransportConfig,
    TransportOption,
    apply_transport_options,
    with_handshake_timeout,
    with_keep_alive,
    with_max_connections,
    with_trust_env,
)

__all__ = [
    "ConfigLoader",
    "FetcherConfig",
    "TransportConfig",
    "TransportOption",
    "apply_transport_options",
    "with_handshake_timeout",
    "with_keep_alive",
    "with_max_connections",
    "with_trust_env",
]
