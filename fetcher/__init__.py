"""Request building and dispatch over a pooled aiohttp transport."""

from .config import (
    TransportConfig,
    with_handshake_timeout,
    with_keep_alive,
    with_max_connections,
    with_trust_env,
)
from .context import Context
from .exceptions import (
    BuildError,
    ConfigurationError,
    ContextCancelledError,
    ContextError,
    DeadlineExceededError,
    FetcherError,
    HookError,
    NetworkError,
    TimeoutError,
    TransportError,
)
from .http import (
    Client,
    Request,
    Response,
    new_request,
    with_after_do,
    with_body,
    with_header,
    with_headers,
    with_json,
    with_max_attempts,
    with_params,
)
from .protocols import Fetcher

__all__ = [
    "Client",
    "Context",
    "Fetcher",
    "Request",
    "Response",
    "TransportConfig",
    "new_request",
    "with_after_do",
    "with_body",
    "with_handshake_timeout",
    "with_header",
    "with_headers",
    "with_json",
    "with_keep_alive",
    "with_max_attempts",
    "with_max_connections",
    "with_params",
    "with_trust_env",
    "FetcherError",
    "ConfigurationError",
    "BuildError",
    "ContextError",
    "ContextCancelledError",
    "DeadlineExceededError",
    "TransportError",
    "NetworkError",
    "TimeoutError",
    "HookError",
]
