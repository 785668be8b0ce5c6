"""Custom exception classes for the fetcher package."""

from typing import Optional


class FetcherError(Exception):
    """Base exception class for all fetcher errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class ConfigurationError(FetcherError):
    """Raised when a transport option or configuration file is invalid."""

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        field: Optional[str] = None,
    ):
        super().__init__(message)
        self.config_file = config_file
        self.field = field


class BuildError(FetcherError):
    """Raised when a request cannot be constructed."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, cause)
        self.field = field


class ContextError(FetcherError):
    """Base class for cancellation and deadline errors."""


class ContextCancelledError(ContextError):
    """Raised when the request context has been cancelled."""

    def __init__(self, message: str = "context canceled"):
        super().__init__(message)


class DeadlineExceededError(ContextError):
    """Raised when the request context deadline has passed."""

    def __init__(self, message: str = "context deadline exceeded"):
        super().__init__(message)


class TransportError(FetcherError):
    """Raised when the underlying HTTP call fails outright."""


class NetworkError(TransportError):
    """Raised when network-related errors occur."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(f"Network error: {message}", cause)


class TimeoutError(TransportError):
    """Raised when the transport times out."""

    def __init__(
        self,
        message: str = "Request timed out",
        timeout_seconds: Optional[float] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, cause)
        self.timeout_seconds = timeout_seconds


class HookError(FetcherError):
    """Raised when a post-dispatch hook fails."""

    def __init__(
        self,
        hook_name: str,
        message: str = "hook failed",
        cause: Optional[Exception] = None,
    ):
        super().__init__(f"[{hook_name}] {message}", cause)
        self.hook_name = hook_name
