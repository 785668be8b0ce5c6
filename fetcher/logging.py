"""Structured logging support for the fetcher package."""

import logging
import os
import sys
from typing import Any, Dict, Optional

import structlog


class SensitiveDataFilter:
  """Filter to keep credentials out of request logs."""

  SENSITIVE_KEYS = {
    "authorization", "proxy_authorization", "cookie", "set_cookie",
    "api_key", "x_api_key", "password", "secret", "token", "credential"
  }

  @classmethod
  def filter_sensitive_data(cls, data: Any) -> Any:
    """Recursively filter sensitive data from dictionaries and other structures.

    Args:
      data: Data structure to filter

    Returns:
      Filtered data structure with sensitive values replaced
    """
    if isinstance(data, dict):
      filtered = {}
      for key, value in data.items():
        if isinstance(key, str) and cls._is_sensitive_key(key):
          filtered[key] = cls._mask_sensitive_value(value)
        else:
          filtered[key] = cls.filter_sensitive_data(value)
      return filtered
    elif isinstance(data, list):
      return [cls.filter_sensitive_data(item) for item in data]
    elif isinstance(data, tuple):
      return tuple(cls.filter_sensitive_data(item) for item in data)
    else:
      return data

  @classmethod
  def _is_sensitive_key(cls, key: str) -> bool:
    key_lower = key.lower().replace("-", "_").replace(" ", "_")
    return any(sensitive in key_lower for sensitive in cls.SENSITIVE_KEYS)

  @classmethod
  def _mask_sensitive_value(cls, value: Any) -> str:
    if value is None:
      return "[NONE]"

    value_str = str(value)
    if len(value_str) <= 8:
      return "[REDACTED]"
    # Show first 4 and last 4 characters
    return f"{value_str[:4]}...{value_str[-4:]}"


def configure_logging(
  debug_mode: bool = False,
  log_level: Optional[str] = None,
  log_file: Optional[str] = None,
  structured: bool = True,
) -> None:
  """Configure structured logging for fetcher.

  Args:
    debug_mode: Enable debug mode with per-attempt logging
    log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
    log_file: Optional file path for log output
    structured: Use structured JSON logging format
  """
  if log_level:
    level = getattr(logging, log_level.upper(), logging.INFO)
  elif debug_mode:
    level = logging.DEBUG
  else:
    level = logging.INFO

  processors = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    _add_process_context,
    _filter_sensitive_processor,
  ]

  if structured:
    processors.append(structlog.processors.JSONRenderer())
  else:
    processors.append(structlog.dev.ConsoleRenderer())

  structlog.configure(
    processors=processors,
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
  )

  handlers = []

  console_handler = logging.StreamHandler(sys.stderr)
  console_handler.setLevel(level)
  handlers.append(console_handler)

  if log_file:
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(level)
    handlers.append(file_handler)

  logging.basicConfig(
    level=level,
    handlers=handlers,
    format="%(message)s" if structured else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    force=True,
  )

  logging.getLogger("aiohttp").setLevel(logging.WARNING)


def _add_process_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
  event_dict["process_id"] = os.getpid()
  return event_dict


def _filter_sensitive_processor(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
  return SensitiveDataFilter.filter_sensitive_data(event_dict)


class FetcherLogger:
  """Logger for request dispatch with bound context."""

  def __init__(self, name: str):
    """Initialize the logger.

    Args:
      name: Logger name
    """
    self.name = name
    self.logger = structlog.get_logger(name)
    self.context: Dict[str, Any] = {}

  def bind(self, **kwargs: Any) -> "FetcherLogger":
    """Return a new logger with additional bound context."""
    new_logger = FetcherLogger(self.name)
    new_logger.context = {**self.context, **kwargs}
    new_logger.logger = self.logger.bind(**SensitiveDataFilter.filter_sensitive_data(new_logger.context))
    return new_logger

  def debug(self, message: str, **kwargs: Any) -> None:
    self.logger.debug(message, **SensitiveDataFilter.filter_sensitive_data(kwargs))

  def info(self, message: str, **kwargs: Any) -> None:
    self.logger.info(message, **SensitiveDataFilter.filter_sensitive_data(kwargs))

  def warning(self, message: str, **kwargs: Any) -> None:
    self.logger.warning(message, **SensitiveDataFilter.filter_sensitive_data(kwargs))

  def error(self, message: str, **kwargs: Any) -> None:
    self.logger.error(message, **SensitiveDataFilter.filter_sensitive_data(kwargs))

  def log_request(
    self,
    method: str,
    url: str,
    max_attempts: int,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
  ) -> None:
    """Log the start of a dispatch.

    Args:
      method: HTTP method
      url: Request URL
      max_attempts: Attempt limit for this request
      headers: Request headers (filtered, included only in debug mode)
      **kwargs: Additional context
    """
    context = {
      "event_type": "http_request",
      "method": method,
      "url": url,
      "max_attempts": max_attempts,
      **kwargs
    }

    if headers and logging.getLogger(self.name).isEnabledFor(logging.DEBUG):
      context["headers"] = dict(headers)

    self.debug("HTTP request dispatched", **context)

  def log_attempt(self, attempt: int, max_attempts: int, status_code: int, **kwargs: Any) -> None:
    """Log the outcome of one attempt, at info level when it triggers a retry."""
    context = {
      "event_type": "http_attempt",
      "attempt": attempt,
      "max_attempts": max_attempts,
      "status_code": status_code,
      **kwargs
    }

    if status_code >= 500 and attempt < max_attempts:
      self.info("Server error, retrying request", **context)
    else:
      self.debug("HTTP attempt completed", **context)

  def log_response(
    self,
    status_code: int,
    attempts: int,
    latency_ms: int,
    **kwargs: Any
  ) -> None:
    """Log the final response of a dispatch.

    Args:
      status_code: Final HTTP status code
      attempts: Number of calls made
      latency_ms: Total latency across attempts in milliseconds
      **kwargs: Additional context
    """
    context = {
      "event_type": "http_response",
      "status_code": status_code,
      "attempts": attempts,
      "latency_ms": latency_ms,
      **kwargs
    }

    if status_code >= 500:
      self.warning("HTTP request finished with server error", **context)
    else:
      self.debug("HTTP request completed", **context)


def get_logger(name: str) -> FetcherLogger:
  """Get a FetcherLogger instance.

  Args:
    name: Logger name

  Returns:
    FetcherLogger instance
  """
  return FetcherLogger(name)


def is_debug_enabled() -> bool:
  """Check if debug logging is enabled."""
  return logging.getLogger().isEnabledFor(logging.DEBUG)
