"""HTTP request building and dispatch."""

from fetcher.http.client import Client
from fetcher.http.request import (
  Request,
  RequestConfig,
  new_request,
  with_after_do,
  with_body,
  with_header,
  with_headers,
  with_json,
  with_max_attempts,
  with_params,
)
from fetcher.http.response import Response
from fetcher.http.retry import RetryHandler

__all__ = [
  "Client",
  "Request",
  "RequestConfig",
  "Response",
  "RetryHandler",
  "new_request",
  "with_after_do",
  "with_body",
  "with_header",
  "with_headers",
  "with_json",
  "with_max_attempts",
  "with_params",
]
