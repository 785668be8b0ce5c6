"""Request descriptors and the options used to build them."""

import io
import json
import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Optional, Tuple, Union

from multidict import CIMultiDict
from yarl import URL

from fetcher.buffer import BufferPool, default_pool
from fetcher.exceptions import BuildError

if TYPE_CHECKING:
  from fetcher.http.client import Client
  from fetcher.http.response import Response

METHOD_GET = "GET"
METHOD_HEAD = "HEAD"
METHOD_POST = "POST"
METHOD_PUT = "PUT"
METHOD_PATCH = "PATCH"
METHOD_DELETE = "DELETE"

_TOKEN = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")

Hook = Callable[["Request", "Response"], Optional[Awaitable[None]]]


@dataclass(frozen=True)
class RequestConfig:
  """Settings accumulated by request options before the request is built."""

  headers: Tuple[Tuple[str, str], ...] = ()
  body: Optional[bytes] = None
  params: Tuple[Tuple[str, str], ...] = ()
  max_attempts: int = 1
  hooks: Tuple[Hook, ...] = ()


RequestOption = Callable[[RequestConfig], RequestConfig]


def _set_header(headers: Tuple[Tuple[str, str], ...], name: str, value: str) -> Tuple[Tuple[str, str], ...]:
  if not isinstance(name, str) or not _TOKEN.fullmatch(name):
    raise BuildError(f"Invalid header name: {name!r}", field="headers")
  if isinstance(value, bytes):
    value = value.decode("latin-1")
  elif not isinstance(value, str):
    raise BuildError(
      f"Value for header '{name}' must be str or bytes, got {type(value).__name__}",
      field="headers"
    )
  if "\r" in value or "\n" in value:
    raise BuildError(f"Invalid value for header '{name}'", field="headers")
  kept = tuple((k, v) for k, v in headers if k.lower() != name.lower())
  return kept + ((name, value),)


def with_header(name: str, value: str) -> RequestOption:
  """Set a header, replacing any earlier value of the same name."""

  def option(config: RequestConfig) -> RequestConfig:
    return replace(config, headers=_set_header(config.headers, name, value))

  return option


def with_headers(headers: Mapping[str, str]) -> RequestOption:
  """Set every header in ``headers``."""

  def option(config: RequestConfig) -> RequestConfig:
    if not isinstance(headers, Mapping):
      raise BuildError(
        f"Headers must be a mapping, got {type(headers).__name__}", field="headers"
      )
    merged = config.headers
    for name, value in headers.items():
      merged = _set_header(merged, name, value)
    return replace(config, headers=merged)

  return option


def with_body(body: Union[bytes, bytearray, str]) -> RequestOption:
  """Send ``body`` as the request payload. Strings are UTF-8 encoded."""

  def option(config: RequestConfig) -> RequestConfig:
    if isinstance(body, str):
      data = body.encode("utf-8")
    elif isinstance(body, (bytes, bytearray, memoryview)):
      data = bytes(body)
    else:
      raise BuildError(
        f"Body must be bytes or str, got {type(body).__name__}", field="body"
      )
    return replace(config, body=data)

  return option


def with_json(payload: Any) -> RequestOption:
  """Send ``payload`` serialised as JSON and default the Content-Type."""

  def option(config: RequestConfig) -> RequestConfig:
    try:
      data = json.dumps(payload).encode("utf-8")
    except (TypeError, ValueError) as e:
      raise BuildError(f"Payload is not JSON serialisable: {e}", field="body", cause=e)

    headers = config.headers
    if not any(k.lower() == "content-type" for k, _ in headers):
      headers = headers + (("Content-Type", "application/json"),)
    return replace(config, body=data, headers=headers)

  return option


def with_params(params: Mapping[str, Any]) -> RequestOption:
  """Add query parameters to the request URL."""

  def option(config: RequestConfig) -> RequestConfig:
    if not isinstance(params, Mapping):
      raise BuildError(
        f"Params must be a mapping, got {type(params).__name__}", field="params"
      )
    if any(v is None for v in params.values()):
      raise BuildError("Query parameter values cannot be None", field="params")
    added = tuple((str(k), str(v)) for k, v in params.items())
    return replace(config, params=config.params + added)

  return option


def with_max_attempts(attempts: int) -> RequestOption:
  """Allow up to ``attempts`` calls when the server answers with a 5xx status."""

  def option(config: RequestConfig) -> RequestConfig:
    if isinstance(attempts, bool) or not isinstance(attempts, int) or attempts < 1:
      raise BuildError(
        f"max_attempts must be an integer >= 1, got {attempts!r}",
        field="max_attempts"
      )
    return replace(config, max_attempts=attempts)

  return option


def with_after_do(hook: Hook) -> RequestOption:
  """Register a hook to run after the final response is received.

  Hooks run in registration order and may be plain functions or coroutines.
  """

  def option(config: RequestConfig) -> RequestConfig:
    if not callable(hook):
      raise BuildError(f"Hook must be callable, got {hook!r}", field="hooks")
    return replace(config, hooks=config.hooks + (hook,))

  return option


class Request:
  """A fully configured, single-use description of one outbound call."""

  def __init__(
    self,
    method: str,
    url: URL,
    headers: Optional[CIMultiDict] = None,
    payload: Optional[io.BytesIO] = None,
    max_attempts: int = 1,
    hooks: Tuple[Hook, ...] = (),
    pool: Optional[BufferPool] = None
  ):
    self.method = method
    self.url = url
    self.headers = headers if headers is not None else CIMultiDict()
    self.payload = payload
    self.max_attempts = max_attempts
    self.hooks = hooks
    self.pool = pool
    self.client: Optional["Client"] = None

  @property
  def body(self) -> Optional[bytes]:
    if self.payload is None:
      return None
    return self.payload.getvalue()

  def release_payload(self) -> None:
    """Return the pooled body buffer, if any. Later calls are no-ops."""
    payload, self.payload = self.payload, None
    if payload is not None and self.pool is not None:
      self.pool.put(payload)

  def __repr__(self) -> str:
    return (
      f"Request(method='{self.method}', url='{self.url}', "
      f"max_attempts={self.max_attempts}, hooks={len(self.hooks)})"
    )


def new_request(
  method: str,
  url: Union[str, URL],
  *options: RequestOption,
  pool: Optional[BufferPool] = None
) -> Request:
  """Build a Request from a method, a URL and request options.

  Args:
    method: HTTP method
    url: Absolute http(s) URL
    *options: Request options applied in order
    pool: Buffer pool for the body (defaults to the shared pool)

  Returns:
    Request ready to be passed to Client.do

  Raises:
    BuildError: If the method, URL or any option is invalid
  """
  if not isinstance(method, str) or not _TOKEN.fullmatch(method):
    raise BuildError(f"Invalid HTTP method: {method!r}", field="method")

  try:
    parsed = url if isinstance(url, URL) else URL(url)
  except (TypeError, ValueError) as e:
    raise BuildError(f"Malformed URL {url!r}: {e}", field="url", cause=e)

  if not parsed.is_absolute() or parsed.scheme not in ("http", "https") or not parsed.host:
    raise BuildError(f"URL must be an absolute http(s) URL: {url!r}", field="url")

  config = RequestConfig()
  for option in options:
    config = option(config)

  if config.params:
    parsed = parsed.update_query(list(config.params))

  payload = None
  pool = pool if pool is not None else default_pool
  if config.body is not None:
    payload = pool.get()
    payload.write(config.body)

  return Request(
    method=method,
    url=parsed,
    headers=CIMultiDict(config.headers),
    payload=payload,
    max_attempts=config.max_attempts,
    hooks=config.hooks,
    pool=pool,
  )
