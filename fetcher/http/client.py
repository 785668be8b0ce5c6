"""HTTP client with a pooled transport, retry on server errors and hooks."""

import asyncio
import inspect
import time
from contextlib import ExitStack
from typing import Any, Optional, Union

import aiohttp
from aiohttp import ClientResponse, ClientTimeout, TCPConnector
from aiohttp.client_exceptions import ClientConnectorError, ClientError
from yarl import URL

from fetcher.config.models import FetcherConfig, TransportConfig, TransportOption, apply_transport_options
from fetcher.context import Context
from fetcher.exceptions import HookError, NetworkError, TimeoutError
from fetcher.http.request import (
  METHOD_DELETE,
  METHOD_GET,
  METHOD_HEAD,
  METHOD_PATCH,
  METHOD_POST,
  METHOD_PUT,
  Request,
  RequestOption,
  new_request,
)
from fetcher.http.response import Response
from fetcher.http.retry import RetryHandler
from fetcher.logging import get_logger

logger = get_logger(__name__)


class Client:
  """Executes requests over one pooled aiohttp session.

  The transport settings are fixed at construction. The session itself is
  built lazily on first use, inside the running event loop, and is shared by
  every request issued through this client.
  """

  def __init__(self, *options: TransportOption):
    """Initialize client from transport options.

    Args:
      *options: Transport options applied in order; later ones win

    Raises:
      ConfigurationError: If any option fails
    """
    self.config: TransportConfig = apply_transport_options(*options)
    self.session: Optional[aiohttp.ClientSession] = None

  @classmethod
  def create(cls, *options: TransportOption) -> "Client":
    return cls(*options)

  @classmethod
  def from_config(cls, config: FetcherConfig, *options: TransportOption) -> "Client":
    """Create a client from the transport section of a loaded config.

    Options given here are applied after the file's settings and override them.
    """
    return cls(*config.transport_options(), *options)

  @property
  def keep_alive(self) -> float:
    return self.config.keep_alive

  @property
  def handshake_timeout(self) -> float:
    return self.config.handshake_timeout

  async def _get_session(self) -> aiohttp.ClientSession:
    """Get or create the aiohttp session.

    Returns:
      Configured ClientSession instance
    """
    if self.session is None:
      connector = TCPConnector(
        limit=self.config.max_connections,
        keepalive_timeout=self.config.keep_alive
      )
      timeout = ClientTimeout(total=None, sock_connect=self.config.handshake_timeout)

      self.session = aiohttp.ClientSession(
        connector=connector,
        timeout=timeout,
        trust_env=self.config.trust_env
      )

    return self.session

  async def do(self, request: Request, ctx: Optional[Context] = None) -> Response:
    """Execute a request, retrying on 5xx responses, then run its hooks.

    Args:
      request: Request built with new_request
      ctx: Cancellation context (defaults to a background context)

    Returns:
      Response wrapping the last raw response. A final 5xx status is
      returned, not raised.

    Raises:
      ContextError: If the context is done before or during an attempt
      TransportError: If an attempt fails outright (never retried)
      HookError: If a hook fails; later hooks are skipped
    """
    ctx = ctx if ctx is not None else Context.background()

    with ExitStack() as stack:
      stack.callback(request.release_payload)

      # don't start the request if the context is already done
      err = ctx.error()
      if err is not None:
        raise err

      request.client = self
      log = logger.bind(method=request.method, url=str(request.url))
      log.log_request(request.method, str(request.url), request.max_attempts, headers=dict(request.headers))

      data = request.body
      retry_handler = RetryHandler(request.max_attempts)
      start = time.monotonic()

      raw, attempts = await retry_handler.execute(
        self._attempt,
        ctx,
        request,
        data,
        on_attempt=lambda attempt, response: log.log_attempt(
          attempt, request.max_attempts, response.status
        )
      )

      response = Response(raw, attempts)
      log.log_response(raw.status, attempts, int((time.monotonic() - start) * 1000))

      try:
        await self._run_hooks(request, response)
      except BaseException:
        response.release()
        raise

      return response

  async def _attempt(self, ctx: Context, request: Request, data: Optional[bytes]) -> ClientResponse:
    kwargs: dict[str, Any] = {"headers": request.headers}
    if data is not None:
      kwargs["data"] = data
    return await ctx.run(self._make_request(request.method, request.url, **kwargs))

  async def _run_hooks(self, request: Request, response: Response) -> None:
    for hook in request.hooks:
      try:
        result = hook(request, response)
        if inspect.isawaitable(result):
          await result
      except HookError:
        raise
      except Exception as e:
        raise HookError(_hook_name(hook), str(e) or type(e).__name__, cause=e) from e

  async def _make_request(
    self,
    method: str,
    url: URL,
    **kwargs: Any
  ) -> ClientResponse:
    """Make one HTTP call using the session.

    Raises:
      NetworkError: For network-related errors
      TimeoutError: For timeout errors
    """
    session = await self._get_session()

    try:
      # The response is returned unread; callers read or release it
      return await session.request(method, url, **kwargs)
    except asyncio.TimeoutError as e:
      raise TimeoutError(
        f"Request timeout: {str(e)}", timeout_seconds=self.config.handshake_timeout, cause=e
      )
    except ClientConnectorError as e:
      raise NetworkError(f"Connection failed: {str(e)}", cause=e)
    except ClientError as e:
      raise NetworkError(f"HTTP request failed: {str(e)}", cause=e)

  async def _request(
    self,
    method: str,
    url: Union[str, URL],
    options: tuple,
    ctx: Optional[Context]
  ) -> Response:
    request = new_request(method, url, *options)
    return await self.do(request, ctx)

  async def get(self, url: Union[str, URL], *options: RequestOption, ctx: Optional[Context] = None) -> Response:
    """Build and execute a GET request."""
    return await self._request(METHOD_GET, url, options, ctx)

  async def head(self, url: Union[str, URL], *options: RequestOption, ctx: Optional[Context] = None) -> Response:
    """Build and execute a HEAD request."""
    return await self._request(METHOD_HEAD, url, options, ctx)

  async def post(self, url: Union[str, URL], *options: RequestOption, ctx: Optional[Context] = None) -> Response:
    """Build and execute a POST request."""
    return await self._request(METHOD_POST, url, options, ctx)

  async def put(self, url: Union[str, URL], *options: RequestOption, ctx: Optional[Context] = None) -> Response:
    """Build and execute a PUT request."""
    return await self._request(METHOD_PUT, url, options, ctx)

  async def patch(self, url: Union[str, URL], *options: RequestOption, ctx: Optional[Context] = None) -> Response:
    """Build and execute a PATCH request."""
    return await self._request(METHOD_PATCH, url, options, ctx)

  async def delete(self, url: Union[str, URL], *options: RequestOption, ctx: Optional[Context] = None) -> Response:
    """Build and execute a DELETE request."""
    return await self._request(METHOD_DELETE, url, options, ctx)

  async def close(self) -> None:
    """Close the HTTP session and clean up resources."""
    if self.session is not None:
      await self.session.close()
      self.session = None

  async def __aenter__(self) -> "Client":
    return self

  async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
    await self.close()

  def __repr__(self) -> str:
    return (
      f"Client(keep_alive={self.config.keep_alive}, "
      f"handshake_timeout={self.config.handshake_timeout})"
    )


def _hook_name(hook: Any) -> str:
  return getattr(hook, "__qualname__", None) or getattr(hook, "__name__", None) or repr(hook)
