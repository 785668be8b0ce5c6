"""Attempt loop that re-issues requests on server errors."""

from typing import Any, Awaitable, Callable, Optional, Tuple

from aiohttp import ClientResponse

AttemptCallback = Callable[[int, ClientResponse], None]


class RetryHandler:
  """Re-issues a call while the server answers with a 5xx status.

  Only the status code drives a retry. Exceptions raised by the call abort
  the loop immediately. There is no delay between attempts.
  """

  def __init__(self, max_attempts: int = 1):
    """Initialize retry handler.

    Args:
      max_attempts: Maximum number of calls, at least 1
    """
    if max_attempts < 1:
      raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
    self.max_attempts = max_attempts

  async def execute(
    self,
    func: Callable[..., Awaitable[ClientResponse]],
    *args: Any,
    on_attempt: Optional[AttemptCallback] = None,
    **kwargs: Any
  ) -> Tuple[ClientResponse, int]:
    """Call ``func`` until it returns a non-retryable response or attempts run out.

    Args:
      func: Async function returning an aiohttp response
      *args: Positional arguments to pass to function
      on_attempt: Called with the attempt number and response after each call
      **kwargs: Keyword arguments to pass to function

    Returns:
      The last response received and the number of calls made. The response
      may still carry a 5xx status when attempts are exhausted.
    """
    attempt = 0
    while True:
      attempt += 1
      response = await func(*args, **kwargs)

      if on_attempt is not None:
        on_attempt(attempt, response)

      if attempt >= self.max_attempts or not self.is_retryable(response):
        return response, attempt

      # superseded responses go back to the connection pool
      response.release()

  def is_retryable(self, response: ClientResponse) -> bool:
    """Only server errors (status >= 500) are retried."""
    return response.status >= 500
