"""Response wrapper handed to hooks and callers."""

from typing import Any, Optional

from aiohttp import ClientResponse


class Response:
  """Carrier for the final raw response of a dispatch.

  ``raw`` is the aiohttp response of the last attempt. ``attempts`` is the
  number of calls that were made to obtain it.
  """

  def __init__(self, raw: Optional[ClientResponse] = None, attempts: int = 0):
    self.raw = raw
    self.attempts = attempts

  @property
  def status(self) -> int:
    return self.raw.status

  @property
  def reason(self) -> Optional[str]:
    return self.raw.reason

  @property
  def headers(self):
    return self.raw.headers

  @property
  def url(self):
    return self.raw.url

  @property
  def ok(self) -> bool:
    """True for status codes below 400."""
    return self.status < 400

  async def read(self) -> bytes:
    return await self.raw.read()

  async def text(self, encoding: Optional[str] = None) -> str:
    return await self.raw.text(encoding=encoding)

  async def json(self, **kwargs: Any) -> Any:
    return await self.raw.json(**kwargs)

  def release(self) -> None:
    """Return the underlying connection to the pool."""
    self.raw.release()

  def __repr__(self) -> str:
    status = self.raw.status if self.raw is not None else None
    return f"Response(status={status}, attempts={self.attempts})"
