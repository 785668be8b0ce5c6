"""Cancellation contexts for request dispatch."""

import asyncio
import time
from typing import Awaitable, List, Optional, TypeVar

from fetcher.exceptions import ContextCancelledError, ContextError, DeadlineExceededError

T = TypeVar("T")


class Context:
  """Cancellation token with an optional deadline.

  Contexts form a chain: a child observes its parent's cancellation and the
  earliest deadline anywhere in the chain. Deadlines are absolute values of
  ``time.monotonic()``.
  """

  def __init__(
    self,
    parent: Optional["Context"] = None,
    deadline: Optional[float] = None
  ):
    self.parent = parent
    self._deadline = deadline
    self._cancelled = False
    self._event = asyncio.Event()

  @classmethod
  def background(cls) -> "Context":
    """Return a context that is never cancelled and has no deadline."""
    return cls()

  def with_cancel(self) -> "Context":
    """Derive a child context that can be cancelled on its own."""
    return Context(parent=self)

  def with_timeout(self, seconds: float) -> "Context":
    """Derive a child context whose deadline is ``seconds`` from now."""
    return Context(parent=self, deadline=time.monotonic() + seconds)

  @property
  def deadline(self) -> Optional[float]:
    deadlines = [c._deadline for c in self._chain() if c._deadline is not None]
    return min(deadlines) if deadlines else None

  def cancel(self) -> None:
    """Cancel this context and every context derived from it."""
    self._cancelled = True
    self._event.set()

  def cancelled(self) -> bool:
    return any(c._cancelled for c in self._chain())

  def error(self) -> Optional[ContextError]:
    """Return the reason this context is done, or None while it is live."""
    if self.cancelled():
      return ContextCancelledError()
    deadline = self.deadline
    if deadline is not None and time.monotonic() >= deadline:
      return DeadlineExceededError()
    return None

  def _chain(self) -> List["Context"]:
    chain = []
    ctx: Optional[Context] = self
    while ctx is not None:
      chain.append(ctx)
      ctx = ctx.parent
    return chain

  async def run(self, awaitable: Awaitable[T]) -> T:
    """Await ``awaitable`` unless this context fires first.

    When the context is cancelled or its deadline passes, the inner task is
    cancelled and the matching ContextError is raised.

    Raises:
      ContextCancelledError: If the context was cancelled
      DeadlineExceededError: If the deadline passed
    """
    err = self.error()
    if err is not None:
      if asyncio.iscoroutine(awaitable):
        awaitable.close()
      raise err

    task = asyncio.ensure_future(awaitable)
    waiters = [asyncio.ensure_future(c._event.wait()) for c in self._chain()]
    deadline = self.deadline
    timeout = None if deadline is None else max(0.0, deadline - time.monotonic())

    try:
      done, _ = await asyncio.wait(
        [task, *waiters],
        timeout=timeout,
        return_when=asyncio.FIRST_COMPLETED
      )
      if task in done:
        return task.result()
    finally:
      for waiter in waiters:
        waiter.cancel()
      if not task.done():
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    raise self.error() or DeadlineExceededError()
