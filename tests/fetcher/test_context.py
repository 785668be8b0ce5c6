"""Unit tests for cancellation contexts."""

import asyncio
import time
import pytest

from fetcher.context import Context
from fetcher.exceptions import ContextCancelledError, ContextError, DeadlineExceededError


class TestContext:
  """Test cases for Context class."""

  def test_background_is_live(self):
    ctx = Context.background()
    assert ctx.error() is None
    assert ctx.deadline is None
    assert not ctx.cancelled()

  def test_cancel(self):
    ctx = Context.background().with_cancel()
    ctx.cancel()
    assert isinstance(ctx.error(), ContextCancelledError)
    assert isinstance(ctx.error(), ContextError)

  def test_cancel_propagates_to_children(self):
    parent = Context.background().with_cancel()
    child = parent.with_timeout(60)
    parent.cancel()
    assert isinstance(child.error(), ContextCancelledError)

  def test_cancel_does_not_propagate_to_parent(self):
    parent = Context.background()
    child = parent.with_cancel()
    child.cancel()
    assert parent.error() is None

  def test_expired_deadline(self):
    ctx = Context.background().with_timeout(0)
    assert isinstance(ctx.error(), DeadlineExceededError)

  def test_earliest_deadline_wins(self):
    parent = Context.background().with_timeout(1)
    child = parent.with_timeout(60)
    assert child.deadline == parent.deadline
    assert child.deadline <= time.monotonic() + 1

  def test_cancellation_takes_precedence_over_deadline(self):
    ctx = Context.background().with_timeout(0)
    ctx.cancel()
    assert isinstance(ctx.error(), ContextCancelledError)

  @pytest.mark.asyncio
  async def test_run_returns_result(self):
    async def work():
      return 42

    assert await Context.background().run(work()) == 42

  @pytest.mark.asyncio
  async def test_run_propagates_exceptions(self):
    async def work():
      raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
      await Context.background().with_timeout(5).run(work())

  @pytest.mark.asyncio
  async def test_run_refuses_done_context(self):
    started = []

    async def work():
      started.append(True)

    ctx = Context.background().with_cancel()
    ctx.cancel()

    with pytest.raises(ContextCancelledError):
      await ctx.run(work())

    assert started == []

  @pytest.mark.asyncio
  async def test_run_deadline_cancels_inner_task(self):
    cancelled = []

    async def work():
      try:
        await asyncio.sleep(5)
      except asyncio.CancelledError:
        cancelled.append(True)
        raise

    with pytest.raises(DeadlineExceededError):
      await Context.background().with_timeout(0.05).run(work())

    assert cancelled == [True]

  @pytest.mark.asyncio
  async def test_run_parent_cancel_interrupts(self):
    parent = Context.background().with_cancel()
    child = parent.with_cancel()
    asyncio.get_running_loop().call_later(0.02, parent.cancel)

    with pytest.raises(ContextCancelledError):
      await child.run(asyncio.sleep(5))
