"""Reusable byte buffers for request bodies."""

import io
import threading
from typing import List, Optional


class BufferPool:
  """Pool of ``io.BytesIO`` buffers with checkout accounting.

  Buffers are reset when they are returned. A buffer can only be returned
  while it is checked out, so a double release is an error rather than a
  silent corruption of the pool.
  """

  def __init__(self, max_idle: Optional[int] = 64):
    """Initialize the pool.

    Args:
      max_idle: Maximum number of idle buffers kept for reuse (None for no cap)
    """
    self.max_idle = max_idle
    self.checkouts = 0
    self.checkins = 0
    self._idle: List[io.BytesIO] = []
    self._outstanding = set()
    self._lock = threading.Lock()

  def get(self) -> io.BytesIO:
    """Check out an empty buffer."""
    with self._lock:
      buf = self._idle.pop() if self._idle else io.BytesIO()
      self._outstanding.add(id(buf))
      self.checkouts += 1
    return buf

  def put(self, buf: io.BytesIO) -> None:
    """Return a checked-out buffer to the pool.

    Raises:
      ValueError: If the buffer is not currently checked out
    """
    with self._lock:
      if id(buf) not in self._outstanding:
        raise ValueError("buffer is not checked out from this pool")
      self._outstanding.discard(id(buf))
      self.checkins += 1
      buf.seek(0)
      buf.truncate()
      if self.max_idle is None or len(self._idle) < self.max_idle:
        self._idle.append(buf)

  @property
  def outstanding(self) -> int:
    return self.checkouts - self.checkins


default_pool = BufferPool()
