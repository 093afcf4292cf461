"""Single-writer/single-reader asyncio channel backing pull consumers."""
from __future__ import annotations

import asyncio
from collections import deque
from enum import Enum
from typing import Generic, TypeVar

from eventide.errors import ChannelClosedError

T = TypeVar("T")


class ChannelState(Enum):
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class Channel(Generic[T]):
    """Hand-off buffer between the emitter (writer) and one async reader.

    ``maxsize=0`` makes the buffer unbounded. With a bound, :meth:`send`
    suspends while the buffer is full. Closing is graceful: sends already
    suspended when the close begins are completed (even past capacity),
    new sends are refused, and the reader drains what is buffered before it
    observes the end of the channel.
    """

    def __init__(self, maxsize: int = 0) -> None:
        if maxsize < 0:
            raise ValueError(f"maxsize must be >= 0, got {maxsize}")
        self._maxsize = maxsize
        self._buffer: deque[T] = deque()
        self._cond = asyncio.Condition()
        self._state = ChannelState.OPEN
        self._inflight = 0

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is ChannelState.CLOSED

    @property
    def maxsize(self) -> int:
        return self._maxsize

    def qsize(self) -> int:
        return len(self._buffer)

    def full(self) -> bool:
        return 0 < self._maxsize <= len(self._buffer)

    def _can_accept(self) -> bool:
        return self._state is not ChannelState.OPEN or not self.full()

    def _readable(self) -> bool:
        return bool(self._buffer) or self._state is ChannelState.CLOSED

    async def send(self, item: T) -> bool:
        """Enqueue *item*, waiting for room if the buffer is full.

        Returns ``False`` if the channel was already closing or closed, in
        which case the item is not enqueued.
        """
        async with self._cond:
            if self._state is not ChannelState.OPEN:
                return False
            self._inflight += 1
            try:
                await self._cond.wait_for(self._can_accept)
                self._buffer.append(item)
            finally:
                self._inflight -= 1
                self._cond.notify_all()
        return True

    async def receive(self) -> T:
        """Return the next item, waiting for one if the buffer is empty.

        Raises :class:`ChannelClosedError` once the channel is closed and
        drained.
        """
        async with self._cond:
            await self._cond.wait_for(self._readable)
            if not self._buffer:
                raise ChannelClosedError("channel is closed")
            item = self._buffer.popleft()
            self._cond.notify_all()
            return item

    async def close(self) -> None:
        """Close the channel after in-flight sends complete."""
        async with self._cond:
            if self._state is ChannelState.OPEN:
                self._state = ChannelState.CLOSING
                self._cond.notify_all()
            await self._cond.wait_for(lambda: self._inflight == 0)
            self._state = ChannelState.CLOSED
            self._cond.notify_all()
