"""Pull-based consumers and the registry that tracks them."""
from __future__ import annotations

import logging
from collections.abc import Callable, Hashable
from typing import Any, Generic, TypeVar

from eventide.channel import Channel
from eventide.errors import ChannelClosedError, check_limit
from eventide.types import EventRecord, Payload

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Consumer(Generic[T]):
    """A single-pass async iterator fed by the emitter.

    Iterating yields every item written to the consumer, in write order,
    until the consumer is closed and drained. ``__aiter__`` returns the
    consumer itself, so it cannot be restarted.
    """

    def __init__(
        self,
        name: Hashable | None = None,
        *,
        maxsize: int = 0,
        on_close: Callable[[Consumer[Any]], None] | None = None,
    ) -> None:
        self.name = name
        self._channel: Channel[T] = Channel(maxsize)
        self._on_close = on_close

    @property
    def is_global(self) -> bool:
        return self.name is None

    @property
    def closed(self) -> bool:
        return self._channel.closed

    @property
    def channel(self) -> Channel[T]:
        return self._channel

    async def write(self, item: T) -> bool:
        """Deliver *item*; returns ``False`` if the consumer no longer accepts writes."""
        return await self._channel.send(item)

    async def aclose(self) -> None:
        """Detach from the owning registry and close gracefully."""
        if self._on_close is not None:
            self._on_close(self)
        await self._channel.close()

    def __aiter__(self) -> Consumer[T]:
        return self

    async def __anext__(self) -> T:
        try:
            return await self._channel.receive()
        except ChannelClosedError:
            raise StopAsyncIteration from None

    def __repr__(self) -> str:
        target = "*" if self.is_global else repr(self.name)
        return f"Consumer({target}, state={self._channel.state.value})"


class ConsumerRegistry:
    """Holds open consumers keyed by event name plus global consumers."""

    def __init__(self, limit: int = 0) -> None:
        self._limit = limit
        self._consumers: dict[Hashable, list[Consumer[Payload]]] = {}
        self._global_consumers: list[Consumer[EventRecord[Any]]] = []

    # --- creation -------------------------------------------------------------

    def create(self, name: Hashable, maxsize: int = 0) -> Consumer[Payload]:
        """Create an open consumer of *name*'s payloads."""
        if name is None:
            raise ValueError("None is not a valid event name")
        check_limit(self.count(name), self._limit, event_name=name, kind="consumer")
        consumer: Consumer[Payload] = Consumer(name, maxsize=maxsize, on_close=self.detach)
        self._consumers.setdefault(name, []).append(consumer)
        logger.debug("Created consumer for %r", name)
        return consumer

    def create_global(self, maxsize: int = 0) -> Consumer[EventRecord[Any]]:
        """Create an open consumer of every event."""
        check_limit(len(self._global_consumers), self._limit, kind="consumer")
        consumer: Consumer[EventRecord[Any]] = Consumer(
            maxsize=maxsize, on_close=self.detach
        )
        self._global_consumers.append(consumer)
        logger.debug("Created global consumer")
        return consumer

    # --- lookup ---------------------------------------------------------------

    def for_event(self, name: Hashable) -> list[Consumer[Payload]]:
        return list(self._consumers.get(name, ()))

    def for_all(self) -> list[Consumer[EventRecord[Any]]]:
        return list(self._global_consumers)

    def count(self, name: Hashable) -> int:
        return len(self._consumers.get(name, ()))

    def global_count(self) -> int:
        return len(self._global_consumers)

    def names(self) -> list[Hashable]:
        return list(self._consumers)

    # --- teardown -------------------------------------------------------------

    def detach(self, consumer: Consumer[Any]) -> None:
        """Forget *consumer* without closing it."""
        if consumer.is_global:
            self._global_consumers = [
                c for c in self._global_consumers if c is not consumer
            ]
            return
        current = self._consumers.get(consumer.name)
        if current is None:
            return
        kept = [c for c in current if c is not consumer]
        if kept:
            self._consumers[consumer.name] = kept
        else:
            del self._consumers[consumer.name]

    async def close(self, consumer: Consumer[Any]) -> None:
        await consumer.aclose()

    async def close_all(self, name: Hashable | None = None) -> None:
        """Gracefully close the consumers of *name*, or every consumer.

        Consumers are detached before any of them starts closing, so a
        concurrent emit cannot reach them afterwards.
        """
        closing: list[Consumer[Any]]
        if name is None:
            closing = [c for entries in self._consumers.values() for c in entries]
            closing.extend(self._global_consumers)
            self._consumers = {}
            self._global_consumers = []
        else:
            closing = list(self._consumers.pop(name, ()))
        if closing:
            target = "all events" if name is None else repr(name)
            logger.debug("Closing %d consumer(s) for %s", len(closing), target)
        for consumer in closing:
            await consumer.aclose()
