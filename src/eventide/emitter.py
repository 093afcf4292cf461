"""Typed event emitter with push (callback) and pull (async iterator) delivery."""
from __future__ import annotations

import asyncio
from collections.abc import Hashable
from typing import Any, Generic, overload

from eventide.config import EmitterConfig
from eventide.consumers import Consumer, ConsumerRegistry
from eventide.dispatcher import Dispatcher
from eventide.lifecycle import LifecycleController
from eventide.listeners import FutureWaiter, ListenerRegistry, cancel_waiters
from eventide.types import Callback, EventRecord, N, Payload

_MISSING: Any = object()


def _check_name(name: Any) -> None:
    if name is None or callable(name) or not isinstance(name, Hashable):
        raise TypeError(f"Invalid event name: {name!r}")


class EventEmitter(Generic[N]):
    """Process-local event emitter.

    Listeners registered with :meth:`on` / :meth:`once` are called
    synchronously, in registration order, before any pull consumer sees the
    event. Pull consumers are async iterators created by ``on(name)`` or by
    iterating the emitter itself; they must be released with :meth:`off` or
    :meth:`Consumer.aclose`.

    The emitter is meant to be driven from a single asyncio event loop and
    takes no locks.
    """

    def __init__(
        self,
        max_listeners_per_event: int | None = None,
        *,
        config: EmitterConfig | None = None,
    ) -> None:
        if config is not None and max_listeners_per_event is not None:
            raise ValueError("Pass either max_listeners_per_event or config, not both")
        if config is None and max_listeners_per_event is not None:
            config = EmitterConfig(max_listeners_per_event=max_listeners_per_event)
        self.config = config or EmitterConfig()
        limit = self.config.max_listeners_per_event
        self._listeners = ListenerRegistry(limit)
        self._consumers = ConsumerRegistry(limit)
        self._dispatcher = Dispatcher(self._listeners, self._consumers)
        self._lifecycle = LifecycleController(self._listeners, self._consumers)

    @property
    def max_listeners_per_event(self) -> int:
        return self.config.max_listeners_per_event

    # --- registration ---------------------------------------------------------

    def add_listener(self, name: N, callback: Callback, *, once: bool = False) -> None:
        """Register *callback* to be called with the payload of each *name* event."""
        _check_name(name)
        self._listeners.add(name, callback, once=once)

    def add_global_listener(self, callback: Callback, *, once: bool = False) -> None:
        """Register *callback* to be called as ``callback(name, *payload)`` for every event."""
        self._listeners.add_global(callback, once=once)

    def consume(self, name: N, *, maxsize: int = 0) -> Consumer[Payload]:
        """Return an async iterator over the payloads of future *name* events."""
        _check_name(name)
        return self._consumers.create(name, maxsize=maxsize)

    def consume_all(self, *, maxsize: int = 0) -> Consumer[EventRecord[N]]:
        """Return an async iterator over every future event as :class:`EventRecord`."""
        return self._consumers.create_global(maxsize=maxsize)

    def wait_for(self, name: N) -> asyncio.Future[Payload]:
        """Return a future resolved with the payload of the next *name* event.

        Must be called from a running event loop. The future is cancelled if
        its registration is cleared by :meth:`off` before the event arrives.
        Cancelling the future (e.g. on a timeout) releases its registration.
        """
        _check_name(name)
        future: asyncio.Future[Payload] = asyncio.get_running_loop().create_future()
        entry = self._listeners.add(name, FutureWaiter(future), once=True)

        def release(done: asyncio.Future[Payload]) -> None:
            if done.cancelled():
                self._listeners.discard(name, entry)

        future.add_done_callback(release)
        return future

    @overload
    def on(self, name: N, callback: Callback) -> None: ...
    @overload
    def on(self, name: N, *, maxsize: int = ...) -> Consumer[Payload]: ...
    @overload
    def on(self, callback: Callback) -> None: ...

    def on(
        self, name_or_callback: Any, callback: Callback | None = None, *, maxsize: int = 0
    ) -> Consumer[Payload] | None:
        """Register a listener, a global listener, or create a pull consumer.

        ``on(name, cb)`` adds a listener, ``on(cb)`` a global listener and
        ``on(name)`` returns a :class:`Consumer` of *name*'s payloads.
        """
        if callback is not None:
            self.add_listener(name_or_callback, callback)
            return None
        if callable(name_or_callback):
            self.add_global_listener(name_or_callback)
            return None
        return self.consume(name_or_callback, maxsize=maxsize)

    @overload
    def once(self, name: N, callback: Callback) -> None: ...
    @overload
    def once(self, name: N) -> asyncio.Future[Payload]: ...
    @overload
    def once(self, callback: Callback) -> None: ...

    def once(
        self, name_or_callback: Any, callback: Callback | None = None
    ) -> asyncio.Future[Payload] | None:
        """Like :meth:`on`, but the listener is removed after its first call.

        ``once(name)`` returns a future resolved by the next *name* event.
        """
        if callback is not None:
            self.add_listener(name_or_callback, callback, once=True)
            return None
        if callable(name_or_callback):
            self.add_global_listener(name_or_callback, once=True)
            return None
        return self.wait_for(name_or_callback)

    # --- removal --------------------------------------------------------------

    def remove_listener(self, name: N, callback: Callback | None = None) -> None:
        """Remove listeners of *name* calling *callback* (all of them if omitted)."""
        removed = self._listeners.remove(name, callback)
        if callback is None:
            cancel_waiters(removed)

    def remove_global_listener(self, callback: Callback | None = None) -> None:
        self._lifecycle.unregister_global(callback)

    async def close_consumers(self, name: N | None = None) -> None:
        """Gracefully close the consumers of *name*, or every consumer."""
        await self._consumers.close_all(name)

    async def reset(self) -> None:
        """Drop every listener and close every consumer; the limit is kept."""
        await self._lifecycle.reset()

    async def off(self, name_or_callback: Any = _MISSING, callback: Callback | None = None) -> None:
        """Unregister.

        ``off()`` clears everything, ``off(name)`` clears the listeners and
        consumers of *name*, ``off(name, cb)`` removes matching listeners of
        *name* and ``off(cb)`` removes matching global listeners.
        """
        if name_or_callback is _MISSING:
            await self._lifecycle.unregister()
        elif callback is None and callable(name_or_callback):
            self._lifecycle.unregister_global(name_or_callback)
        else:
            _check_name(name_or_callback)
            await self._lifecycle.unregister(name_or_callback, callback)

    # --- emission -------------------------------------------------------------

    async def emit(self, name: N, *payload: Any) -> None:
        """Deliver *payload* to every listener and consumer of *name*.

        Returns once all listeners have run and every consumer write has
        completed. An exception raised by a listener propagates and aborts
        the remaining delivery for this call.
        """
        _check_name(name)
        await self._dispatcher.dispatch(name, payload)

    def __aiter__(self) -> Consumer[EventRecord[N]]:
        return self.consume_all()

    # --- introspection --------------------------------------------------------

    def listener_count(self, name: N | None = None) -> int:
        """Listeners registered for *name*, or global listeners if omitted."""
        if name is None:
            return self._listeners.global_count()
        return self._listeners.count(name)

    def consumer_count(self, name: N | None = None) -> int:
        """Open consumers of *name*, or global consumers if omitted."""
        if name is None:
            return self._consumers.global_count()
        return self._consumers.count(name)

    def event_names(self) -> list[N]:
        """Names with at least one listener or consumer.

        Names with listeners come first, then names that only have consumers;
        each group is in first-registration order.
        """
        names = dict.fromkeys(self._listeners.names())
        names.update(dict.fromkeys(self._consumers.names()))
        return list(names)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return (
            f"EventEmitter(events={len(self.event_names())}, "
            f"max_listeners_per_event={self.max_listeners_per_event})"
        )
