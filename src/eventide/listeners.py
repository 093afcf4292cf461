"""Registry of synchronous listeners, per event and global."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Hashable
from dataclasses import dataclass
from typing import Any

from eventide.errors import check_limit
from eventide.types import Callback, Payload

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Listener:
    """A registered callback.

    Entries compare by identity: two registrations of the same function are
    two distinct listeners.
    """

    callback: Callback
    once: bool = False


class FutureWaiter:
    """Listener callback that resolves a future with the first payload it sees."""

    def __init__(self, future: asyncio.Future[Payload]) -> None:
        self.future = future

    def __call__(self, *args: Any) -> None:
        if not self.future.done():
            self.future.set_result(args)

    def cancel(self) -> None:
        self.future.cancel()


def cancel_waiters(removed: list[Listener]) -> None:
    """Cancel the futures of any :class:`FutureWaiter` among *removed*."""
    for entry in removed:
        if isinstance(entry.callback, FutureWaiter):
            entry.callback.cancel()


class ListenerRegistry:
    """Holds listeners keyed by event name plus a list of global listeners.

    Lists keep insertion order, which is the invocation order on emit. The
    registry never calls a callback itself.
    """

    def __init__(self, limit: int = 0) -> None:
        self._limit = limit
        self._listeners: dict[Hashable, list[Listener]] = {}
        self._global_listeners: list[Listener] = []

    # --- registration ---------------------------------------------------------

    def add(self, name: Hashable, callback: Callback, once: bool = False) -> Listener:
        """Append a listener for *name*."""
        check_limit(self.count(name), self._limit, event_name=name)
        listener = Listener(callback=callback, once=once)
        self._listeners.setdefault(name, []).append(listener)
        logger.debug("Added %slistener %r for %r", "one-shot " if once else "", callback, name)
        return listener

    def add_global(self, callback: Callback, once: bool = False) -> Listener:
        """Append a listener that receives every event."""
        check_limit(len(self._global_listeners), self._limit)
        listener = Listener(callback=callback, once=once)
        self._global_listeners.append(listener)
        logger.debug("Added %sglobal listener %r", "one-shot " if once else "", callback)
        return listener

    # --- removal --------------------------------------------------------------

    def remove(self, name: Hashable, callback: Callback | None = None) -> list[Listener]:
        """Remove listeners of *name* whose callback equals *callback*.

        Functions compare by identity; bound methods compare equal when they
        wrap the same function on the same instance, so ``obj.handler`` read
        twice still matches.

        Without a callback every listener of *name* is removed. Returns the
        removed entries.
        """
        current = self._listeners.get(name)
        if not current:
            self._listeners.pop(name, None)
            return []
        if callback is None:
            del self._listeners[name]
            return current
        kept = [entry for entry in current if entry.callback != callback]
        removed = [entry for entry in current if entry.callback == callback]
        if kept:
            self._listeners[name] = kept
        else:
            del self._listeners[name]
        return removed

    def remove_global(self, callback: Callback | None = None) -> list[Listener]:
        """Remove global listeners whose callback equals *callback* (all if omitted)."""
        if callback is None:
            removed = self._global_listeners
            self._global_listeners = []
            return removed
        removed = [e for e in self._global_listeners if e.callback == callback]
        self._global_listeners = [
            e for e in self._global_listeners if e.callback != callback
        ]
        return removed

    def discard(self, name: Hashable, listener: Listener) -> None:
        """Remove exactly one registered entry, if it is still present."""
        current = self._listeners.get(name)
        if not current:
            return
        for index, entry in enumerate(current):
            if entry is listener:
                del current[index]
                break
        if not current:
            del self._listeners[name]

    def discard_global(self, listener: Listener) -> None:
        for index, entry in enumerate(self._global_listeners):
            if entry is listener:
                del self._global_listeners[index]
                return

    def clear(self) -> list[Listener]:
        """Remove every listener and return the removed entries."""
        removed = [entry for entries in self._listeners.values() for entry in entries]
        removed.extend(self._global_listeners)
        self._listeners = {}
        self._global_listeners = []
        return removed

    # --- queries --------------------------------------------------------------

    def snapshot(self, name: Hashable) -> tuple[Listener, ...]:
        return tuple(self._listeners.get(name, ()))

    def snapshot_global(self) -> tuple[Listener, ...]:
        return tuple(self._global_listeners)

    def count(self, name: Hashable) -> int:
        return len(self._listeners.get(name, ()))

    def global_count(self) -> int:
        return len(self._global_listeners)

    def names(self) -> list[Hashable]:
        return list(self._listeners)
