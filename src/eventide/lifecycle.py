"""Unsubscription and teardown of listeners and consumers."""
from __future__ import annotations

import logging
from collections.abc import Hashable

from eventide.consumers import ConsumerRegistry
from eventide.listeners import ListenerRegistry, cancel_waiters
from eventide.types import Callback

logger = logging.getLogger(__name__)


class LifecycleController:
    """Coordinates removal across the listener and consumer registries.

    Consumers are always closed gracefully: writes already in flight finish
    before the consumer reports end of iteration.
    """

    def __init__(self, listeners: ListenerRegistry, consumers: ConsumerRegistry) -> None:
        self._listeners = listeners
        self._consumers = consumers

    async def unregister(
        self,
        name: Hashable | None = None,
        callback: Callback | None = None,
    ) -> None:
        """Remove registrations.

        * no arguments: every listener and consumer, per-event and global.
        * *name*: the listeners and consumers of *name*.
        * *name* and *callback*: listeners of *name* calling *callback*;
          consumers are left alone.
        """
        if name is None:
            await self.reset()
            return
        if callback is not None:
            self._listeners.remove(name, callback)
            return
        cancel_waiters(self._listeners.remove(name))
        await self._consumers.close_all(name)
        logger.debug("Unregistered everything for %r", name)

    def unregister_global(self, callback: Callback | None = None) -> None:
        """Remove global listeners calling *callback*, or all of them."""
        self._listeners.remove_global(callback)

    async def reset(self) -> None:
        cancel_waiters(self._listeners.clear())
        await self._consumers.close_all()
        logger.debug("Emitter reset")
