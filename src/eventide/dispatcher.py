"""Delivery of one emission to listeners and consumers."""
from __future__ import annotations

import logging
from collections.abc import Hashable

from eventide.consumers import ConsumerRegistry
from eventide.listeners import ListenerRegistry
from eventide.types import EventRecord, Payload

logger = logging.getLogger(__name__)


class Dispatcher:
    """Drives delivery of an event to both registries.

    Order within one dispatch: per-event listeners, global listeners,
    per-event consumers, global consumers; each group in registration order.
    Listener exceptions propagate immediately and abort the rest of the
    dispatch.
    """

    def __init__(self, listeners: ListenerRegistry, consumers: ConsumerRegistry) -> None:
        self._listeners = listeners
        self._consumers = consumers

    async def dispatch(self, name: Hashable, payload: Payload) -> None:
        listeners = self._listeners.snapshot(name)
        global_listeners = self._listeners.snapshot_global()
        logger.debug(
            "Emitting %r to %d listener(s), %d global listener(s)",
            name, len(listeners), len(global_listeners),
        )

        for entry in listeners:
            try:
                entry.callback(*payload)
            finally:
                if entry.once:
                    self._listeners.discard(name, entry)

        for entry in global_listeners:
            try:
                entry.callback(name, *payload)
            finally:
                if entry.once:
                    self._listeners.discard_global(entry)

        # Looked up after the listeners ran: they may have added or closed consumers.
        for consumer in self._consumers.for_event(name):
            if not consumer.closed:
                await consumer.write(payload)

        global_consumers = self._consumers.for_all()
        if global_consumers:
            record = EventRecord(name=name, value=payload)
            for consumer in global_consumers:
                if not consumer.closed:
                    await consumer.write(record)
