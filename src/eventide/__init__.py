"""eventide: typed event emitter bridging callbacks and async iteration."""
from __future__ import annotations

from eventide.channel import Channel, ChannelState
from eventide.config import EmitterConfig
from eventide.consumers import Consumer, ConsumerRegistry
from eventide.dispatcher import Dispatcher
from eventide.emitter import EventEmitter
from eventide.errors import ChannelClosedError, EmitterError, LimitExceededError
from eventide.lifecycle import LifecycleController
from eventide.listeners import Listener, ListenerRegistry
from eventide.types import EventRecord

__all__ = [
    "Channel",
    "ChannelClosedError",
    "ChannelState",
    "Consumer",
    "ConsumerRegistry",
    "Dispatcher",
    "EmitterConfig",
    "EmitterError",
    "EventEmitter",
    "EventRecord",
    "LifecycleController",
    "LimitExceededError",
    "Listener",
    "ListenerRegistry",
]
