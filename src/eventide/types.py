"""Shared types for events flowing through an emitter."""
from __future__ import annotations

from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

N = TypeVar("N", bound=Hashable)

Payload = tuple[Any, ...]
Callback = Callable[..., Any]


@dataclass(frozen=True)
class EventRecord(Generic[N]):
    """One emission as seen by a global consumer."""

    name: N
    value: Payload
