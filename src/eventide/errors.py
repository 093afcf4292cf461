"""Error hierarchy for eventide."""
from __future__ import annotations

from collections.abc import Hashable
from typing import Any


class EmitterError(Exception):
    """Base error for all eventide errors."""

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class LimitExceededError(EmitterError):
    """A registration would exceed the configured per-event limit.

    Raised before any registry state is touched, so the caller may release
    registrations (or raise the limit) and retry.
    """

    def __init__(
        self,
        message: str,
        *,
        limit: int,
        event_name: Hashable | None = None,
        kind: str = "listener",
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.limit = limit
        self.event_name = event_name
        self.kind = kind


class ChannelClosedError(EmitterError):
    """Raised by :meth:`Channel.receive` once a closed channel is drained."""


def check_limit(
    current: int,
    limit: int,
    *,
    event_name: Any = None,
    kind: str = "listener",
) -> None:
    """Raise :class:`LimitExceededError` if *current* already reached *limit*.

    A limit of ``0`` disables the check.
    """
    if limit and current >= limit:
        target = "global" if event_name is None else repr(event_name)
        raise LimitExceededError(
            f"Max {kind}s per event exceeded for {target}: limit is {limit}",
            limit=limit,
            event_name=event_name,
            kind=kind,
        )
