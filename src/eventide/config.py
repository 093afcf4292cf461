"""Configuration types."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EmitterConfig:
    """Settings for an :class:`~eventide.emitter.EventEmitter`.

    ``max_listeners_per_event`` bounds, independently, the listeners of one
    event, the global listeners, the consumers of one event and the global
    consumers. ``0`` disables the limit.
    """

    max_listeners_per_event: int = 10

    def __post_init__(self) -> None:
        if self.max_listeners_per_event < 0:
            raise ValueError(
                "max_listeners_per_event must be >= 0, "
                f"got {self.max_listeners_per_event}"
            )
