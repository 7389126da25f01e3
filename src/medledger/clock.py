"""Host clock facility."""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Current time as integer nanoseconds since the epoch."""

    def now(self) -> int:
        ...


class SystemClock:
    def now(self) -> int:
        return time.time_ns()


class FixedClock:
    """Deterministic clock: returns *start*, then advances by *step* per call."""

    def __init__(self, start: int = 1_700_000_000_000_000_000, step: int = 1_000_000_000):
        self._current = start
        self._step = step

    def now(self) -> int:
        value = self._current
        self._current += self._step
        return value
