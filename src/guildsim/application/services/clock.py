from __future__ import annotations

import time
from typing import Protocol

from guildsim.application.services.balance_tables import SECONDS_PER_DAY


class Clock(Protocol):
    def now(self) -> float:
        """Current time in seconds."""


class SystemClock:
    def now(self) -> float:
        return time.time()


class SimulationClock:
    """Clock that only moves when told to, so day gates can be crossed on demand."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> float:
        self._now += max(0.0, float(seconds))
        return self._now

    def advance_days(self, days: float = 1) -> float:
        return self.advance(float(days) * SECONDS_PER_DAY)
