"""Polled gravity timer and the level → interval curve."""

from __future__ import annotations

import time
from collections.abc import Callable


def gravity_interval_ms(level: int, *, base_ms: int = 800, min_ms: int = 100) -> int:
    """Milliseconds between gravity ticks at *level*."""
    level = max(1, level)
    factor = max(0.0, 0.8 - (level - 1) * 0.007) ** (level - 1)
    return max(int(base_ms * factor), min_ms)


class GravityClock:
    """Gravity timer for hosts that run their own loop.

    Uses monotonic time.  The host calls :meth:`poll` and dispatches one
    gravity tick per returned count.  Stopping discards partial progress, so
    resuming never replays ticks missed while stopped.
    """

    __slots__ = ("_interval_ms", "_running", "_last_tick", "_now")

    def __init__(self, now: Callable[[], float] = time.monotonic) -> None:
        self._interval_ms = 0
        self._running = False
        self._last_tick = 0.0
        self._now = now

    # ── IGravityTimer implementation ─────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self, interval_ms: int) -> None:
        self._interval_ms = max(1, interval_ms)
        self._last_tick = self._now()
        self._running = True

    def stop(self) -> None:
        self._running = False

    def set_interval(self, interval_ms: int) -> None:
        self._interval_ms = max(1, interval_ms)

    # ── Extra helpers ────────────────────────────────────────────────────

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    def poll(self) -> int:
        """Number of ticks due since the last poll."""
        if not self._running:
            return 0
        now = self._now()
        elapsed_ms = (now - self._last_tick) * 1000.0
        due = int(elapsed_ms // self._interval_ms)
        if due:
            self._last_tick += due * self._interval_ms / 1000.0
        return due
