"""Stopwatch for timed drills."""

from __future__ import annotations

import time
from collections.abc import Callable


class Stopwatch:
    """Elapsed-time counter on a monotonic time source.

    *time_source* returns seconds; it defaults to :func:`time.monotonic`
    and can be replaced by a fake in tests.
    """

    __slots__ = ("_time_source", "_accumulated", "_started_at")

    def __init__(self, time_source: Callable[[], float] = time.monotonic) -> None:
        self._time_source = time_source
        self._accumulated = 0.0
        self._started_at: float | None = None

    @property
    def is_running(self) -> bool:
        return self._started_at is not None

    @property
    def elapsed_ms(self) -> int:
        return int(round(self._elapsed_seconds() * 1000))

    def start(self) -> None:
        if self._started_at is None:
            self._started_at = self._time_source()

    def stop(self) -> None:
        if self._started_at is not None:
            self._accumulated = self._elapsed_seconds()
            self._started_at = None

    def reset(self) -> None:
        self._accumulated = 0.0
        self._started_at = None

    # ── Internal ─────────────────────────────────────────────────────────

    def _elapsed_seconds(self) -> float:
        if self._started_at is None:
            return self._accumulated
        return self._accumulated + max(0.0, self._time_source() - self._started_at)
