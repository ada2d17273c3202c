"""Delayed continuations for practice sessions.

Sessions never sleep: every delayed step (opponent reply, wrong-move
flash, drill auto-advance) goes through an :class:`IScheduler` and can be
cancelled.
"""

from __future__ import annotations

import heapq
import itertools
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import IntEnum, auto


class CallState(IntEnum):
    PENDING = auto()
    FIRED = auto()
    CANCELLED = auto()


class ScheduledCall:
    """Handle to a callback scheduled with :meth:`IScheduler.call_later`."""

    __slots__ = ("_callback", "_on_cancel", "_state")

    def __init__(
        self,
        callback: Callable[[], None],
        on_cancel: Callable[[], None] | None = None,
    ) -> None:
        self._callback = callback
        self._on_cancel = on_cancel
        self._state = CallState.PENDING

    @property
    def state(self) -> CallState:
        return self._state

    @property
    def is_pending(self) -> bool:
        return self._state == CallState.PENDING

    def cancel(self) -> None:
        """Prevent the callback from running; no-op once fired."""
        if self._state != CallState.PENDING:
            return
        self._state = CallState.CANCELLED
        if self._on_cancel is not None:
            self._on_cancel()

    def fire(self) -> None:
        """Run the callback once (used by scheduler implementations)."""
        if self._state != CallState.PENDING:
            return
        self._state = CallState.FIRED
        self._callback()


class IScheduler(ABC):
    """Runs callbacks after a delay on the caller's thread."""

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall: ...


class ManualScheduler(IScheduler):
    """Virtual-time scheduler driven by :meth:`advance`.

    Callbacks due at the same instant run in scheduling order.  A callback
    may schedule further calls; those run within the same :meth:`advance`
    if they fall due before its end.
    """

    __slots__ = ("_now_ms", "_queue", "_seq")

    def __init__(self) -> None:
        self._now_ms = 0
        self._queue: list[tuple[int, int, ScheduledCall]] = []
        self._seq = itertools.count()

    @property
    def now_ms(self) -> int:
        return self._now_ms

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, call in self._queue if call.is_pending)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(callback)
        due = self._now_ms + max(0, delay_ms)
        heapq.heappush(self._queue, (due, next(self._seq), call))
        return call

    def advance(self, delay_ms: int) -> int:
        """Move virtual time forward, firing due calls; returns how many fired."""
        deadline = self._now_ms + max(0, delay_ms)
        fired = 0
        while self._queue and self._queue[0][0] <= deadline:
            due, _, call = heapq.heappop(self._queue)
            self._now_ms = due
            if call.is_pending:
                call.fire()
                fired += 1
        self._now_ms = deadline
        return fired

    def run_all(self, max_calls: int = 10_000) -> int:
        """Fire everything pending (including follow-ups) in due order."""
        fired = 0
        while self._queue and fired < max_calls:
            due, _, call = heapq.heappop(self._queue)
            self._now_ms = max(self._now_ms, due)
            if call.is_pending:
                call.fire()
                fired += 1
        return fired
