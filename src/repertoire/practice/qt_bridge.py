"""Qt event-loop implementation of :class:`IScheduler`."""

from __future__ import annotations

from collections.abc import Callable

from PyQt6.QtCore import QObject, QTimer

from repertoire.practice.scheduler import IScheduler, ScheduledCall


class QtScheduler(IScheduler):
    """Schedules callbacks with single-shot :class:`QTimer` objects.

    Must be used from the thread owning the Qt event loop.
    """

    __slots__ = ("_parent", "_timers")

    def __init__(self, parent: QObject | None = None) -> None:
        self._parent = parent
        self._timers: set[QTimer] = set()

    @property
    def active_count(self) -> int:
        return len(self._timers)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        call = ScheduledCall(callback, on_cancel=lambda: self._release(timer))

        def _on_timeout() -> None:
            self._release(timer)
            call.fire()

        timer.timeout.connect(_on_timeout)
        self._timers.add(timer)
        timer.start(max(0, delay_ms))
        return call

    def shutdown(self) -> None:
        """Stop every outstanding timer."""
        for timer in list(self._timers):
            self._release(timer)

    def _release(self, timer: QTimer) -> None:
        if timer not in self._timers:
            return
        self._timers.discard(timer)
        timer.stop()
        timer.deleteLater()
