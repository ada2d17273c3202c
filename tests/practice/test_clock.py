"""Tests for Stopwatch."""

from __future__ import annotations

from repertoire.practice.clock import Stopwatch


class _FakeTime:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class TestStopwatch:
    def test_idle(self) -> None:
        watch = Stopwatch(_FakeTime())
        assert not watch.is_running
        assert watch.elapsed_ms == 0

    def test_runs_while_started(self) -> None:
        clock = _FakeTime()
        watch = Stopwatch(clock)
        watch.start()
        clock.now += 1.25
        assert watch.is_running
        assert watch.elapsed_ms == 1250

    def test_stop_freezes(self) -> None:
        clock = _FakeTime()
        watch = Stopwatch(clock)
        watch.start()
        clock.now += 2.0
        watch.stop()
        clock.now += 5.0
        assert not watch.is_running
        assert watch.elapsed_ms == 2000

    def test_resume_accumulates(self) -> None:
        clock = _FakeTime()
        watch = Stopwatch(clock)
        watch.start()
        clock.now += 1.0
        watch.stop()
        clock.now += 10.0
        watch.start()
        clock.now += 0.5
        assert watch.elapsed_ms == 1500

    def test_double_start_keeps_origin(self) -> None:
        clock = _FakeTime()
        watch = Stopwatch(clock)
        watch.start()
        clock.now += 1.0
        watch.start()
        clock.now += 1.0
        assert watch.elapsed_ms == 2000

    def test_reset(self) -> None:
        clock = _FakeTime()
        watch = Stopwatch(clock)
        watch.start()
        clock.now += 3.0
        watch.reset()
        assert not watch.is_running
        assert watch.elapsed_ms == 0
