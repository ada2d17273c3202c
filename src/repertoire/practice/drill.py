"""SpeedDrill — timed run through every line of a study.

Lines are shuffled and the opponent replies quickly; completed lines
advance on their own.  The stopwatch starts with the first user move and
stops when the last line is done or the time limit runs out.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from repertoire.board.chess_board import ChessBoard
from repertoire.board.interfaces import BoardFactory, MoveOutcome
from repertoire.core.enums import MoveResult
from repertoire.core.lines import user_move_count
from repertoire.core.nodes import MoveNode
from repertoire.core.study import OpeningStudy
from repertoire.practice.clock import Stopwatch
from repertoire.practice.feedback import IFeedbackSink
from repertoire.practice.scheduler import IScheduler, ScheduledCall
from repertoire.practice.session import PracticeSession
from repertoire.settings import TrainerSettings

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DrillStats:
    """Result of a drill (or the running totals of one in progress)."""

    correct_moves: int = 0
    wrong_moves: int = 0
    elapsed_ms: int = 0

    @property
    def total_moves(self) -> int:
        return self.correct_moves + self.wrong_moves

    @property
    def accuracy(self) -> float:
        """Percentage of correct attempts (0 before any attempt)."""
        if self.total_moves == 0:
            return 0.0
        return 100.0 * self.correct_moves / self.total_moves

    @property
    def average_time_per_move(self) -> float:
        """Milliseconds per correct move (0 before any correct move)."""
        if self.correct_moves == 0:
            return 0.0
        return self.elapsed_ms / self.correct_moves


DrillCompleteCallback = Callable[[DrillStats], None]


@dataclass
class DrillEvents:
    on_complete: list[DrillCompleteCallback] = field(default_factory=list)


class SpeedDrill:
    """Composes a shuffled :class:`PracticeSession` with a :class:`Stopwatch`."""

    __slots__ = (
        "_scheduler",
        "_session",
        "_stopwatch",
        "_time_limit_ms",
        "_next_line_delay_ms",
        "_correct",
        "_wrong",
        "_is_complete",
        "_time_up",
        "_advance_call",
        "_limit_call",
        "events",
    )

    def __init__(
        self,
        study: OpeningStudy,
        *,
        scheduler: IScheduler,
        board_factory: BoardFactory = ChessBoard,
        feedback: IFeedbackSink | None = None,
        settings: TrainerSettings | None = None,
        rng: random.Random | None = None,
        time_source: Callable[[], float] = time.monotonic,
    ) -> None:
        cfg = settings or TrainerSettings()
        drill_cfg = replace(
            cfg,
            opening_delay_ms=cfg.drill_next_line_delay_ms,
            opponent_delay_ms=cfg.drill_opponent_delay_ms,
        )
        self._scheduler = scheduler
        self._session = PracticeSession(
            study,
            scheduler=scheduler,
            board_factory=board_factory,
            feedback=feedback,
            settings=drill_cfg,
            shuffle=True,
            rng=rng,
        )
        self._session.events.on_move.append(self._on_move)
        self._session.events.on_wrong_move.append(self._on_wrong_move)
        self._session.events.on_line_complete.append(self._on_line_complete)
        self._stopwatch = Stopwatch(time_source)
        self._time_limit_ms = max(0, cfg.drill_time_limit_s) * 1000
        self._next_line_delay_ms = cfg.drill_next_line_delay_ms
        self._correct = 0
        self._wrong = 0
        self._is_complete = False
        self._time_up = False
        self._advance_call: ScheduledCall | None = None
        self._limit_call: ScheduledCall | None = None
        self.events = DrillEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def session(self) -> PracticeSession:
        return self._session

    @property
    def stats(self) -> DrillStats:
        return DrillStats(
            correct_moves=self._correct,
            wrong_moves=self._wrong,
            elapsed_ms=self._stopwatch.elapsed_ms,
        )

    @property
    def elapsed_ms(self) -> int:
        return self._stopwatch.elapsed_ms

    @property
    def is_running(self) -> bool:
        return self._stopwatch.is_running

    @property
    def is_complete(self) -> bool:
        return self._is_complete

    @property
    def time_up(self) -> bool:
        """True when the drill ended because the time limit expired."""
        return self._time_up

    @property
    def time_limit_ms(self) -> int:
        return self._time_limit_ms

    @property
    def remaining_ms(self) -> int | None:
        if self._time_limit_ms == 0:
            return None
        return max(0, self._time_limit_ms - self._stopwatch.elapsed_ms)

    @property
    def total_user_moves(self) -> int:
        """User plies over every line of the drill."""
        side = self._session.user_side
        return sum(user_move_count(line, side) for line in self._session.lines)

    @property
    def lines_done(self) -> int:
        return len(self._session.completed_lines)

    # ── Commands ─────────────────────────────────────────────────────────

    def make_move(self, from_sq: str, to_sq: str, promotion: str | None = None) -> MoveResult:
        if self._is_complete or not self._session.awaiting_user_move:
            return MoveResult.IGNORED
        if not self._stopwatch.is_running:
            self._start_clock()
        return self._session.make_move(from_sq, to_sq, promotion)

    def reset_drill(self) -> None:
        """Zero the clock and counters and restart from the first line."""
        self._cancel_calls()
        self._stopwatch.reset()
        self._correct = 0
        self._wrong = 0
        self._is_complete = False
        self._time_up = False
        self._session.reset_progress()

    # ── Internal ─────────────────────────────────────────────────────────

    def _start_clock(self) -> None:
        self._stopwatch.start()
        if self._time_limit_ms > 0:
            self._limit_call = self._scheduler.call_later(self._time_limit_ms, self._on_time_up)

    def _on_move(self, outcome: MoveOutcome) -> None:
        # The side that just moved is the one no longer on turn.
        if self._session.turn != self._session.user_side:
            self._correct += 1

    def _on_wrong_move(self, uci: str, expected: MoveNode) -> None:
        self._wrong += 1

    def _on_line_complete(self, line_index: int) -> None:
        if self._is_complete:
            return
        if self._session.has_next_line:
            self._advance_call = self._scheduler.call_later(
                self._next_line_delay_ms, self._advance_line
            )
        else:
            self._finish()

    def _advance_line(self) -> None:
        self._advance_call = None
        if not self._is_complete:
            self._session.next_line()

    def _on_time_up(self) -> None:
        self._limit_call = None
        if self._is_complete:
            return
        _LOGGER.info("Drill time limit of %d ms reached", self._time_limit_ms)
        self._time_up = True
        self._finish()

    def _finish(self) -> None:
        self._is_complete = True
        self._stopwatch.stop()
        self._cancel_calls()
        self._session.halt()
        stats = self.stats
        for cb in self.events.on_complete:
            cb(stats)

    def _cancel_calls(self) -> None:
        for call in (self._advance_call, self._limit_call):
            if call is not None:
                call.cancel()
        self._advance_call = None
        self._limit_call = None
