"""PracticeSession — blind practice of a study's lines.

The user plays their side of each line from memory while the session
plays the opponent.  Wrong answers escalate the hint level and are
reported to the mistake ledger; completed and skipped lines are tracked
per study and persisted when a progress repository is supplied.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from repertoire.board.chess_board import ChessBoard
from repertoire.board.interfaces import BoardFactory
from repertoire.core.lines import Line, extract_study_lines, shuffled_order
from repertoire.core.nodes import MoveNode
from repertoire.core.study import OpeningStudy
from repertoire.practice.feedback import IFeedbackSink
from repertoire.practice.runner import LineRunner, RunnerEvents
from repertoire.practice.scheduler import IScheduler
from repertoire.settings import TrainerSettings
from repertoire.storage.mistakes import MistakeLedger
from repertoire.storage.progress import PracticeProgress, ProgressRepository

_LOGGER = logging.getLogger(__name__)

AllLinesCallback = Callable[[], None]


@dataclass
class PracticeEvents(RunnerEvents):
    on_all_lines_complete: list[AllLinesCallback] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ProgressInfo:
    """Snapshot for a progress bar."""

    completed_lines: int
    total_lines: int
    current_move: int
    total_moves: int

    @property
    def completion_percent(self) -> float:
        if self.total_lines == 0:
            return 0.0
        return 100.0 * self.completed_lines / self.total_lines


class PracticeSession(LineRunner):
    """Practice every line of *study* in order (or shuffled).

    Args:
        study: The repertoire to practise; the user plays ``study.color``.
        scheduler: Source of delayed continuations.
        lines: Override the lines extracted from the study.
        ledger: Receives every wrong answer as a mistake.
        progress: Persists completed/skipped lines and counters.
        resume: Restore stored progress instead of starting fresh.
        rng: Random source for the shuffled order.
    """

    __slots__ = (
        "_study",
        "_lines",
        "_order",
        "_order_pos",
        "_completed",
        "_skipped",
        "_total_attempts",
        "_total_wrong",
        "_ledger",
        "_progress_repo",
    )

    events: PracticeEvents

    def __init__(
        self,
        study: OpeningStudy,
        *,
        scheduler: IScheduler,
        board_factory: BoardFactory = ChessBoard,
        feedback: IFeedbackSink | None = None,
        settings: TrainerSettings | None = None,
        lines: Sequence[Line] | None = None,
        ledger: MistakeLedger | None = None,
        progress: ProgressRepository | None = None,
        resume: bool = False,
        shuffle: bool | None = None,
        rng: random.Random | None = None,
    ) -> None:
        cfg = settings or TrainerSettings()
        super().__init__(
            user_side=study.color,
            scheduler=scheduler,
            board_factory=board_factory,
            feedback=feedback,
            hint_cap=cfg.hint_cap,
            opening_delay_ms=cfg.opening_delay_ms,
            opponent_delay_ms=cfg.opponent_delay_ms,
            wrong_flash_ms=cfg.wrong_flash_ms,
            idle_fen=study.root_fen,
            events=PracticeEvents(),
        )
        self._study = study
        self._lines: tuple[Line, ...] = tuple(
            extract_study_lines(study) if lines is None else lines
        )
        use_shuffle = cfg.shuffle_lines if shuffle is None else shuffle
        count = len(self._lines)
        self._order = shuffled_order(count, rng) if use_shuffle else list(range(count))
        self._order_pos = 0
        self._completed: set[int] = set()
        self._skipped: set[int] = set()
        self._total_attempts = 0
        self._total_wrong = 0
        self._ledger = ledger
        self._progress_repo = progress

        if resume and progress is not None:
            self._restore(progress.load(study.id))

        self._enter_current()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def study(self) -> OpeningStudy:
        return self._study

    @property
    def lines(self) -> tuple[Line, ...]:
        return self._lines

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def order(self) -> tuple[int, ...]:
        """Line indices in the order they are presented."""
        return tuple(self._order)

    @property
    def order_position(self) -> int:
        """Position of the current line within :attr:`order`."""
        return self._order_pos

    @property
    def has_next_line(self) -> bool:
        return self._order_pos < len(self._order) - 1

    @property
    def completed_lines(self) -> frozenset[int]:
        return frozenset(self._completed)

    @property
    def skipped_lines(self) -> frozenset[int]:
        return frozenset(self._skipped)

    @property
    def total_attempts(self) -> int:
        """User move attempts (right or wrong) over the whole session."""
        return self._total_attempts

    @property
    def total_wrong_attempts(self) -> int:
        return self._total_wrong

    @property
    def is_all_complete(self) -> bool:
        return bool(self._lines) and len(self._completed) == len(self._lines)

    @property
    def current_path(self) -> tuple[str, ...]:
        """Tree path of the played moves, including the setup prefix of variation lines."""
        played = super().current_path
        line = self.current_line
        if line is None or line.is_setup_line:
            return played
        entry = self._study.entry_node_id
        if entry is None:
            return played
        return self._study.moves.get_path_to_node(entry) + played

    @property
    def progress_info(self) -> ProgressInfo:
        line = self.current_line
        return ProgressInfo(
            completed_lines=len(self._completed),
            total_lines=len(self._lines),
            current_move=self.move_index,
            total_moves=len(line) if line is not None else 0,
        )

    def line_name(self, index: int) -> str:
        return self._lines[index].name(index)

    # ── Navigation ───────────────────────────────────────────────────────

    def reset_line(self) -> None:
        """Restart the current line from its first move."""
        self._enter_current()

    def select_line(self, index: int) -> bool:
        if not 0 <= index < len(self._lines):
            return False
        self._order_pos = self._order.index(index)
        self._enter_current()
        return True

    def next_line(self) -> bool:
        """Advance to the next line in session order; no-op at the end."""
        if self._order_pos >= len(self._order) - 1:
            return False
        self._order_pos += 1
        self._enter_current()
        return True

    def previous_line(self) -> bool:
        if self._order_pos <= 0:
            return False
        self._order_pos -= 1
        self._enter_current()
        return True

    def skip_line(self, index: int | None = None) -> bool:
        """Mark *index* (default: the current line) as skipped and move on.

        Returns ``True`` if another line was entered.
        """
        if not self._lines:
            return False
        target = self.current_line_index if index is None else index
        if not 0 <= target < len(self._lines):
            return False
        self._skipped.add(target)
        _LOGGER.debug("Skipped line %d", target)
        moved = self.next_line()
        if not moved:
            self._save_progress()
        return moved

    def reset_progress(self) -> None:
        """Forget completed/skipped lines and counters; restart at the first line."""
        self._completed.clear()
        self._skipped.clear()
        self._total_attempts = 0
        self._total_wrong = 0
        self._order_pos = 0
        if self._progress_repo is not None:
            self._progress_repo.clear(self._study.id)
        self._enter_current()

    # ── Hooks ────────────────────────────────────────────────────────────

    def _on_correct_move(self, node: MoveNode) -> None:
        self._total_attempts += 1
        self._save_progress()

    def _on_wrong_move(self, uci: str, expected: MoveNode) -> None:
        self._total_attempts += 1
        self._total_wrong += 1
        if self._ledger is not None:
            self._ledger.record_mistake(self._study.id, expected.id, expected.uci)
        self._save_progress()

    def _complete_line(self) -> None:
        index = self.current_line_index
        newly_completed = index not in self._completed
        self._completed.add(index)
        self._save_progress()
        super()._complete_line()
        if newly_completed and self.is_all_complete:
            _LOGGER.info("All %d lines of %r complete", len(self._lines), self._study.name)
            for cb in self.events.on_all_lines_complete:
                cb()

    # ── Internal ─────────────────────────────────────────────────────────

    def _enter_current(self) -> None:
        if not self._order:
            self._enter_line(None, 0)
            return
        index = self._order[self._order_pos]
        self._enter_line(self._lines[index], index)
        self._save_progress()

    def _restore(self, saved: PracticeProgress) -> None:
        count = len(self._lines)
        self._completed = {i for i in saved.completed_lines if 0 <= i < count}
        self._skipped = {i for i in saved.skipped_lines if 0 <= i < count}
        self._total_attempts = saved.total_attempts
        self._total_wrong = saved.wrong_attempts
        if 0 <= saved.current_line_index < count:
            self._order_pos = self._order.index(saved.current_line_index)

    def _save_progress(self) -> None:
        if self._progress_repo is None:
            return
        self._progress_repo.save(
            PracticeProgress(
                study_id=self._study.id,
                completed_lines=set(self._completed),
                skipped_lines=set(self._skipped),
                current_line_index=self.current_line_index,
                total_attempts=self._total_attempts,
                wrong_attempts=self._total_wrong,
            )
        )
