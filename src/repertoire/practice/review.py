"""MistakeReviewSession — spaced-repetition drill of past mistakes.

Each due mistake becomes a one-move exercise: the board shows the
position before the mistake and the user has to find the repertoire move.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from repertoire.board.chess_board import ChessBoard
from repertoire.board.interfaces import BoardFactory
from repertoire.core.lines import Line, side_to_move
from repertoire.core.nodes import MoveNode
from repertoire.core.study import OpeningStudy
from repertoire.practice.feedback import IFeedbackSink
from repertoire.practice.runner import LineRunner, RunnerEvents
from repertoire.practice.scheduler import IScheduler
from repertoire.settings import TrainerSettings
from repertoire.storage.mistakes import MistakeLedger, MistakeRecord

_LOGGER = logging.getLogger(__name__)

MistakeCallback = Callable[[MistakeRecord], None]
ReviewDoneCallback = Callable[[], None]


@dataclass
class ReviewEvents(RunnerEvents):
    on_mistake_solved: list[MistakeCallback] = field(default_factory=list)
    on_review_complete: list[ReviewDoneCallback] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ReviewTarget:
    """A due mistake resolved against the current tree."""

    record: MistakeRecord
    expected: MoveNode  # move the user has to play
    context: MoveNode | None  # move played just before, if any
    start_fen: str


def resolve_mistake(study: OpeningStudy, record: MistakeRecord) -> ReviewTarget | None:
    """Position and expected move for *record*, or ``None`` if it no longer applies.

    A mistake recorded at an opponent move is corrected to that move's first
    child, the user's reply.
    """
    tree = study.moves
    node = tree.find_node_by_id(record.node_id)
    if node is None:
        return None
    parent = tree.parent_of(node.id)
    fen_before = parent.fen if parent is not None else study.root_fen
    if side_to_move(fen_before) == study.color:
        return ReviewTarget(record, node, parent, fen_before)
    children = tree.children_of(node.id)
    if not children:
        return None
    return ReviewTarget(record, children[0], node, node.fen)


class MistakeReviewSession(LineRunner):
    """Walks the queue of due mistakes; no automatic advance after a solve."""

    __slots__ = (
        "_study",
        "_ledger",
        "_queue",
        "_index",
        "_correct_count",
        "_wrong_count",
    )

    events: ReviewEvents

    def __init__(
        self,
        study: OpeningStudy,
        ledger: MistakeLedger,
        *,
        scheduler: IScheduler,
        board_factory: BoardFactory = ChessBoard,
        feedback: IFeedbackSink | None = None,
        settings: TrainerSettings | None = None,
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
            events=ReviewEvents(),
        )
        self._study = study
        self._ledger = ledger
        self._queue: list[ReviewTarget] = []
        self._index = 0
        self._correct_count = 0
        self._wrong_count = 0
        self.refresh_mistakes()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def current_target(self) -> ReviewTarget | None:
        if self._index < len(self._queue):
            return self._queue[self._index]
        return None

    @property
    def current_mistake(self) -> MistakeRecord | None:
        target = self.current_target
        return target.record if target is not None else None

    @property
    def context_node(self) -> MoveNode | None:
        """The move leading into the exercise position."""
        target = self.current_target
        return target.context if target is not None else None

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def total_mistakes(self) -> int:
        """Size of the review queue."""
        return len(self._queue)

    @property
    def is_complete(self) -> bool:
        return self._index >= len(self._queue)

    @property
    def is_correct(self) -> bool:
        """The current mistake was solved."""
        return self.current_target is not None and self.is_line_complete

    @property
    def correct_count(self) -> int:
        return self._correct_count

    @property
    def wrong_count(self) -> int:
        return self._wrong_count

    def all_mistakes(self) -> list[MistakeRecord]:
        """Every stored mistake of the study, due or not."""
        return self._ledger.get_all_mistakes(self._study.id)

    # ── Commands ─────────────────────────────────────────────────────────

    def refresh_mistakes(self) -> None:
        """Reload the due queue and start over with zeroed counters."""
        queue: list[ReviewTarget] = []
        for record in self._ledger.get_mistakes_due_for_review(self._study.id):
            target = resolve_mistake(self._study, record)
            if target is None:
                _LOGGER.debug("Skipping stale mistake at node %s", record.node_id)
                continue
            queue.append(target)
        self._queue = queue
        self._index = 0
        self._correct_count = 0
        self._wrong_count = 0
        self._enter_current()

    def next_mistake(self) -> bool:
        """Move to the next queued mistake; ``False`` once the queue is exhausted."""
        if self._index >= len(self._queue):
            return False
        self._index += 1
        self._enter_current()
        if self._index >= len(self._queue):
            for cb in self.events.on_review_complete:
                cb()
            return False
        return True

    def skip_mistake(self) -> bool:
        return self.next_mistake()

    def retry_mistake(self) -> None:
        """Set the current exercise up again."""
        self._enter_current()

    def clear_all_mistakes(self) -> None:
        self._ledger.clear_all_mistakes(self._study.id)
        self._queue = []
        self._index = 0
        self._enter_current()

    # ── Hooks ────────────────────────────────────────────────────────────

    def _on_correct_move(self, node: MoveNode) -> None:
        target = self.current_target
        if target is None:
            return
        self._correct_count += 1
        node_id = target.record.node_id
        if self.wrong_attempts == 0:
            record = self._ledger.mark_correct(self._study.id, node_id)
        else:
            record = self._ledger.mark_correct_with_reset(self._study.id, node_id)
        for cb in self.events.on_mistake_solved:
            cb(record or target.record)

    def _on_wrong_move(self, uci: str, expected: MoveNode) -> None:
        target = self.current_target
        if target is None:
            return
        self._wrong_count += 1
        self._ledger.record_mistake(self._study.id, target.record.node_id, expected.uci)

    # ── Internal ─────────────────────────────────────────────────────────

    def _enter_current(self) -> None:
        target = self.current_target
        if target is None:
            self._enter_line(None, self._index)
            return
        self._enter_line(Line((target.expected,), target.start_fen), self._index)
