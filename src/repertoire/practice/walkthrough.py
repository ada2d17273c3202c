"""StudySession — guided walkthrough of a study's lines.

Only the repertoire move is accepted and it is always shown as an arrow;
a different move is simply refused.  The opponent plays its moves as in
practice.
"""

from __future__ import annotations

import logging

from repertoire.board.chess_board import ChessBoard
from repertoire.board.interfaces import BoardFactory
from repertoire.core.lines import Line, extract_study_lines
from repertoire.core.nodes import BoardShape, MoveNode
from repertoire.core.study import OpeningStudy
from repertoire.practice.feedback import IFeedbackSink
from repertoire.practice.runner import LineRunner
from repertoire.practice.scheduler import IScheduler
from repertoire.settings import TrainerSettings

_LOGGER = logging.getLogger(__name__)


class StudySession(LineRunner):
    __slots__ = ("_study", "_lines")

    def __init__(
        self,
        study: OpeningStudy,
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
            opening_delay_ms=cfg.opening_delay_ms,
            opponent_delay_ms=cfg.opponent_delay_ms,
            wrong_flash_ms=cfg.wrong_flash_ms,
            idle_fen=study.root_fen,
        )
        self._study = study
        self._lines: tuple[Line, ...] = tuple(extract_study_lines(study))
        self._enter_index(0)

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def lines(self) -> tuple[Line, ...]:
        return self._lines

    @property
    def current_comment(self) -> str | None:
        """Comment attached to the last move on the board."""
        node = self.current_node
        return node.comment if node is not None else None

    @property
    def is_main_line(self) -> bool:
        return self.current_line_index == 0

    def legal_dests(self) -> dict[str, list[str]]:
        """Only the expected move is offered."""
        node = self.expected_node
        if node is None or not self.awaiting_user_move:
            return {}
        return {node.from_square: [node.to_square]}

    def hint_shapes(self) -> tuple[BoardShape, ...]:
        node = self.expected_node
        if node is None or not self.awaiting_user_move:
            return ()
        return (BoardShape(node.from_square, node.to_square, brush="green"),)

    # ── Navigation ───────────────────────────────────────────────────────

    def go_to_start(self) -> None:
        self._enter_index(self.current_line_index)

    def select_line(self, index: int) -> bool:
        if not 0 <= index < len(self._lines):
            return False
        self._enter_index(index)
        return True

    def next_line(self) -> bool:
        return self.select_line(self.current_line_index + 1)

    def previous_line(self) -> bool:
        return self.select_line(self.current_line_index - 1)

    def step_forward(self) -> bool:
        """Play the next scripted move at once, whichever side it belongs to."""
        node = self.expected_node
        if node is None:
            return False
        self.halt()
        outcome = self._board.push_uci(node.uci)
        if outcome is None:
            _LOGGER.warning("Board rejected scripted move %s (%s)", node.uci, node.san)
            return False
        self._advance(outcome)
        return True

    def step_back(self) -> bool:
        """Take back one ply; the opponent waits until the user moves again."""
        line = self.current_line
        target = self.move_index - 1
        if line is None or target < 0:
            return False
        self._enter_line(line, self.current_line_index, autoplay=False)
        for node in line.nodes[:target]:
            outcome = self._board.push_uci(node.uci)
            if outcome is None:
                _LOGGER.warning("Board rejected scripted move %s (%s)", node.uci, node.san)
                break
            self._move_index += 1
            self._last_move = outcome.squares
        self._emit_changed()
        return True

    # ── Hooks ────────────────────────────────────────────────────────────

    def _handle_wrong(self, uci: str, expected: MoveNode) -> None:
        _LOGGER.debug("Refused %s, expected %s", uci, expected.uci)

    # ── Internal ─────────────────────────────────────────────────────────

    def _enter_index(self, index: int) -> None:
        line = self._lines[index] if 0 <= index < len(self._lines) else None
        self._enter_line(line, index)
