"""LineRunner — plays one scripted line against the user.

The runner owns the board, the index of the next expected move and the
per-line hint/wrong-move state.  Opponent replies are scheduled through an
:class:`IScheduler`; each continuation carries the ticket that was current
when it was scheduled and does nothing if the session has moved on since.

Subclasses decide which lines are played and hook into the transitions
(`_on_correct_move`, `_on_wrong_move`, `_complete_line`).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from repertoire.board.chess_board import ChessBoard
from repertoire.board.interfaces import BoardFactory, IBoard, MoveOutcome
from repertoire.core.enums import HintLevel, MoveResult, MoveSound, PracticeStatus, Side
from repertoire.core.lines import Line
from repertoire.core.nodes import BoardShape, MoveNode
from repertoire.core.notation import STARTING_FEN, make_uci
from repertoire.practice.feedback import IFeedbackSink, NullFeedback, classify_move
from repertoire.practice.scheduler import IScheduler, ScheduledCall

_LOGGER = logging.getLogger(__name__)

# ── Event definitions ────────────────────────────────────────────────────────

MoveCallback = Callable[[MoveOutcome], None]
WrongMoveCallback = Callable[[str, MoveNode], None]  # played uci, expected node
LineCallback = Callable[[int], None]  # line index
ChangedCallback = Callable[[], None]


@dataclass
class RunnerEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_move: list[MoveCallback] = field(default_factory=list)
    on_wrong_move: list[WrongMoveCallback] = field(default_factory=list)
    on_line_complete: list[LineCallback] = field(default_factory=list)
    on_changed: list[ChangedCallback] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class _Ticket:
    generation: int
    line_index: int
    move_index: int


# ── Runner ───────────────────────────────────────────────────────────────────


class LineRunner:
    """Base state machine: ``PLAYING`` until the last move of the line."""

    __slots__ = (
        "_user_side",
        "_scheduler",
        "_board_factory",
        "_feedback",
        "_hint_cap",
        "_opening_delay_ms",
        "_opponent_delay_ms",
        "_wrong_flash_ms",
        "_board",
        "_idle_fen",
        "_line",
        "_line_index",
        "_move_index",
        "_status",
        "_generation",
        "_pending",
        "_flash_call",
        "_last_move",
        "_wrong_attempts",
        "_hint_level",
        "_show_wrong_move",
        "events",
    )

    def __init__(
        self,
        *,
        user_side: Side,
        scheduler: IScheduler,
        board_factory: BoardFactory = ChessBoard,
        feedback: IFeedbackSink | None = None,
        hint_cap: HintLevel = HintLevel.ARROW,
        opening_delay_ms: int = 500,
        opponent_delay_ms: int = 400,
        wrong_flash_ms: int = 500,
        idle_fen: str = STARTING_FEN,
        events: RunnerEvents | None = None,
    ) -> None:
        self._user_side = user_side
        self._scheduler = scheduler
        self._board_factory = board_factory
        self._feedback = feedback or NullFeedback()
        self._hint_cap = hint_cap
        self._opening_delay_ms = opening_delay_ms
        self._opponent_delay_ms = opponent_delay_ms
        self._wrong_flash_ms = wrong_flash_ms

        self._idle_fen = idle_fen
        self._board: IBoard = board_factory(idle_fen)
        self._line: Line | None = None
        self._line_index = 0
        self._move_index = 0
        self._status = PracticeStatus.PLAYING
        self._generation = 0
        self._pending: list[ScheduledCall] = []
        self._flash_call: ScheduledCall | None = None
        self._last_move: tuple[str, str] | None = None
        self._wrong_attempts = 0
        self._hint_level = HintLevel.NONE
        self._show_wrong_move = False
        self.events = events or RunnerEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def user_side(self) -> Side:
        return self._user_side

    @property
    def status(self) -> PracticeStatus:
        return self._status

    @property
    def is_line_complete(self) -> bool:
        return self._status == PracticeStatus.LINE_COMPLETE

    @property
    def current_line(self) -> Line | None:
        return self._line

    @property
    def current_line_index(self) -> int:
        return self._line_index

    @property
    def move_index(self) -> int:
        """Number of plies of the current line already on the board."""
        return self._move_index

    @property
    def fen(self) -> str:
        return self._board.fen

    @property
    def turn(self) -> Side:
        return self._board.turn

    @property
    def is_user_turn(self) -> bool:
        return self._board.turn == self._user_side

    @property
    def in_check(self) -> bool:
        return self._board.is_check()

    @property
    def last_move(self) -> tuple[str, str] | None:
        return self._last_move

    @property
    def current_node(self) -> MoveNode | None:
        """Last node played on the board, if any."""
        if self._line is None or self._move_index == 0:
            return None
        return self._line.nodes[self._move_index - 1]

    @property
    def expected_node(self) -> MoveNode | None:
        """Next scripted move, whichever side plays it."""
        if self._line is None or self._move_index >= len(self._line.nodes):
            return None
        return self._line.nodes[self._move_index]

    @property
    def current_path(self) -> tuple[str, ...]:
        if self._line is None:
            return ()
        return tuple(n.id for n in self._line.nodes[: self._move_index])

    @property
    def wrong_attempts(self) -> int:
        """Wrong attempts since the current line was entered."""
        return self._wrong_attempts

    @property
    def hint_level(self) -> HintLevel:
        return self._hint_level

    @property
    def show_wrong_move(self) -> bool:
        """Transient flag raised by a wrong move, cleared after a short flash."""
        return self._show_wrong_move

    @property
    def pending_continuations(self) -> int:
        """Scheduled continuations this runner still holds."""
        return len(self._pending)

    @property
    def awaiting_user_move(self) -> bool:
        """True while a user move would be checked rather than ignored."""
        return self.expected_node is not None and self._accepts_user_move()

    def legal_dests(self) -> dict[str, list[str]]:
        """Destinations the user may try; empty unless it is the user's move."""
        if not self._accepts_user_move():
            return {}
        return self._board.legal_dests()

    def needs_promotion(self, from_sq: str, to_sq: str) -> bool:
        return self._board.needs_promotion(from_sq, to_sq)

    def hint_shapes(self) -> tuple[BoardShape, ...]:
        """Board overlays revealing the expected move at the current hint level."""
        node = self.expected_node
        if node is None or self._hint_level == HintLevel.NONE or not self._accepts_user_move():
            return ()
        orig, dest = node.from_square, node.to_square
        if self._hint_level == HintLevel.PIECE:
            return (BoardShape(orig, brush="yellow"),)
        if self._hint_level == HintLevel.DESTINATION:
            return (BoardShape(orig, brush="yellow"), BoardShape(dest, brush="yellow"))
        return (BoardShape(orig, dest, brush="green"),)

    # ── Commands ─────────────────────────────────────────────────────────

    def make_move(self, from_sq: str, to_sq: str, promotion: str | None = None) -> MoveResult:
        """Check the user's move against the expected continuation."""
        expected = self.expected_node
        if expected is None or not self._accepts_user_move():
            return MoveResult.IGNORED

        uci = make_uci(from_sq, to_sq, promotion)
        if uci != expected.uci:
            self._handle_wrong(uci, expected)
            return MoveResult.WRONG

        outcome = self._board.push_uci(uci)
        if outcome is None:
            _LOGGER.warning("Board rejected expected move %s at %s", uci, self.fen)
            self._handle_wrong(uci, expected)
            return MoveResult.WRONG

        self._cancel_flash()
        self._show_wrong_move = False
        self._hint_level = HintLevel.NONE
        self._on_correct_move(expected)
        self._advance(outcome)
        return MoveResult.CORRECT

    def halt(self) -> None:
        """Cancel every pending continuation and invalidate outstanding tickets."""
        self._cancel_pending()
        self._generation += 1

    # ── Subclass hooks ───────────────────────────────────────────────────

    def _accepts_user_move(self) -> bool:
        return (
            self._line is not None
            and self._status == PracticeStatus.PLAYING
            and self.is_user_turn
        )

    def _on_correct_move(self, node: MoveNode) -> None:
        pass

    def _on_wrong_move(self, uci: str, expected: MoveNode) -> None:
        pass

    def _complete_line(self) -> None:
        self._status = PracticeStatus.LINE_COMPLETE
        for cb in self.events.on_line_complete:
            cb(self._line_index)

    # ── Line lifecycle ───────────────────────────────────────────────────

    def _enter_line(
        self,
        line: Line | None,
        line_index: int,
        *,
        autoplay: bool = True,
    ) -> None:
        """Reset the board to *line*'s start and start the opponent if it moves first."""
        self.halt()
        self._line = line
        self._line_index = line_index
        self._board = self._board_factory(line.start_fen if line is not None else self._idle_fen)
        self._move_index = 0
        self._status = PracticeStatus.PLAYING
        self._last_move = None
        self._wrong_attempts = 0
        self._hint_level = HintLevel.NONE
        self._show_wrong_move = False

        if line is not None:
            if not line.nodes:
                self._complete_line()
            elif autoplay and not self.is_user_turn:
                self._schedule(self._opening_delay_ms, self._play_opponent_move)
        self._emit_changed()

    def _advance(self, outcome: MoveOutcome) -> None:
        assert self._line is not None
        self._move_index += 1
        self._last_move = outcome.squares
        self._feedback.play(classify_move(outcome))
        for cb in self.events.on_move:
            cb(outcome)

        if self._move_index >= len(self._line.nodes):
            self._complete_line()
        elif not self.is_user_turn:
            self._schedule(self._opponent_delay_ms, self._play_opponent_move)
        self._emit_changed()

    def _play_opponent_move(self) -> None:
        node = self.expected_node
        if node is None or self.is_user_turn or self._status != PracticeStatus.PLAYING:
            return
        outcome = self._board.push_uci(node.uci)
        if outcome is None:
            _LOGGER.warning("Board rejected scripted move %s (%s); line halted", node.uci, node.san)
            return
        self._advance(outcome)

    def _handle_wrong(self, uci: str, expected: MoveNode) -> None:
        self._wrong_attempts += 1
        self._show_wrong_move = True
        self._cancel_flash()
        self._flash_call = self._schedule(self._wrong_flash_ms, self._clear_wrong_flash)
        self._hint_level = HintLevel(min(self._hint_level + 1, self._hint_cap))
        self._feedback.play(MoveSound.WRONG)
        self._on_wrong_move(uci, expected)
        for cb in self.events.on_wrong_move:
            cb(uci, expected)
        self._emit_changed()

    def _clear_wrong_flash(self) -> None:
        self._flash_call = None
        self._show_wrong_move = False
        self._emit_changed()

    # ── Scheduling ───────────────────────────────────────────────────────

    def _ticket(self) -> _Ticket:
        return _Ticket(self._generation, self._line_index, self._move_index)

    def _schedule(self, delay_ms: int, action: Callable[[], None]) -> ScheduledCall:
        ticket = self._ticket()

        def _run() -> None:
            self._pending = [c for c in self._pending if c.is_pending]
            if ticket != self._ticket():
                _LOGGER.debug("Dropping stale continuation %s", ticket)
                return
            action()

        call = self._scheduler.call_later(delay_ms, _run)
        self._pending.append(call)
        return call

    def _cancel_flash(self) -> None:
        if self._flash_call is not None:
            self._flash_call.cancel()
            if self._flash_call in self._pending:
                self._pending.remove(self._flash_call)
            self._flash_call = None

    def _cancel_pending(self) -> None:
        for call in self._pending:
            call.cancel()
        self._pending.clear()
        self._flash_call = None

    def _emit_changed(self) -> None:
        for cb in self.events.on_changed:
            cb()
