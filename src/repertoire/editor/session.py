"""EditorSession — building a repertoire move by move.

The editor keeps the tree being edited, the currently selected path and an
undo/redo history of tree states.  Every edit goes through :meth:`_commit`,
which truncates the redo branch and caps the history length.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace

from repertoire.board.chess_board import ChessBoard
from repertoire.board.interfaces import BoardFactory, IBoard
from repertoire.core.enums import Side
from repertoire.core.nodes import BoardShape, MoveNode
from repertoire.core.notation import make_uci, normalize_nag
from repertoire.core.paths import fen_at_path, find_child_by_move, get_node_at_path, resolve_path
from repertoire.core.pgn import export_tree_to_pgn, parse_pgn_to_tree
from repertoire.core.study import OpeningStudy
from repertoire.core.tree import MoveTree
from repertoire.practice.feedback import IFeedbackSink, NullFeedback, classify_move
from repertoire.storage.studies import StudyRepository, validate_study

_LOGGER = logging.getLogger(__name__)

HISTORY_LIMIT = 50

ChangedCallback = Callable[[], None]


@dataclass
class EditorEvents:
    on_changed: list[ChangedCallback] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class _Snapshot:
    moves: MoveTree
    root_fen: str
    practice_start_node_id: str | None


class EditorSession:
    """Edits one study; metadata fields are plain attributes."""

    __slots__ = (
        "name",
        "description",
        "color",
        "_base",
        "_board_factory",
        "_feedback",
        "_history_limit",
        "_history",
        "_history_index",
        "_path",
        "_board",
        "_last_move",
        "events",
    )

    def __init__(
        self,
        study: OpeningStudy | None = None,
        *,
        board_factory: BoardFactory = ChessBoard,
        feedback: IFeedbackSink | None = None,
        history_limit: int = HISTORY_LIMIT,
    ) -> None:
        base = study if study is not None else OpeningStudy(name="")
        self.name = base.name
        self.description = base.description or ""
        self.color: Side = base.color
        self._base = base
        self._board_factory = board_factory
        self._feedback = feedback or NullFeedback()
        self._history_limit = max(1, history_limit)
        self._history = [_Snapshot(base.moves, base.root_fen, base.entry_node_id)]
        self._history_index = 0
        self._path: tuple[str, ...] = ()
        self._board: IBoard = board_factory(base.root_fen)
        self._last_move: tuple[str, str] | None = None
        self.events = EditorEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def moves(self) -> MoveTree:
        return self._history[self._history_index].moves

    @property
    def root_fen(self) -> str:
        return self._history[self._history_index].root_fen

    @property
    def practice_start_node_id(self) -> str | None:
        return self._history[self._history_index].practice_start_node_id

    @property
    def current_path(self) -> tuple[str, ...]:
        return self._path

    @property
    def current_node(self) -> MoveNode | None:
        return get_node_at_path(self.moves, self._path)

    @property
    def fen(self) -> str:
        return self._board.fen

    @property
    def turn(self) -> Side:
        return self._board.turn

    @property
    def in_check(self) -> bool:
        return self._board.is_check()

    @property
    def last_move(self) -> tuple[str, str] | None:
        return self._last_move

    def legal_dests(self) -> dict[str, list[str]]:
        return self._board.legal_dests()

    def needs_promotion(self, from_sq: str, to_sq: str) -> bool:
        return self._board.needs_promotion(from_sq, to_sq)

    @property
    def repertoire_moves(self) -> tuple[MoveNode, ...]:
        """Continuations already in the tree at the current position."""
        node = self.current_node
        return self.moves.children_of(node.id if node is not None else None)

    @property
    def can_undo(self) -> bool:
        return self._history_index > 0

    @property
    def can_redo(self) -> bool:
        return self._history_index < len(self._history) - 1

    @property
    def history_size(self) -> int:
        return len(self._history)

    # ── Moves ────────────────────────────────────────────────────────────

    def play_move(self, from_sq: str, to_sq: str, promotion: str | None = None) -> MoveNode | None:
        """Play a move at the current position.

        An existing continuation is navigated to; a new one is added to the
        tree.  Returns ``None`` (nothing changes) for an illegal move.
        """
        outcome = self._board.push_uci(make_uci(from_sq, to_sq, promotion))
        if outcome is None:
            return None
        self._feedback.play(classify_move(outcome))

        existing = find_child_by_move(self.moves, self._path, outcome.uci)
        if existing is not None:
            self._path = self._path + (existing.id,)
            self._last_move = outcome.squares
            self._emit_changed()
            return existing

        node = MoveNode(san=outcome.san, uci=outcome.uci, fen=outcome.fen)
        tree = self.moves.add_move(self._path, node)
        self._path = self._path + (node.id,)
        self._commit(tree)
        return tree.node(node.id)

    # ── Navigation ───────────────────────────────────────────────────────

    def go_back(self) -> bool:
        if not self._path:
            return False
        self._navigate(self._path[:-1])
        return True

    def go_forward(self) -> bool:
        """Step into the main-line continuation (the first child otherwise)."""
        children = self.repertoire_moves
        if not children:
            return False
        nxt = next((c for c in children if c.is_main_line), children[0])
        self._navigate(self._path + (nxt.id,))
        return True

    def go_to_start(self) -> None:
        self._navigate(())

    def go_to_end(self) -> None:
        """Follow main-line continuations to the end of the current branch."""
        path = self._path
        node = self.current_node
        while True:
            children = self.moves.children_of(node.id if node is not None else None)
            if not children:
                break
            node = next((c for c in children if c.is_main_line), children[0])
            path = path + (node.id,)
        self._navigate(path)

    def go_to_node(self, node_id: str) -> bool:
        path = self.moves.get_path_to_node(node_id)
        if not path:
            return False
        self._navigate(path)
        return True

    # ── Edits ────────────────────────────────────────────────────────────

    def delete_current(self) -> bool:
        """Delete the selected move and its subtree; selection falls back to the parent."""
        node = self.current_node
        if node is None:
            return False
        tree = self.moves.delete_node(node.id)
        self._path = self._path[:-1]
        self._commit(tree)
        return True

    def promote_current(self) -> bool:
        node = self.current_node
        if node is None or node.is_main_line:
            return False
        self._commit(self.moves.promote_to_main_line(node.id))
        return True

    def set_comment(self, comment: str | None) -> bool:
        node = self.current_node
        if node is None:
            return False
        self._commit(self.moves.update_comment(node.id, comment))
        return True

    def toggle_nag(self, nag: str | int) -> bool:
        """Add *nag* to the selected move, or remove it if already present."""
        node = self.current_node
        if node is None:
            return False
        code = normalize_nag(nag)
        if code in node.nags:
            nags = [n for n in node.nags if n != code]
        else:
            nags = [*node.nags, code]
        self._commit(self.moves.update_nags(node.id, nags))
        return True

    def set_shapes(self, shapes: Iterable[BoardShape]) -> bool:
        node = self.current_node
        if node is None:
            return False
        self._commit(self.moves.update_shapes(node.id, shapes))
        return True

    def set_practice_start(self, node_id: str | None = None) -> bool:
        """Mark *node_id* (default: the selected move) as the practice entry point.

        Only moves on the linear trunk, before the first branch, qualify.
        """
        target = node_id if node_id is not None else (self._path[-1] if self._path else None)
        if target is None or not self.moves.is_on_linear_trunk(target):
            return False
        self._commit(self.moves, practice_start_node_id=target)
        return True

    def clear_practice_start(self) -> bool:
        if self.practice_start_node_id is None:
            return False
        self._commit(self.moves, practice_start_node_id=None)
        return True

    # ── History ──────────────────────────────────────────────────────────

    def undo(self) -> bool:
        if not self.can_undo:
            return False
        self._history_index -= 1
        self._restore_selection()
        return True

    def redo(self) -> bool:
        if not self.can_redo:
            return False
        self._history_index += 1
        self._restore_selection()
        return True

    # ── Import / export / save ───────────────────────────────────────────

    def import_pgn(self, pgn: str) -> bool:
        """Replace the tree with the first game of *pgn*; ``False`` if nothing parsed."""
        tree, root_fen = parse_pgn_to_tree(pgn)
        if tree.is_empty:
            return False
        self._path = ()
        self._commit(tree, root_fen=root_fen, practice_start_node_id=None)
        return True

    def export_pgn(self, headers: Mapping[str, str] | None = None) -> str:
        merged = {"Event": self.name.strip() or "?"}
        merged.update(headers or {})
        return export_tree_to_pgn(self.moves, self.root_fen, merged)

    def build_study(self) -> OpeningStudy:
        """The edited study; raises ``StudyValidationError`` when it cannot be saved."""
        study = replace(
            self._base,
            name=self.name.strip(),
            description=self.description.strip() or None,
            color=self.color,
            root_fen=self.root_fen,
            moves=self.moves,
            practice_start_node_id=self.practice_start_node_id,
        )
        validate_study(study)
        return study

    def save(self, repository: StudyRepository) -> OpeningStudy:
        saved = repository.save(self.build_study())
        self._base = saved
        return saved

    # ── Internal ─────────────────────────────────────────────────────────

    def _commit(self, tree: MoveTree, **changes: object) -> None:
        current = self._history[self._history_index]
        snapshot = replace(current, moves=tree, **changes)
        marker = snapshot.practice_start_node_id
        if marker is not None and marker not in tree:
            snapshot = replace(snapshot, practice_start_node_id=None)
        history = self._history[: self._history_index + 1]
        history.append(snapshot)
        self._history = history[-self._history_limit :]
        self._history_index = len(self._history) - 1
        self._navigate(resolve_path(tree, self._path))

    def _restore_selection(self) -> None:
        self._navigate(resolve_path(self.moves, self._path))

    def _navigate(self, path: tuple[str, ...]) -> None:
        self._path = path
        self._board = self._board_factory(fen_at_path(self.moves, path, self.root_fen))
        node = self.current_node
        self._last_move = (node.from_square, node.to_square) if node is not None else None
        self._emit_changed()

    def _emit_changed(self) -> None:
        for cb in self.events.on_changed:
            cb()
