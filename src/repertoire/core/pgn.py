"""PGN import/export of move trees (variations, comments, NAGs, arrows)."""

from __future__ import annotations

import io
import logging
import re
from collections.abc import Mapping

import chess
import chess.pgn
import chess.svg

from repertoire.core.nodes import BoardShape, MoveNode
from repertoire.core.notation import STARTING_FEN, nag_number
from repertoire.core.tree import MoveTree

_LOGGER = logging.getLogger(__name__)

_COMMAND_RE = re.compile(r"\[%[^\]]*\]")
_PGN_BRUSHES = frozenset({"green", "red", "yellow", "blue"})


def parse_pgn_to_tree(pgn: str) -> tuple[MoveTree, str]:
    """Parse the first game of *pgn* into ``(tree, root_fen)``.

    Variations keep their PGN order.  Only first variations hanging off
    the main line are main line themselves; inside a side variation no
    move is.  Text that cannot be parsed yields an empty tree.
    """
    game = chess.pgn.read_game(io.StringIO(pgn))
    if game is None:
        _LOGGER.warning("No game found in PGN input")
        return MoveTree(), STARTING_FEN
    for error in game.errors:
        _LOGGER.warning("PGN parse error: %s", error)

    root_board = game.board()
    tree = MoveTree()
    stack: list[tuple[chess.pgn.GameNode, tuple[str, ...], chess.Board]] = [
        (game, (), root_board)
    ]
    while stack:
        game_node, path, board = stack.pop()
        for variation in game_node.variations:
            child_board = board.copy(stack=False)
            san = child_board.san(variation.move)
            child_board.push(variation.move)
            node = MoveNode(
                san=san,
                uci=variation.move.uci(),
                fen=child_board.fen(),
                comment=_clean_comment(variation.comment),
                nags=tuple(f"${n}" for n in sorted(variation.nags)),
                shapes=_arrows_to_shapes(variation),
            )
            tree = tree.add_move(path, node)
            stack.append((variation, path + (node.id,), child_board))
    return tree, root_board.fen()


def export_tree_to_pgn(
    tree: MoveTree,
    root_fen: str = STARTING_FEN,
    headers: Mapping[str, str] | None = None,
) -> str:
    """Render *tree* as PGN movetext with main lines before variations."""
    if tree.is_empty:
        return ""

    game = chess.pgn.Game()
    if root_fen != STARTING_FEN:
        game.setup(root_fen)
    for key, value in (headers or {}).items():
        game.headers[key] = value

    stack: list[tuple[chess.pgn.GameNode, tuple[MoveNode, ...], chess.Board]] = [
        (game, tree.root_nodes, game.board())
    ]
    while stack:
        game_node, group, board = stack.pop()
        for child in _main_first(group):
            move = chess.Move.from_uci(child.uci)
            if not board.is_legal(move):
                _LOGGER.warning("Skipping illegal move %s in export", child.uci)
                continue
            pgn_node = game_node.add_variation(
                move,
                comment=child.comment or "",
                nags=[nag_number(n) for n in child.nags],
            )
            arrows = _shapes_to_arrows(child.shapes)
            if arrows:
                pgn_node.set_arrows(arrows)
            child_board = board.copy(stack=False)
            child_board.push(move)
            stack.append((pgn_node, tree.children_of(child.id), child_board))

    exporter = chess.pgn.StringExporter(headers=True, variations=True, comments=True)
    return game.accept(exporter)


def _main_first(group: tuple[MoveNode, ...]) -> list[MoveNode]:
    return sorted(group, key=lambda n: not n.is_main_line)


def _clean_comment(comment: str) -> str | None:
    text = _COMMAND_RE.sub("", comment or "").strip()
    return text or None


def _arrows_to_shapes(node: chess.pgn.ChildNode) -> tuple[BoardShape, ...]:
    shapes = []
    for arrow in node.arrows():
        orig = chess.square_name(arrow.tail)
        dest = None if arrow.tail == arrow.head else chess.square_name(arrow.head)
        shapes.append(BoardShape(orig=orig, dest=dest, brush=arrow.color))
    return tuple(shapes)


def _shapes_to_arrows(shapes: tuple[BoardShape, ...]) -> list[chess.svg.Arrow]:
    arrows = []
    for shape in shapes:
        if shape.brush not in _PGN_BRUSHES:
            continue
        tail = chess.parse_square(shape.orig)
        head = chess.parse_square(shape.dest) if shape.dest else tail
        arrows.append(chess.svg.Arrow(tail, head, color=shape.brush))
    return arrows
