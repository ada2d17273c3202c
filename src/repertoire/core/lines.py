"""Flattening the move tree into practice lines."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from repertoire.core.enums import Side
from repertoire.core.nodes import MoveNode
from repertoire.core.tree import MoveTree

if TYPE_CHECKING:
    from repertoire.core.study import OpeningStudy

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Line:
    """A maximal sequence of moves played from ``start_fen``."""

    nodes: tuple[MoveNode, ...]
    start_fen: str
    is_setup_line: bool = False

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def ucis(self) -> tuple[str, ...]:
        return tuple(n.uci for n in self.nodes)

    @property
    def leaf(self) -> MoveNode | None:
        return self.nodes[-1] if self.nodes else None

    @property
    def first_side(self) -> Side:
        """Side to move at ``start_fen``."""
        return side_to_move(self.start_fen)

    def name(self, index: int, max_moves: int = 4) -> str:
        """Short display name built from the first SAN moves."""
        if not self.nodes:
            return f"Line {index + 1}"
        moves = " ".join(n.san for n in self.nodes[:max_moves])
        return f"{moves}..." if len(self.nodes) > max_moves else moves


def side_to_move(fen: str) -> Side:
    fields = fen.split()
    return Side.BLACK if len(fields) > 1 and fields[1] == "b" else Side.WHITE


def _collect(
    tree: MoveTree,
    starts: Iterable[MoveNode],
    prefix: tuple[MoveNode, ...],
) -> list[tuple[MoveNode, ...]]:
    paths: list[tuple[MoveNode, ...]] = []
    stack = [(node, prefix) for node in reversed(tuple(starts))]
    while stack:
        node, before = stack.pop()
        current = before + (node,)
        if not node.children:
            paths.append(current)
            continue
        for child in reversed(tree.children_of(node.id)):
            stack.append((child, current))
    return paths


def extract_all_lines(tree: MoveTree, root_fen: str) -> list[Line]:
    """Every root-to-leaf line, depth-first in child order.

    Index 0 is the nominal main line since main-line children come first.
    """
    return [Line(nodes, root_fen) for nodes in _collect(tree, tree.root_nodes, ())]


def extract_lines_with_start_marker(
    tree: MoveTree,
    root_fen: str,
    entry_node_id: str,
) -> list[Line]:
    """``[setup_line, *variation_lines]`` split at the entry node.

    The setup line runs from the root to the entry node and starts at
    *root_fen*.  Each variation line starts from the entry node's position
    and runs from one of its children down to a leaf.  An entry id that no
    longer resolves falls back to :func:`extract_all_lines`.
    """
    entry = tree.find_node_by_id(entry_node_id)
    if entry is None:
        _LOGGER.warning("Practice start node %s not found; using all lines", entry_node_id)
        return extract_all_lines(tree, root_fen)

    setup_nodes = tuple(tree.node(i) for i in tree.get_path_to_node(entry_node_id))
    lines = [Line(setup_nodes, root_fen, is_setup_line=True)]
    for nodes in _collect(tree, tree.children_of(entry.id), ()):
        lines.append(Line(nodes, entry.fen))
    return lines


def extract_study_lines(study: OpeningStudy) -> list[Line]:
    entry = study.entry_node_id
    if entry is None:
        return extract_all_lines(study.moves, study.root_fen)
    return extract_lines_with_start_marker(study.moves, study.root_fen, entry)


def shuffled_order(count: int, rng: random.Random | None = None) -> list[int]:
    """Fisher–Yates permutation of ``range(count)``.

    The permutation is applied to line indices, never to the lines, so
    completed/skipped bookkeeping stays index-stable.
    """
    rand = rng or random.Random()
    order = list(range(count))
    for i in range(count - 1, 0, -1):
        j = rand.randint(0, i)
        order[i], order[j] = order[j], order[i]
    return order


def filter_lines_by_nodes(lines: Sequence[Line], node_ids: Iterable[str]) -> list[Line]:
    """Lines passing through any of *node_ids* (all lines when empty)."""
    wanted = set(node_ids)
    if not wanted:
        return list(lines)
    return [line for line in lines if any(n.id in wanted for n in line.nodes)]


def user_move_count(line: Line, user_side: Side) -> int:
    """Number of plies in *line* that *user_side* has to play."""
    first = line.first_side
    offset = 0 if first == user_side else 1
    return len(range(offset, len(line.nodes), 2))
