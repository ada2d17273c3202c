"""Path navigation over a :class:`MoveTree`.

A path is the sequence of node ids from (but not including) the root to a
target node.  The empty path is the position before the first move.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from repertoire.core.nodes import MoveNode
from repertoire.core.tree import MoveTree

_LOGGER = logging.getLogger(__name__)

Path = tuple[str, ...]


def get_node_at_path(tree: MoveTree, path: Sequence[str]) -> MoveNode | None:
    """Node addressed by *path*; ``None`` for the root or a stale path."""
    if not path:
        return None
    return tree.walk(path)


def resolve_path(tree: MoveTree, path: Sequence[str]) -> Path:
    """Longest prefix of *path* that still resolves in *tree*.

    Used to recover from a path captured before the tree was edited (e.g.
    the selected node was deleted): the caller lands on the nearest valid
    ancestor, or the root when nothing resolves.
    """
    group = tree.root_ids
    valid: list[str] = []
    for node_id in path:
        if node_id not in group:
            break
        valid.append(node_id)
        group = tree.node(node_id).children
    if len(valid) != len(path):
        _LOGGER.debug("Stale path truncated from %d to %d plies", len(path), len(valid))
    return tuple(valid)


def fen_at_path(tree: MoveTree, path: Sequence[str], root_fen: str) -> str:
    """Position after the last move of *path* (*root_fen* for the root)."""
    node = get_node_at_path(tree, path)
    return root_fen if node is None else node.fen


def find_child_by_move(tree: MoveTree, parent_path: Sequence[str], uci: str) -> MoveNode | None:
    """Existing continuation *uci* from the position at *parent_path*."""
    if parent_path:
        parent = tree.walk(parent_path)
        if parent is None:
            return None
        group = tree.children_of(parent.id)
    else:
        group = tree.root_nodes
    return next((n for n in group if n.uci == uci), None)


def line_to_node(tree: MoveTree, node_id: str) -> tuple[MoveNode, ...]:
    """Nodes from the first move down to *node_id* (empty when missing)."""
    return tuple(tree.node(i) for i in tree.get_path_to_node(node_id))
