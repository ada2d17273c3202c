"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterator

import pytest

from repertoire.board.chess_board import ChessBoard
from repertoire.core.nodes import MoveNode
from repertoire.core.notation import STARTING_FEN
from repertoire.core.paths import find_child_by_move
from repertoire.core.tree import MoveTree

# Linux CI runners are often headless. Force an offscreen backend only there.
if (
    sys.platform.startswith("linux")
    and "QT_QPA_PLATFORM" not in os.environ
    and "DISPLAY" not in os.environ
    and "WAYLAND_DISPLAY" not in os.environ
):
    os.environ["QT_QPA_PLATFORM"] = "offscreen"


def tree_from_lines(*lines: str, root_fen: str = STARTING_FEN) -> MoveTree:
    """Build a tree from space-separated UCI lines; shared prefixes are merged."""
    tree = MoveTree()
    for line in lines:
        board = ChessBoard(root_fen)
        path: tuple[str, ...] = ()
        for uci in line.split():
            outcome = board.push_uci(uci)
            assert outcome is not None, f"illegal move {uci} in {line!r}"
            node = find_child_by_move(tree, path, outcome.uci)
            if node is None:
                node = MoveNode(san=outcome.san, uci=outcome.uci, fen=outcome.fen)
                tree = tree.add_move(path, node)
            path = path + (node.id,)
    return tree


def path_of(tree: MoveTree, line: str) -> tuple[str, ...]:
    """Node ids along the UCI moves of *line*."""
    path: tuple[str, ...] = ()
    for uci in line.split():
        node = find_child_by_move(tree, path, uci)
        assert node is not None, f"{uci} not found after {path}"
        path = path + (node.id,)
    return path


@pytest.fixture
def build_tree() -> Callable[..., MoveTree]:
    return tree_from_lines


@pytest.fixture
def find_path() -> Callable[[MoveTree, str], tuple[str, ...]]:
    return path_of


@pytest.fixture(scope="session")
def qapp() -> Iterator[object]:
    """Provide a singleton QCoreApplication for timer tests."""
    from PyQt6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app
