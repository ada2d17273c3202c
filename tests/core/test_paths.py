"""Tests for path navigation helpers."""

from __future__ import annotations

from repertoire.core.notation import STARTING_FEN
from repertoire.core.paths import (
    fen_at_path,
    find_child_by_move,
    get_node_at_path,
    line_to_node,
    resolve_path,
)


class TestGetNodeAtPath:
    def test_empty_path_is_root(self, build_tree) -> None:
        tree = build_tree("e2e4 e7e5")
        assert get_node_at_path(tree, ()) is None

    def test_resolves_node(self, build_tree, find_path) -> None:
        tree = build_tree("e2e4 e7e5", "e2e4 c7c5")
        path = find_path(tree, "e2e4 c7c5")
        assert get_node_at_path(tree, path).san == "c5"

    def test_stale_path(self, build_tree, find_path) -> None:
        tree = build_tree("e2e4 e7e5")
        path = find_path(tree, "e2e4 e7e5")
        assert get_node_at_path(tree, path + ("nope",)) is None


class TestResolvePath:
    def test_valid_path_unchanged(self, build_tree, find_path) -> None:
        tree = build_tree("e2e4 e7e5 g1f3")
        path = find_path(tree, "e2e4 e7e5 g1f3")
        assert resolve_path(tree, path) == path

    def test_deleted_node_falls_back_to_parent(self, build_tree, find_path) -> None:
        tree = build_tree("e2e4 e7e5 g1f3")
        path = find_path(tree, "e2e4 e7e5 g1f3")
        smaller = tree.delete_node(path[1])
        assert resolve_path(smaller, path) == path[:1]

    def test_nothing_resolves(self, build_tree) -> None:
        tree = build_tree("e2e4")
        assert resolve_path(tree, ("x", "y")) == ()


class TestFenAtPath:
    def test_root_fen(self, build_tree) -> None:
        tree = build_tree("e2e4")
        assert fen_at_path(tree, (), STARTING_FEN) == STARTING_FEN

    def test_node_fen(self, build_tree, find_path) -> None:
        tree = build_tree("e2e4")
        fen = fen_at_path(tree, find_path(tree, "e2e4"), STARTING_FEN)
        assert fen.startswith("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b")


class TestFindChildByMove:
    def test_root_level(self, build_tree) -> None:
        tree = build_tree("e2e4", "d2d4")
        assert find_child_by_move(tree, (), "d2d4").san == "d4"
        assert find_child_by_move(tree, (), "c2c4") is None

    def test_nested(self, build_tree, find_path) -> None:
        tree = build_tree("e2e4 e7e5", "e2e4 c7c5")
        parent = find_path(tree, "e2e4")
        assert find_child_by_move(tree, parent, "c7c5").san == "c5"

    def test_stale_parent(self, build_tree) -> None:
        tree = build_tree("e2e4 e7e5")
        assert find_child_by_move(tree, ("gone",), "e7e5") is None


class TestLineToNode:
    def test_nodes_from_first_move(self, build_tree, find_path) -> None:
        tree = build_tree("e2e4 e7e5 g1f3", "e2e4 c7c5")
        leaf = find_path(tree, "e2e4 e7e5 g1f3")[-1]
        assert [n.san for n in line_to_node(tree, leaf)] == ["e4", "e5", "Nf3"]

    def test_missing(self, build_tree) -> None:
        assert line_to_node(build_tree("e2e4"), "missing") == ()
