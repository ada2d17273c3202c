"""Tests for line extraction and ordering."""

from __future__ import annotations

import random

from repertoire.core.enums import Side
from repertoire.core.lines import (
    Line,
    extract_all_lines,
    extract_lines_with_start_marker,
    extract_study_lines,
    filter_lines_by_nodes,
    shuffled_order,
    side_to_move,
    user_move_count,
)
from repertoire.core.notation import STARTING_FEN
from repertoire.core.study import OpeningStudy

_RUY = "e2e4 e7e5 g1f3 b8c6 f1b5"
_PHILIDOR = "e2e4 e7e5 g1f3 d7d6 d2d4"
_SICILIAN = "e2e4 c7c5 g1f3"


class TestExtractAllLines:
    def test_one_line_per_leaf(self, build_tree) -> None:
        tree = build_tree(_RUY, _PHILIDOR, _SICILIAN)
        lines = extract_all_lines(tree, STARTING_FEN)
        assert len(lines) == len(tree.leaves())
        assert [line.leaf for line in lines] == list(tree.leaves())

    def test_each_line_is_a_root_to_leaf_path(self, build_tree) -> None:
        tree = build_tree(_RUY, _PHILIDOR, _SICILIAN)
        for line in extract_all_lines(tree, STARTING_FEN):
            assert line.leaf is not None
            ids = tuple(n.id for n in line.nodes)
            assert ids == tree.get_path_to_node(line.leaf.id)
            assert line.start_fen == STARTING_FEN

    def test_main_line_first(self, build_tree) -> None:
        tree = build_tree(_RUY, _SICILIAN)
        lines = extract_all_lines(tree, STARTING_FEN)
        assert lines[0].nodes == tree.main_line()

    def test_ucis(self, build_tree) -> None:
        lines = extract_all_lines(build_tree(_SICILIAN), STARTING_FEN)
        assert lines[0].ucis == ("e2e4", "c7c5", "g1f3")

    def test_empty_tree(self, build_tree) -> None:
        assert extract_all_lines(build_tree(), STARTING_FEN) == []


class TestStartMarker:
    def test_setup_line_then_variations(self, build_tree, find_path) -> None:
        tree = build_tree(_RUY, _PHILIDOR)
        entry = find_path(tree, "e2e4 e7e5 g1f3")[-1]
        lines = extract_lines_with_start_marker(tree, STARTING_FEN, entry)

        assert len(lines) == 3
        setup, ruy, philidor = lines
        assert setup.is_setup_line
        assert [n.san for n in setup.nodes] == ["e4", "e5", "Nf3"]
        assert setup.start_fen == STARTING_FEN
        assert [n.san for n in ruy.nodes] == ["Nc6", "Bb5"]
        assert [n.san for n in philidor.nodes] == ["d6", "d4"]
        assert ruy.start_fen == tree.node(entry).fen
        assert not ruy.is_setup_line

    def test_marker_on_leaf(self, build_tree, find_path) -> None:
        tree = build_tree(_SICILIAN)
        entry = find_path(tree, _SICILIAN)[-1]
        lines = extract_lines_with_start_marker(tree, STARTING_FEN, entry)
        assert len(lines) == 1
        assert lines[0].is_setup_line

    def test_unknown_marker_falls_back(self, build_tree) -> None:
        tree = build_tree(_RUY, _SICILIAN)
        lines = extract_lines_with_start_marker(tree, STARTING_FEN, "missing")
        assert lines == extract_all_lines(tree, STARTING_FEN)

    def test_study_uses_marker(self, build_tree, find_path) -> None:
        tree = build_tree(_RUY, _PHILIDOR)
        entry = find_path(tree, "e2e4 e7e5 g1f3")[-1]
        study = OpeningStudy(name="Open games", moves=tree, practice_start_node_id=entry)
        assert extract_study_lines(study)[0].is_setup_line

    def test_study_without_marker(self, build_tree) -> None:
        study = OpeningStudy(name="Open games", moves=build_tree(_RUY, _PHILIDOR))
        assert len(extract_study_lines(study)) == 2


class TestShuffledOrder:
    def test_is_permutation(self) -> None:
        order = shuffled_order(20, random.Random(7))
        assert sorted(order) == list(range(20))

    def test_seeded_is_repeatable(self) -> None:
        assert shuffled_order(10, random.Random(3)) == shuffled_order(10, random.Random(3))

    def test_trivial_sizes(self) -> None:
        assert shuffled_order(0) == []
        assert shuffled_order(1) == [0]


class TestHelpers:
    def test_filter_lines_by_nodes(self, build_tree, find_path) -> None:
        tree = build_tree(_RUY, _PHILIDOR, _SICILIAN)
        lines = extract_all_lines(tree, STARTING_FEN)
        e5 = find_path(tree, "e2e4 e7e5")[-1]
        assert len(filter_lines_by_nodes(lines, [e5])) == 2
        assert filter_lines_by_nodes(lines, []) == lines

    def test_side_to_move(self) -> None:
        assert side_to_move(STARTING_FEN) == Side.WHITE
        assert side_to_move("8/8/8/8/8/8/8/k6K b - - 0 1") == Side.BLACK

    def test_user_move_count(self, build_tree) -> None:
        line = extract_all_lines(build_tree(_RUY), STARTING_FEN)[0]
        assert user_move_count(line, Side.WHITE) == 3
        assert user_move_count(line, Side.BLACK) == 2

    def test_line_name(self, build_tree) -> None:
        line = extract_all_lines(build_tree(_RUY), STARTING_FEN)[0]
        assert line.name(0) == "e4 e5 Nf3 Nc6..."
        assert Line((), STARTING_FEN).name(2) == "Line 3"

    def test_first_side(self, build_tree, find_path) -> None:
        tree = build_tree(_RUY, _PHILIDOR)
        entry = find_path(tree, "e2e4 e7e5 g1f3")[-1]
        lines = extract_lines_with_start_marker(tree, STARTING_FEN, entry)
        assert lines[0].first_side == Side.WHITE
        assert lines[1].first_side == Side.BLACK
