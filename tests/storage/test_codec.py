"""Tests for the JSON codec of studies and trees."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from repertoire.core.enums import Side
from repertoire.core.nodes import BoardShape
from repertoire.core.study import OpeningStudy
from repertoire.storage.codec import (
    decode_datetime,
    encode_datetime,
    study_from_dict,
    study_to_dict,
    tree_from_dict,
    tree_to_dict,
)


def _annotated_study(build_tree, find_path) -> OpeningStudy:
    tree = build_tree("e2e4 e7e5 g1f3", "e2e4 c7c5")
    e4 = find_path(tree, "e2e4")[-1]
    tree = tree.update_comment(e4, "King's pawn")
    tree = tree.update_nags(e4, ["!"])
    tree = tree.update_shapes(e4, [BoardShape("e2", "e4"), BoardShape("d5", brush="red")])
    return OpeningStudy(
        name="Open games",
        color=Side.BLACK,
        moves=tree,
        description="Both replies",
        practice_start_node_id=e4,
    )


class TestDatetimes:
    def test_round_trip(self) -> None:
        value = datetime(2024, 5, 1, 12, 30, 15, 123456, tzinfo=timezone.utc)
        assert decode_datetime(encode_datetime(value)) == value

    def test_naive_taken_as_utc(self) -> None:
        assert decode_datetime("2024-05-01T12:00:00").tzinfo == timezone.utc

    def test_none(self) -> None:
        assert encode_datetime(None) is None
        assert decode_datetime(None) is None


class TestTreeCodec:
    def test_flat_layout(self, build_tree) -> None:
        tree = build_tree("e2e4 e7e5", "d2d4")
        data = tree_to_dict(tree)
        assert data["roots"] == list(tree.root_ids)
        assert [n["san"] for n in data["nodes"]] == ["e4", "e5", "d4"]
        assert "comment" not in data["nodes"][0]

    def test_rebuild(self, build_tree) -> None:
        tree = build_tree("e2e4 e7e5", "e2e4 c7c5", "d2d4")
        assert tree_from_dict(tree_to_dict(tree)) == tree

    def test_malformed(self) -> None:
        with pytest.raises(ValueError):
            tree_from_dict({"roots": ["missing"], "nodes": []})

    def test_empty(self) -> None:
        assert tree_from_dict({}).is_empty


class TestStudyCodec:
    def test_round_trip(self, build_tree, find_path) -> None:
        study = _annotated_study(build_tree, find_path)
        assert study_from_dict(study_to_dict(study)) == study

    def test_color_stored_by_name(self, build_tree, find_path) -> None:
        data = study_to_dict(_annotated_study(build_tree, find_path))
        assert data["color"] == "black"

    def test_missing_optional_fields(self) -> None:
        study = study_from_dict({"id": "s1", "name": "Bare"})
        assert study.color == Side.WHITE
        assert study.moves.is_empty
        assert study.practice_start_node_id is None
