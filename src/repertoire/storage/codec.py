"""Conversion between domain objects and JSON-compatible dictionaries.

Trees are stored flat (``roots`` plus a ``nodes`` list) so that loading
can rebuild the arena with :meth:`MoveTree.from_nodes`, which rejects
malformed data with ``ValueError``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from repertoire.core.enums import Side
from repertoire.core.nodes import BoardShape, MoveNode
from repertoire.core.notation import STARTING_FEN
from repertoire.core.study import OpeningStudy
from repertoire.core.tree import MoveTree

# ── Datetimes ────────────────────────────────────────────────────────────


def encode_datetime(value: datetime | None) -> str | None:
    return None if value is None else value.isoformat()


def decode_datetime(value: str | None) -> datetime | None:
    """Parse an ISO timestamp; naive values are taken as UTC."""
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ── Nodes and trees ──────────────────────────────────────────────────────


def shape_to_dict(shape: BoardShape) -> dict[str, Any]:
    data: dict[str, Any] = {"orig": shape.orig, "brush": shape.brush}
    if shape.dest is not None:
        data["dest"] = shape.dest
    return data


def shape_from_dict(data: dict[str, Any]) -> BoardShape:
    return BoardShape(orig=data["orig"], dest=data.get("dest"), brush=data.get("brush", "green"))


def node_to_dict(node: MoveNode) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": node.id,
        "san": node.san,
        "uci": node.uci,
        "fen": node.fen,
        "children": list(node.children),
        "is_main_line": node.is_main_line,
    }
    if node.comment:
        data["comment"] = node.comment
    if node.nags:
        data["nags"] = list(node.nags)
    if node.shapes:
        data["shapes"] = [shape_to_dict(s) for s in node.shapes]
    return data


def node_from_dict(data: dict[str, Any]) -> MoveNode:
    return MoveNode(
        id=data["id"],
        san=data["san"],
        uci=data["uci"],
        fen=data["fen"],
        children=tuple(data.get("children", ())),
        is_main_line=bool(data.get("is_main_line", False)),
        comment=data.get("comment") or None,
        nags=tuple(data.get("nags", ())),
        shapes=tuple(shape_from_dict(s) for s in data.get("shapes", ())),
    )


def tree_to_dict(tree: MoveTree) -> dict[str, Any]:
    return {
        "roots": list(tree.root_ids),
        "nodes": [node_to_dict(n) for n in tree.iter_depth_first()],
    }


def tree_from_dict(data: dict[str, Any]) -> MoveTree:
    """Rebuild a tree; raises ``ValueError``/``KeyError`` on malformed data."""
    nodes = [node_from_dict(n) for n in data.get("nodes", ())]
    return MoveTree.from_nodes(nodes, data.get("roots", ()))


# ── Studies ──────────────────────────────────────────────────────────────


def study_to_dict(study: OpeningStudy) -> dict[str, Any]:
    return {
        "id": study.id,
        "name": study.name,
        "description": study.description,
        "color": str(study.color),
        "root_fen": study.root_fen,
        "moves": tree_to_dict(study.moves),
        "practice_start_node_id": study.practice_start_node_id,
        "created_at": encode_datetime(study.created_at),
        "updated_at": encode_datetime(study.updated_at),
    }


def study_from_dict(data: dict[str, Any]) -> OpeningStudy:
    moves = tree_from_dict(data.get("moves", {}))
    study = OpeningStudy(
        id=data["id"],
        name=data["name"],
        description=data.get("description"),
        color=Side.parse(data.get("color", "white")),
        root_fen=data.get("root_fen") or STARTING_FEN,
        moves=moves,
        practice_start_node_id=data.get("practice_start_node_id"),
    )
    created = decode_datetime(data.get("created_at"))
    updated = decode_datetime(data.get("updated_at"))
    if created is not None:
        study.created_at = created
    if updated is not None:
        study.updated_at = updated
    return study
