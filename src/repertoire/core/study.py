"""OpeningStudy — the aggregate root of a repertoire."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from repertoire.core.enums import Side
from repertoire.core.nodes import new_node_id
from repertoire.core.notation import STARTING_FEN
from repertoire.core.tree import MoveTree


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class OpeningStudy:
    """A named repertoire rehearsed from one side.

    ``practice_start_node_id`` optionally marks the node after which real
    practice begins; the moves up to it form a fixed setup line.
    """

    name: str
    color: Side = Side.WHITE
    moves: MoveTree = field(default_factory=MoveTree)
    id: str = field(default_factory=new_node_id)
    description: str | None = None
    root_fen: str = STARTING_FEN
    practice_start_node_id: str | None = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def with_moves(self, moves: MoveTree) -> OpeningStudy:
        """Whole-tree replacement; a start marker that no longer resolves is dropped."""
        marker = self.practice_start_node_id
        if marker is not None and marker not in moves:
            marker = None
        return replace(self, moves=moves, practice_start_node_id=marker)

    @property
    def entry_node_id(self) -> str | None:
        """The start marker, if it still points into the tree."""
        marker = self.practice_start_node_id
        if marker is not None and marker in self.moves:
            return marker
        return None
