"""Move node value objects."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field


def new_node_id() -> str:
    """Generate a fresh opaque node identifier."""
    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class BoardShape:
    """Board overlay persisted with a position: a circle or an arrow."""

    orig: str
    dest: str | None = None
    brush: str = "green"

    @property
    def is_arrow(self) -> bool:
        return self.dest is not None and self.dest != self.orig


@dataclass(frozen=True, slots=True)
class MoveNode:
    """One ply in the repertoire.

    ``children`` holds child node ids in the order the moves were first
    played; the nodes themselves live in the owning :class:`MoveTree`.
    """

    san: str
    uci: str
    fen: str
    id: str = field(default_factory=new_node_id)
    children: tuple[str, ...] = ()
    is_main_line: bool = False
    comment: str | None = None
    nags: tuple[str, ...] = ()
    shapes: tuple[BoardShape, ...] = ()

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def from_square(self) -> str:
        return self.uci[:2]

    @property
    def to_square(self) -> str:
        return self.uci[2:4]
