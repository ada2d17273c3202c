"""Core enumerations for the repertoire domain."""

from __future__ import annotations

from enum import IntEnum, StrEnum


class Side(IntEnum):
    """Side color."""

    WHITE = 0
    BLACK = 1

    @property
    def opposite(self) -> Side:
        return Side(1 - self.value)

    @classmethod
    def parse(cls, name: str) -> Side:
        """Parse ``"white"``/``"black"`` (also ``"w"``/``"b"``)."""
        key = name.strip().lower()
        if key in ("white", "w"):
            return cls.WHITE
        if key in ("black", "b"):
            return cls.BLACK
        raise ValueError(f"Invalid side name: {name!r}")

    def __str__(self) -> str:
        return self.name.lower()


class HintLevel(IntEnum):
    """How much of the expected move is revealed."""

    NONE = 0
    PIECE = 1  # highlight the piece to move
    DESTINATION = 2  # highlight origin and destination squares
    ARROW = 3  # full move arrow


class PracticeStatus(StrEnum):
    """Finite-state-machine states of a practice line."""

    PLAYING = "playing"
    LINE_COMPLETE = "line-complete"


class MoveResult(StrEnum):
    """Outcome of a user move attempt."""

    CORRECT = "correct"
    WRONG = "wrong"
    IGNORED = "ignored"  # nothing to answer right now


class MoveSound(StrEnum):
    """Feedback classification handed to a sound/visual sink."""

    MOVE = "move"
    CAPTURE = "capture"
    CASTLE = "castle"
    CHECK = "check"
    PROMOTE = "promote"
    CORRECT = "correct"
    WRONG = "wrong"
