"""Abstract board-state interface.

Practice sessions depend on this ABC, not on a concrete rules library;
the repertoire core never reimplements chess legality.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from repertoire.core.enums import Side


@dataclass(frozen=True, slots=True)
class MoveOutcome:
    """Result of applying a legal move to the board."""

    uci: str
    san: str
    fen: str
    is_capture: bool = False
    is_castle: bool = False
    is_promotion: bool = False
    is_check: bool = False
    is_checkmate: bool = False

    @property
    def squares(self) -> tuple[str, str]:
        return self.uci[:2], self.uci[2:4]


class IBoard(ABC):
    """Rules oracle for one position and the moves played from it."""

    @property
    @abstractmethod
    def fen(self) -> str: ...

    @property
    @abstractmethod
    def turn(self) -> Side: ...

    @abstractmethod
    def is_check(self) -> bool: ...

    @abstractmethod
    def is_checkmate(self) -> bool: ...

    @abstractmethod
    def is_legal(self, uci: str) -> bool:
        """Is *uci* a legal move in the current position?"""

    @abstractmethod
    def legal_dests(self) -> dict[str, list[str]]:
        """Legal destination squares keyed by origin square."""

    @abstractmethod
    def needs_promotion(self, from_sq: str, to_sq: str) -> bool:
        """Would moving *from_sq* → *to_sq* require a promotion piece?"""

    @abstractmethod
    def push_uci(self, uci: str) -> MoveOutcome | None:
        """Apply *uci* if legal; return ``None`` (board unchanged) otherwise."""


BoardFactory = Callable[[str], IBoard]
