"""Board-state collaborator: the rules oracle used by practice sessions."""

from repertoire.board.chess_board import ChessBoard
from repertoire.board.interfaces import BoardFactory, IBoard, MoveOutcome

__all__ = [
    "BoardFactory",
    "ChessBoard",
    "IBoard",
    "MoveOutcome",
]
