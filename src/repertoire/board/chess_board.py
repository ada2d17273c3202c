"""python-chess backed implementation of :class:`IBoard`."""

from __future__ import annotations

import chess

from repertoire.board.interfaces import IBoard, MoveOutcome
from repertoire.core.enums import Side


class ChessBoard(IBoard):
    """Board state delegated to :class:`chess.Board`.

    Null moves are never accepted.
    """

    __slots__ = ("_board",)

    def __init__(self, fen: str = chess.STARTING_FEN) -> None:
        self._board = chess.Board(fen)

    @property
    def fen(self) -> str:
        return self._board.fen()

    @property
    def turn(self) -> Side:
        return Side.WHITE if self._board.turn == chess.WHITE else Side.BLACK

    def is_check(self) -> bool:
        return self._board.is_check()

    def is_checkmate(self) -> bool:
        return self._board.is_checkmate()

    def is_legal(self, uci: str) -> bool:
        return self._parse(uci) is not None

    def legal_dests(self) -> dict[str, list[str]]:
        dests: dict[str, list[str]] = {}
        for move in self._board.legal_moves:
            targets = dests.setdefault(chess.square_name(move.from_square), [])
            to_name = chess.square_name(move.to_square)
            if to_name not in targets:
                targets.append(to_name)
        return dests

    def needs_promotion(self, from_sq: str, to_sq: str) -> bool:
        try:
            origin = chess.parse_square(from_sq)
        except ValueError:
            return False
        piece = self._board.piece_at(origin)
        if piece is None or piece.piece_type != chess.PAWN:
            return False
        return to_sq[1:] == ("8" if piece.color == chess.WHITE else "1")

    def push_uci(self, uci: str) -> MoveOutcome | None:
        move = self._parse(uci)
        if move is None:
            return None
        san = self._board.san(move)
        is_capture = self._board.is_capture(move)
        is_castle = self._board.is_castling(move)
        self._board.push(move)
        return MoveOutcome(
            uci=move.uci(),
            san=san,
            fen=self._board.fen(),
            is_capture=is_capture,
            is_castle=is_castle,
            is_promotion=move.promotion is not None,
            is_check=self._board.is_check(),
            is_checkmate=self._board.is_checkmate(),
        )

    def _parse(self, uci: str) -> chess.Move | None:
        try:
            move = chess.Move.from_uci(uci)
        except ValueError:
            return None
        if not move or move not in self._board.legal_moves:
            return None
        return move
