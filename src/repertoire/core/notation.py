"""UCI strings and NAG annotation codes."""

from __future__ import annotations

import re

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_UCI_RE = re.compile(r"^([a-h][1-8])([a-h][1-8])([qrbn])?$")

NAG_SYMBOLS: dict[str, str] = {
    "$1": "!",  # good move
    "$2": "?",  # poor move
    "$3": "!!",  # brilliant move
    "$4": "??",  # blunder
    "$5": "!?",  # interesting move
    "$6": "?!",  # dubious move
    "$10": "=",
    "$14": "+=",
    "$15": "=+",
    "$16": "±",
    "$17": "∓",
    "$18": "+-",
    "$19": "-+",
}

_SYMBOL_TO_NAG: dict[str, str] = {symbol: code for code, symbol in NAG_SYMBOLS.items()}


def make_uci(from_sq: str, to_sq: str, promotion: str | None = None) -> str:
    """Build a UCI move string, e.g. ``("e7", "e8", "q")`` → ``"e7e8q"``."""
    return f"{from_sq}{to_sq}{(promotion or '').lower()}"


def parse_uci(uci: str) -> tuple[str, str, str | None]:
    """Split a UCI string into ``(from, to, promotion)``."""
    match = _UCI_RE.match(uci)
    if match is None:
        raise ValueError(f"Invalid UCI move: {uci!r}")
    return match.group(1), match.group(2), match.group(3)


def normalize_nag(nag: str | int) -> str:
    """Normalise ``"!"``, ``"1"``, ``1`` or ``"$1"`` to the ``"$1"`` form."""
    if isinstance(nag, int):
        return f"${nag}"
    text = nag.strip()
    if text in _SYMBOL_TO_NAG:
        return _SYMBOL_TO_NAG[text]
    if text.startswith("$") and text[1:].isdigit():
        return f"${int(text[1:])}"
    if text.isdigit():
        return f"${int(text)}"
    raise ValueError(f"Invalid NAG: {nag!r}")


def nag_symbol(nag: str) -> str:
    """Display symbol for a NAG code (the code itself when unknown)."""
    return NAG_SYMBOLS.get(normalize_nag(nag), nag)


def nag_number(nag: str) -> int:
    """Numeric value of a NAG code, as used in PGN movetext."""
    return int(normalize_nag(nag)[1:])
