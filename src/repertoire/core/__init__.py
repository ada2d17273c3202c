"""Core domain layer — move tree, paths, lines and notation helpers.

Quick start::

    from repertoire.core import MoveNode, MoveTree, extract_all_lines, STARTING_FEN

    tree = MoveTree().add_move((), MoveNode(san="e4", uci="e2e4", fen=...))
    for line in extract_all_lines(tree, STARTING_FEN):
        print(line.ucis)
"""

from repertoire.core.enums import HintLevel, MoveResult, MoveSound, PracticeStatus, Side
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
from repertoire.core.nodes import BoardShape, MoveNode, new_node_id
from repertoire.core.notation import (
    NAG_SYMBOLS,
    STARTING_FEN,
    make_uci,
    nag_symbol,
    normalize_nag,
    parse_uci,
)
from repertoire.core.paths import (
    fen_at_path,
    find_child_by_move,
    get_node_at_path,
    line_to_node,
    resolve_path,
)
from repertoire.core.study import OpeningStudy
from repertoire.core.tree import MoveTree

__all__ = [
    # Enums
    "HintLevel",
    "MoveResult",
    "MoveSound",
    "PracticeStatus",
    "Side",
    # Domain objects
    "BoardShape",
    "Line",
    "MoveNode",
    "MoveTree",
    "OpeningStudy",
    "new_node_id",
    # Paths
    "fen_at_path",
    "find_child_by_move",
    "get_node_at_path",
    "line_to_node",
    "resolve_path",
    # Lines
    "extract_all_lines",
    "extract_lines_with_start_marker",
    "extract_study_lines",
    "filter_lines_by_nodes",
    "shuffled_order",
    "side_to_move",
    "user_move_count",
    # Notation
    "NAG_SYMBOLS",
    "STARTING_FEN",
    "make_uci",
    "nag_symbol",
    "normalize_nag",
    "parse_uci",
]
