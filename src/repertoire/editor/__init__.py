"""Repertoire editor — tree editing with navigation and undo/redo."""

from repertoire.editor.session import HISTORY_LIMIT, EditorEvents, EditorSession

__all__ = [
    "HISTORY_LIMIT",
    "EditorEvents",
    "EditorSession",
]
