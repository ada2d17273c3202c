"""Tests for EditorSession — building a repertoire move by move."""

from __future__ import annotations

import pytest

from repertoire.core.enums import MoveSound, Side
from repertoire.core.nodes import BoardShape
from repertoire.core.notation import STARTING_FEN
from repertoire.core.study import OpeningStudy
from repertoire.editor.session import HISTORY_LIMIT, EditorSession
from repertoire.practice.feedback import RecordingFeedback
from repertoire.storage.memory import MemoryStore
from repertoire.storage.studies import StudyRepository, StudyValidationError


def _play(editor: EditorSession, *ucis: str) -> None:
    """Helper: play UCI moves from the current position."""
    for uci in ucis:
        assert editor.play_move(uci[:2], uci[2:4], uci[4:] or None) is not None


class TestPlayMove:
    def test_new_moves_extend_tree(self) -> None:
        editor = EditorSession(OpeningStudy(name="Italian"))
        _play(editor, "e2e4", "e7e5")
        assert len(editor.moves) == 2
        assert editor.current_node.san == "e5"
        assert editor.current_node.is_main_line
        assert editor.turn == Side.WHITE
        assert editor.last_move == ("e7", "e5")

    def test_alternative_becomes_variation(self) -> None:
        editor = EditorSession()
        _play(editor, "e2e4", "e7e5")
        editor.go_back()
        _play(editor, "c7c5")
        assert not editor.current_node.is_main_line
        editor.go_back()
        assert [n.san for n in editor.repertoire_moves] == ["e5", "c5"]

    def test_existing_move_is_navigated(self) -> None:
        editor = EditorSession()
        _play(editor, "e2e4", "e7e5")
        editor.go_to_start()
        size = editor.history_size
        node = editor.play_move("e2", "e4")
        assert node is editor.moves.root_nodes[0]
        assert editor.history_size == size
        assert len(editor.moves) == 2

    def test_illegal_move(self) -> None:
        editor = EditorSession()
        assert editor.play_move("e2", "e5") is None
        assert editor.moves.is_empty
        assert editor.fen == STARTING_FEN

    def test_feedback(self) -> None:
        feedback = RecordingFeedback()
        editor = EditorSession(feedback=feedback)
        _play(editor, "e2e4", "d7d5", "e4d5")
        assert feedback.sounds == [MoveSound.MOVE, MoveSound.MOVE, MoveSound.CAPTURE]

    def test_promotion(self) -> None:
        study = OpeningStudy(name="Endgame", root_fen="8/4P3/8/8/8/8/k7/7K w - - 0 1")
        editor = EditorSession(study)
        assert editor.needs_promotion("e7", "e8")
        node = editor.play_move("e7", "e8", "q")
        assert node.uci == "e7e8q"


class TestNavigation:
    def test_back_forward_follow_main_line(self) -> None:
        editor = EditorSession()
        _play(editor, "e2e4", "e7e5")
        editor.go_back()
        _play(editor, "c7c5")
        editor.go_to_start()
        assert editor.current_node is None
        assert not editor.go_back()
        assert editor.go_forward()
        assert editor.go_forward()
        assert editor.current_node.san == "e5"
        assert not editor.go_forward()

    def test_go_to_end(self) -> None:
        editor = EditorSession()
        _play(editor, "e2e4", "e7e5", "g1f3")
        editor.go_to_start()
        editor.go_to_end()
        assert editor.current_node.san == "Nf3"

    def test_go_to_node(self) -> None:
        editor = EditorSession()
        _play(editor, "e2e4", "e7e5")
        e4 = editor.moves.root_ids[0]
        assert editor.go_to_node(e4)
        assert editor.current_path == (e4,)
        assert editor.fen == editor.moves.node(e4).fen
        assert not editor.go_to_node("missing")

    def test_legal_dests_follow_position(self) -> None:
        editor = EditorSession()
        _play(editor, "e2e4")
        assert "e7" in editor.legal_dests()
        assert "e2" not in editor.legal_dests()


class TestEdits:
    def test_delete_falls_back_to_parent(self) -> None:
        editor = EditorSession()
        _play(editor, "e2e4", "e7e5", "g1f3")
        editor.go_back()
        assert editor.delete_current()
        assert editor.current_node.san == "e4"
        assert len(editor.moves) == 1

    def test_delete_at_root(self) -> None:
        editor = EditorSession()
        assert not editor.delete_current()

    def test_promote(self) -> None:
        editor = EditorSession()
        _play(editor, "e2e4", "e7e5")
        editor.go_back()
        _play(editor, "c7c5")
        assert editor.promote_current()
        assert editor.current_node.is_main_line
        assert not editor.promote_current()
        assert [n.san for n in editor.moves.main_line()] == ["e4", "c5"]

    def test_comment_nag_shapes(self) -> None:
        editor = EditorSession()
        _play(editor, "e2e4")
        editor.set_comment("Best by test")
        editor.toggle_nag("!")
        editor.toggle_nag("$5")
        editor.set_shapes([BoardShape("e2", "e4")])
        node = editor.current_node
        assert node.comment == "Best by test"
        assert node.nags == ("$1", "$5")
        assert node.shapes == (BoardShape("e2", "e4"),)

        editor.toggle_nag("1")
        assert editor.current_node.nags == ("$5",)

    def test_edits_need_selection(self) -> None:
        editor = EditorSession()
        assert not editor.set_comment("x")
        assert not editor.toggle_nag("!")
        assert not editor.set_shapes([])
        assert not editor.promote_current()


class TestPracticeStart:
    def test_only_on_linear_trunk(self) -> None:
        editor = EditorSession()
        _play(editor, "e2e4", "e7e5")
        editor.go_back()
        _play(editor, "c7c5")
        assert not editor.set_practice_start()
        editor.go_back()
        assert editor.set_practice_start()
        assert editor.practice_start_node_id == editor.moves.root_ids[0]

    def test_marker_dropped_with_node(self) -> None:
        editor = EditorSession()
        _play(editor, "e2e4", "e7e5")
        assert editor.set_practice_start()
        editor.delete_current()
        assert editor.practice_start_node_id is None

    def test_clear(self) -> None:
        editor = EditorSession()
        _play(editor, "e2e4")
        assert not editor.clear_practice_start()
        editor.set_practice_start()
        assert editor.clear_practice_start()
        assert editor.practice_start_node_id is None

    def test_explicit_node(self) -> None:
        editor = EditorSession()
        _play(editor, "e2e4", "e7e5")
        e4 = editor.moves.root_ids[0]
        assert editor.set_practice_start(e4)
        assert not editor.set_practice_start("missing")


class TestHistory:
    def test_undo_redo(self) -> None:
        editor = EditorSession()
        assert not editor.can_undo
        _play(editor, "e2e4", "e7e5")

        assert editor.undo()
        assert len(editor.moves) == 1
        assert editor.current_node.san == "e4"
        assert editor.can_redo

        assert editor.redo()
        assert len(editor.moves) == 2
        assert not editor.redo()

    def test_new_edit_truncates_redo(self) -> None:
        editor = EditorSession()
        _play(editor, "e2e4", "e7e5")
        editor.undo()
        _play(editor, "c7c5")
        assert not editor.can_redo
        assert [n.san for n in editor.repertoire_moves] == []
        editor.go_back()
        assert [n.san for n in editor.repertoire_moves] == ["c5"]

    def test_history_capped(self) -> None:
        editor = EditorSession()
        _play(editor, "e2e4")
        for i in range(HISTORY_LIMIT + 10):
            editor.set_comment(f"note {i}")
        assert editor.history_size == HISTORY_LIMIT
        undone = 0
        while editor.undo():
            undone += 1
        assert undone == HISTORY_LIMIT - 1
        assert editor.current_node.comment == "note 10"

    def test_undo_restores_deleted_subtree(self) -> None:
        editor = EditorSession()
        _play(editor, "e2e4", "e7e5", "g1f3")
        editor.go_to_node(editor.moves.root_ids[0])
        editor.delete_current()
        assert editor.moves.is_empty
        editor.undo()
        assert [n.san for n in editor.moves.main_line()] == ["e4", "e5", "Nf3"]

    def test_changed_event(self) -> None:
        editor = EditorSession()
        changes: list[int] = []
        editor.events.on_changed.append(lambda: changes.append(1))
        _play(editor, "e2e4")
        editor.undo()
        assert len(changes) >= 2


class TestPgnAndSave:
    def test_import(self) -> None:
        editor = EditorSession()
        _play(editor, "d2d4")
        assert editor.import_pgn("1. e4 e5 (1... c5) 2. Nf3 *")
        assert [n.san for n in editor.moves.main_line()] == ["e4", "e5", "Nf3"]
        assert editor.current_path == ()
        assert editor.undo()
        assert editor.moves.root_nodes[0].san == "d4"

    def test_import_nothing(self) -> None:
        editor = EditorSession()
        assert not editor.import_pgn("")
        assert not editor.can_undo

    def test_export(self) -> None:
        editor = EditorSession(OpeningStudy(name="Italian"))
        _play(editor, "e2e4", "e7e5")
        text = editor.export_pgn()
        assert '[Event "Italian"]' in text
        assert "1. e4 e5" in text

    def test_build_study_requires_name(self) -> None:
        editor = EditorSession()
        _play(editor, "e2e4")
        with pytest.raises(StudyValidationError):
            editor.build_study()

    def test_build_study(self) -> None:
        base = OpeningStudy(name="Old", color=Side.WHITE)
        editor = EditorSession(base)
        editor.name = "  Caro-Kann  "
        editor.description = "Main lines"
        editor.color = Side.BLACK
        _play(editor, "e2e4", "c7c6")
        editor.go_back()
        editor.set_practice_start()

        study = editor.build_study()

        assert study.id == base.id
        assert study.name == "Caro-Kann"
        assert study.color == Side.BLACK
        assert len(study.moves) == 2
        assert study.practice_start_node_id == study.moves.root_ids[0]

    def test_save(self) -> None:
        repo = StudyRepository(MemoryStore())
        editor = EditorSession(OpeningStudy(name="Italian"))
        _play(editor, "e2e4")
        saved = editor.save(repo)
        assert repo.load(saved.id) == saved
