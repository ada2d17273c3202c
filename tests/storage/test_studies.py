"""Tests for StudyRepository and study validation."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from repertoire.core.study import OpeningStudy
from repertoire.storage.memory import MemoryStore
from repertoire.storage.studies import (
    STUDY_PREFIX,
    StudyRepository,
    StudyValidationError,
    validate_study,
)


class _Ticker:
    """Clock that moves one minute per call."""

    def __init__(self) -> None:
        self.value = datetime(2024, 2, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.value += timedelta(minutes=1)
        return self.value


def _make_repo() -> tuple[StudyRepository, MemoryStore]:
    store = MemoryStore()
    return StudyRepository(store, now=_Ticker()), store


class TestValidateStudy:
    @pytest.mark.parametrize("name", ["", "   "])
    def test_name_required(self, name: str) -> None:
        with pytest.raises(StudyValidationError, match="Please enter a name"):
            validate_study(OpeningStudy(name=name))

    def test_dangling_marker(self, build_tree) -> None:
        study = OpeningStudy(name="x", moves=build_tree("e2e4"), practice_start_node_id="gone")
        with pytest.raises(StudyValidationError):
            validate_study(study)

    def test_valid(self, build_tree) -> None:
        validate_study(OpeningStudy(name="Italian", moves=build_tree("e2e4 e7e5")))


class TestStudyRepository:
    def test_save_and_load(self, build_tree) -> None:
        repo, _ = _make_repo()
        study = OpeningStudy(name="  Italian  ", moves=build_tree("e2e4 e7e5"), description=" ")
        saved = repo.save(study)

        assert saved.name == "Italian"
        assert saved.description is None
        assert saved.updated_at == datetime(2024, 2, 1, 0, 1, tzinfo=timezone.utc)
        assert repo.load(study.id) == saved

    def test_invalid_study_not_written(self) -> None:
        repo, store = _make_repo()
        with pytest.raises(StudyValidationError):
            repo.save(OpeningStudy(name=""))
        assert store.keys() == []

    def test_missing_and_corrupt(self) -> None:
        repo, store = _make_repo()
        assert repo.load("nope") is None
        store.save(f"{STUDY_PREFIX}bad", {"name": "no id"})
        assert repo.load("bad") is None

    def test_list_most_recent_first(self) -> None:
        repo, _ = _make_repo()
        older = repo.save(OpeningStudy(name="Older"))
        repo.save(OpeningStudy(name="Newer"))
        repo.save(older)
        assert [s.name for s in repo.list_studies()] == ["Older", "Newer"]

    def test_list_skips_unreadable(self) -> None:
        repo, store = _make_repo()
        repo.save(OpeningStudy(name="Good"))
        store.save(f"{STUDY_PREFIX}bad", "garbage")
        assert [s.name for s in repo.list_studies()] == ["Good"]

    def test_delete(self) -> None:
        repo, _ = _make_repo()
        saved = repo.save(OpeningStudy(name="Gone soon"))
        repo.delete(saved.id)
        assert repo.load(saved.id) is None
        assert repo.list_studies() == []
