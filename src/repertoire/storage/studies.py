"""Opening-study persistence."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from repertoire.core.study import OpeningStudy, utc_now
from repertoire.storage.codec import study_from_dict, study_to_dict
from repertoire.storage.interfaces import IKeyValueStore

_LOGGER = logging.getLogger(__name__)

STUDY_PREFIX = "study:"


class StudyValidationError(ValueError):
    """A study cannot be saved as it stands."""


def validate_study(study: OpeningStudy) -> None:
    """Raise :class:`StudyValidationError` for a study that must not be saved."""
    if not study.name or not study.name.strip():
        raise StudyValidationError("Please enter a name for the opening study")
    marker = study.practice_start_node_id
    if marker is not None and marker not in study.moves:
        raise StudyValidationError(f"Practice start node {marker!r} is not in the tree")


class StudyRepository:
    """CRUD for :class:`OpeningStudy` under ``study:<id>`` keys."""

    def __init__(
        self,
        store: IKeyValueStore,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._now = now

    def save(self, study: OpeningStudy) -> OpeningStudy:
        """Validate, trim text fields, bump ``updated_at`` and persist.

        Nothing is written when validation fails.
        """
        validate_study(study)
        description = (study.description or "").strip() or None
        saved = replace(
            study,
            name=study.name.strip(),
            description=description,
            updated_at=self._now(),
        )
        self._store.save(self._key(saved.id), study_to_dict(saved))
        _LOGGER.info("Saved study %r (%d moves)", saved.name, len(saved.moves))
        return saved

    def load(self, study_id: str) -> OpeningStudy | None:
        data = self._store.load(self._key(study_id))
        if not isinstance(data, dict):
            return None
        try:
            return study_from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            _LOGGER.warning("Cannot load study %s: %s", study_id, exc)
            return None

    def list_studies(self) -> list[OpeningStudy]:
        """All readable studies, most recently updated first."""
        studies: list[OpeningStudy] = []
        for key in self._store.keys(STUDY_PREFIX):
            study = self.load(key[len(STUDY_PREFIX):])
            if study is not None:
                studies.append(study)
        studies.sort(key=lambda s: s.updated_at, reverse=True)
        return studies

    def delete(self, study_id: str) -> None:
        self._store.delete(self._key(study_id))

    @staticmethod
    def _key(study_id: str) -> str:
        return f"{STUDY_PREFIX}{study_id}"
