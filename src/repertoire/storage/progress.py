"""Per-study practice progress."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from repertoire.core.study import utc_now
from repertoire.storage.codec import decode_datetime, encode_datetime
from repertoire.storage.interfaces import IKeyValueStore

_LOGGER = logging.getLogger(__name__)

PROGRESS_PREFIX = "progress:"


@dataclass
class PracticeProgress:
    """Where a practice run over one study stands."""

    study_id: str
    completed_lines: set[int] = field(default_factory=set)
    skipped_lines: set[int] = field(default_factory=set)
    current_line_index: int = 0
    total_attempts: int = 0
    wrong_attempts: int = 0
    last_practiced_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "study_id": self.study_id,
            "completed_lines": sorted(self.completed_lines),
            "skipped_lines": sorted(self.skipped_lines),
            "current_line_index": self.current_line_index,
            "total_attempts": self.total_attempts,
            "wrong_attempts": self.wrong_attempts,
            "last_practiced_at": encode_datetime(self.last_practiced_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PracticeProgress:
        return cls(
            study_id=data["study_id"],
            completed_lines={int(i) for i in data.get("completed_lines", ())},
            skipped_lines={int(i) for i in data.get("skipped_lines", ())},
            current_line_index=int(data.get("current_line_index", 0)),
            total_attempts=int(data.get("total_attempts", 0)),
            wrong_attempts=int(data.get("wrong_attempts", 0)),
            last_practiced_at=decode_datetime(data.get("last_practiced_at")),
        )


class ProgressRepository:
    """Loads and saves :class:`PracticeProgress` under ``progress:<study id>``."""

    def __init__(
        self,
        store: IKeyValueStore,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._now = now

    def load(self, study_id: str) -> PracticeProgress:
        """Stored progress, or a fresh record when none is usable."""
        data = self._store.load(self._key(study_id))
        if not isinstance(data, dict):
            return PracticeProgress(study_id=study_id)
        try:
            return PracticeProgress.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            _LOGGER.warning("Discarding invalid progress for %s: %s", study_id, exc)
            return PracticeProgress(study_id=study_id)

    def save(self, progress: PracticeProgress) -> PracticeProgress:
        """Persist *progress* stamped with the current time; returns the stamped copy."""
        stamped = replace(progress, last_practiced_at=self._now())
        self._store.save(self._key(progress.study_id), stamped.to_dict())
        return stamped

    def clear(self, study_id: str) -> None:
        self._store.delete(self._key(study_id))

    @staticmethod
    def _key(study_id: str) -> str:
        return f"{PROGRESS_PREFIX}{study_id}"
