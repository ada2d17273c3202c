"""Mistake ledger with spaced-repetition scheduling.

A mistake is keyed by ``(study_id, node_id)``.  Recording a mistake makes
it due immediately; every clean answer pushes the next review further
along the interval ladder.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from repertoire.core.study import utc_now
from repertoire.storage.codec import decode_datetime, encode_datetime
from repertoire.storage.interfaces import IKeyValueStore

if TYPE_CHECKING:
    from repertoire.settings import TrainerSettings

_LOGGER = logging.getLogger(__name__)

MISTAKES_PREFIX = "mistakes:"

# Review ladder in hours, indexed by streak
DEFAULT_INTERVAL_HOURS: tuple[float, ...] = (1, 4, 12, 24, 48, 96, 192, 384)

_MIN_WRONG_FACTOR = 0.25
_WRONG_PENALTY = 0.1


def review_interval(
    streak: int,
    wrong_attempts: int = 1,
    intervals: Sequence[float] = DEFAULT_INTERVAL_HOURS,
) -> timedelta:
    """Time until the next review.

    The ladder entry for *streak* (clamped to the last rung) is shortened
    by 10% for every wrong attempt beyond the first, down to a quarter.
    Non-decreasing in *streak* for a fixed *wrong_attempts*.
    """
    hours = intervals[min(max(streak, 0), len(intervals) - 1)]
    factor = max(_MIN_WRONG_FACTOR, 1.0 - _WRONG_PENALTY * (max(wrong_attempts, 1) - 1))
    return timedelta(hours=hours * factor)


@dataclass
class MistakeRecord:
    study_id: str
    node_id: str
    expected_uci: str
    wrong_attempts: int
    streak: int
    next_review_at: datetime
    last_practiced_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "study_id": self.study_id,
            "node_id": self.node_id,
            "expected_uci": self.expected_uci,
            "wrong_attempts": self.wrong_attempts,
            "streak": self.streak,
            "next_review_at": encode_datetime(self.next_review_at),
            "last_practiced_at": encode_datetime(self.last_practiced_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MistakeRecord:
        next_review = decode_datetime(data["next_review_at"])
        last_practiced = decode_datetime(data["last_practiced_at"])
        if next_review is None or last_practiced is None:
            raise ValueError("Mistake record without timestamps")
        return cls(
            study_id=data["study_id"],
            node_id=data["node_id"],
            expected_uci=data["expected_uci"],
            wrong_attempts=int(data["wrong_attempts"]),
            streak=int(data["streak"]),
            next_review_at=next_review,
            last_practiced_at=last_practiced,
        )


class MistakeLedger:
    """Persistent collection of :class:`MistakeRecord`, one list per study.

    *now* is injectable so scheduling can be tested without waiting.
    """

    def __init__(
        self,
        store: IKeyValueStore,
        now: Callable[[], datetime] = utc_now,
        intervals: Sequence[float] = DEFAULT_INTERVAL_HOURS,
    ) -> None:
        if not intervals:
            raise ValueError("Review ladder must not be empty")
        self._store = store
        self._now = now
        self._intervals = tuple(intervals)

    @classmethod
    def from_settings(
        cls,
        store: IKeyValueStore,
        settings: TrainerSettings,
        now: Callable[[], datetime] = utc_now,
    ) -> MistakeLedger:
        """Ledger scheduling reviews on the ladder configured in *settings*."""
        return cls(store, now=now, intervals=settings.review_intervals_hours)

    @property
    def intervals(self) -> tuple[float, ...]:
        return self._intervals

    # ── Commands ─────────────────────────────────────────────────────────

    def record_mistake(self, study_id: str, node_id: str, expected_uci: str) -> MistakeRecord:
        """Upsert a mistake: one more wrong attempt, streak lost, due now."""
        now = self._now()
        records = self._load(study_id)
        record = _find(records, node_id)
        if record is None:
            record = MistakeRecord(
                study_id=study_id,
                node_id=node_id,
                expected_uci=expected_uci,
                wrong_attempts=1,
                streak=0,
                next_review_at=now,
                last_practiced_at=now,
            )
            records.append(record)
        else:
            record.wrong_attempts += 1
            record.streak = 0
            record.next_review_at = now
            record.last_practiced_at = now
        self._save(study_id, records)
        _LOGGER.debug("Mistake at %s (%d wrong attempts)", node_id, record.wrong_attempts)
        return record

    def mark_correct(self, study_id: str, node_id: str) -> MistakeRecord | None:
        """Clean answer: extend the streak and push the review forward."""
        return self._answer(study_id, node_id, reset=False)

    def mark_correct_with_reset(self, study_id: str, node_id: str) -> MistakeRecord | None:
        """Answered after erring: streak back to zero, shortest interval."""
        return self._answer(study_id, node_id, reset=True)

    def clear_all_mistakes(self, study_id: str) -> None:
        self._store.delete(self._key(study_id))

    # ── Queries ──────────────────────────────────────────────────────────

    def get_mistakes_due_for_review(self, study_id: str) -> list[MistakeRecord]:
        """Records whose review time has come, earliest first."""
        now = self._now()
        due = [r for r in self._load(study_id) if r.next_review_at <= now]
        due.sort(key=lambda r: r.next_review_at)
        return due

    def get_all_mistakes(self, study_id: str) -> list[MistakeRecord]:
        return self._load(study_id)

    def count_due(self, study_id: str) -> int:
        return len(self.get_mistakes_due_for_review(study_id))

    # ── Internals ────────────────────────────────────────────────────────

    def _answer(self, study_id: str, node_id: str, *, reset: bool) -> MistakeRecord | None:
        records = self._load(study_id)
        record = _find(records, node_id)
        if record is None:
            return None
        now = self._now()
        record.streak = 0 if reset else record.streak + 1
        record.next_review_at = now + review_interval(
            record.streak, record.wrong_attempts, self._intervals
        )
        record.last_practiced_at = now
        self._save(study_id, records)
        return record

    def _load(self, study_id: str) -> list[MistakeRecord]:
        data = self._store.load(self._key(study_id))
        if not isinstance(data, list):
            return []
        records: list[MistakeRecord] = []
        for item in data:
            try:
                records.append(MistakeRecord.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                _LOGGER.warning("Dropping invalid mistake record in %s: %s", study_id, exc)
        return records

    def _save(self, study_id: str, records: list[MistakeRecord]) -> None:
        self._store.save(self._key(study_id), [r.to_dict() for r in records])

    @staticmethod
    def _key(study_id: str) -> str:
        return f"{MISTAKES_PREFIX}{study_id}"


def _find(records: list[MistakeRecord], node_id: str) -> MistakeRecord | None:
    return next((r for r in records if r.node_id == node_id), None)
