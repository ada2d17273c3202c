"""Persistence — key-value stores, codecs and repositories."""

from repertoire.storage.interfaces import IKeyValueStore
from repertoire.storage.json_store import JsonFileStore
from repertoire.storage.memory import MemoryStore
from repertoire.storage.mistakes import (
    DEFAULT_INTERVAL_HOURS,
    MistakeLedger,
    MistakeRecord,
    review_interval,
)
from repertoire.storage.progress import PracticeProgress, ProgressRepository
from repertoire.storage.studies import StudyRepository, StudyValidationError, validate_study

__all__ = [
    # Stores
    "IKeyValueStore",
    "JsonFileStore",
    "MemoryStore",
    # Mistakes
    "DEFAULT_INTERVAL_HOURS",
    "MistakeLedger",
    "MistakeRecord",
    "review_interval",
    # Progress
    "PracticeProgress",
    "ProgressRepository",
    # Studies
    "StudyRepository",
    "StudyValidationError",
    "validate_study",
]
