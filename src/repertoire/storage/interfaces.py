"""Abstract key-value store used for studies, progress and mistakes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IKeyValueStore(ABC):
    """Persistent mapping of string keys to JSON-compatible values.

    A missing key is a normal outcome: :meth:`load` returns ``None`` and
    :meth:`delete` does nothing.
    """

    @abstractmethod
    def save(self, key: str, value: Any) -> None: ...

    @abstractmethod
    def load(self, key: str) -> Any | None: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...

    @abstractmethod
    def keys(self, prefix: str = "") -> list[str]:
        """Stored keys starting with *prefix*, sorted."""
