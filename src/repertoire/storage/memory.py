"""In-process key-value store."""

from __future__ import annotations

import copy
from typing import Any

from repertoire.storage.interfaces import IKeyValueStore


class MemoryStore(IKeyValueStore):
    """Dictionary-backed store; values are deep-copied in and out."""

    __slots__ = ("_data",)

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def save(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def load(self, key: str) -> Any | None:
        if key not in self._data:
            return None
        return copy.deepcopy(self._data[key])

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._data if k.startswith(prefix))
