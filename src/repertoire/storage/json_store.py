"""Directory of JSON files, one per key."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any
from urllib.parse import quote, unquote

from repertoire.storage.interfaces import IKeyValueStore

_LOGGER = logging.getLogger(__name__)
_SUFFIX = ".json"


class JsonFileStore(IKeyValueStore):
    """Stores each key as ``<directory>/<quoted key>.json``.

    Writes go through a temporary file and :func:`os.replace`, so a reader
    sees either the previous or the new value.  A file that cannot be
    decoded is reported and treated as missing.
    """

    __slots__ = ("_directory",)

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def save(self, key: str, value: Any) -> None:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(value, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, path)

    def load(self, key: str) -> Any | None:
        path = self._path_for(key)
        if not path.is_file():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            _LOGGER.warning("Unreadable store file %s: %s", path, exc)
            return None

    def delete(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)

    def keys(self, prefix: str = "") -> list[str]:
        if not self._directory.is_dir():
            return []
        found = (unquote(p.name[: -len(_SUFFIX)]) for p in self._directory.glob(f"*{_SUFFIX}"))
        return sorted(k for k in found if k.startswith(prefix))

    def _path_for(self, key: str) -> Path:
        return self._directory / f"{quote(key, safe='')}{_SUFFIX}"
