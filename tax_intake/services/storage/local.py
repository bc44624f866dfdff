"""
Local Session Stores

The session record has to survive restarts of the desktop app, so the
default store is a small JSON file in the user's home directory. The
in-memory store is for tests and for embedding in a host that keeps its
own persistence.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from tax_intake.config import get_settings
from tax_intake.services.storage.interface import SessionStoreInterface, StorageError


class JsonFileSessionStore(SessionStoreInterface):
    """
    Key-value store backed by a single JSON object on disk.

    Writes go to a temp file that is then renamed over the original, so a
    crash mid-write never leaves a truncated file behind.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path or get_settings().session.storage_path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except ValueError as e:
            raise StorageError(f"Session file is corrupt: {self._path}: {e}")
        except OSError as e:
            raise StorageError(f"Could not read session file {self._path}: {e}")

        if not isinstance(data, dict):
            raise StorageError(f"Session file is corrupt: {self._path}")
        return data

    def _write_all(self, data: dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
            )
        except OSError as e:
            raise StorageError(f"Could not write session file {self._path}: {e}")

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp_name, self._path)
        except (OSError, TypeError, ValueError) as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Could not write session file {self._path}: {e}")

    def get(self, key: str) -> Optional[dict[str, Any]]:
        value = self._read_all().get(key)
        return value if isinstance(value, dict) else None

    def set(self, key: str, value: dict[str, Any]) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def clear(self, key: str) -> None:
        """
        Remove key. A corrupt file holds nothing worth keeping, so it is
        replaced with an empty object instead of raising.
        """
        try:
            data = self._read_all()
        except StorageError:
            if not self._path.is_file():
                raise
            self._write_all({})
            return
        if key in data:
            del data[key]
            self._write_all(data)


class InMemorySessionStore(SessionStoreInterface):
    """Dict-backed store. Values are copied in and out."""

    def __init__(self, initial: Optional[dict[str, dict[str, Any]]] = None):
        self._data: dict[str, dict[str, Any]] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Optional[dict[str, Any]]:
        value = self._data.get(key)
        return json.loads(json.dumps(value)) if value is not None else None

    def set(self, key: str, value: dict[str, Any]) -> None:
        self._data[key] = json.loads(json.dumps(value))

    def clear(self, key: str) -> None:
        self._data.pop(key, None)
