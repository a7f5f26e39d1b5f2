# file: src/services/storage.py

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol

from src.core.errors import ValidationError

_SAFE_KEY_RE = re.compile(r"^[A-Za-z0-9_.\-]+$")


class StorageBackend(Protocol):
    """
    Durable "key -> text blob" storage, the server-side stand-in for the
    browser's localStorage.

    read() returns None when the key has never been written.
    Implementations raise OSError on I/O failure; callers decide whether
    that is fatal.
    """

    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


def check_key(key: str) -> str:
    key = str(key or "").strip()
    if not key or not _SAFE_KEY_RE.match(key) or key.startswith("."):
        raise ValidationError(f"Invalid storage key: {key!r}")
    return key


class JsonFileStorage:
    """
    One file per key: <directory>/<key>.json

    Writes go to a temp file in the same directory and are moved into place,
    so a crash mid-write leaves the previous content intact.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _ensure_dir(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{check_key(key)}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as f:
            return f.read()

    def write(self, key: str, value: str) -> None:
        path = self._path(key)
        self._ensure_dir()
        fd, tmp_name = tempfile.mkstemp(dir=str(self.directory), prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def remove(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()


class MemoryStorage:
    """
    In-memory storage for tests and for sessions that must not touch disk.

    fail_reads / fail_writes make every read/write raise OSError.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0

    def read(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise OSError("storage read failed")
        return self.data.get(key)

    def write(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("storage write failed")
        self.writes += 1
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)
