"""
Module: importer.storage

Purpose:
    Key-value store capability used for the small amount of state that
    survives a session (the recent-files history). The pipeline never talks
    to a concrete backend; it is handed a KeyValueStore.

Key Classes:
    - KeyValueStore: Protocol (get / put)
    - StoreError: Raised by every backend on failure
    - MemoryStore: In-process backend
    - FileStore: One JSON file per key in a directory, atomic locked writes

Dependencies:
    - portalocker: Cross-process locking of FileStore entries
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Generator, Optional, Protocol, runtime_checkable

import portalocker

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class StoreError(Exception):
    """Raised when a key-value store cannot be read or written."""

    def __init__(self, message: str, key: str = ""):
        super().__init__(message)
        self.key = key


@runtime_checkable
class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[bytes]:
        """Return the stored bytes, or None if the key is absent. Raises StoreError."""
        ...

    def put(self, key: str, value: bytes) -> None:
        """Store bytes under key. Raises StoreError."""
        ...


class MemoryStore:
    """Dict-backed store, used for tests and sessions that persist nothing."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None) -> None:
        self._data: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def put(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)


class FileStore:
    """
    Directory-backed store: key "k" lives in "<root>/k.json".

    Writes go to a temp file first and are then renamed over the target,
    so an interrupted write never leaves a truncated file behind. Every
    access holds a portalocker lock on "<root>/k.lock", so two application
    instances sharing a directory never interleave a read with a write.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path_for(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise StoreError(f"Invalid store key: {key!r}", key=key)
        return self.root / f"{key}.json"

    @contextmanager
    def _locked(self, key: str, lock_type: int) -> Generator[None, None, None]:
        self.root.mkdir(parents=True, exist_ok=True)
        with open(self.root / f"{key}.lock", "a", encoding="utf-8") as lock_file:
            portalocker.lock(lock_file, lock_type)
            try:
                yield
            finally:
                portalocker.unlock(lock_file)

    def get(self, key: str) -> Optional[bytes]:
        path = self._path_for(key)
        try:
            if not path.exists():
                return None
            with self._locked(key, portalocker.LOCK_SH):
                return path.read_bytes()
        except FileNotFoundError:
            return None
        except (OSError, portalocker.LockException) as e:
            raise StoreError(f"Failed to read {path}: {e}", key=key) from e

    def put(self, key: str, value: bytes) -> None:
        path = self._path_for(key)
        temp_path = path.with_suffix(".tmp")
        try:
            with self._locked(key, portalocker.LOCK_EX):
                temp_path.write_bytes(value)
                # Atomic rename (overwrites existing)
                temp_path.replace(path)
        except (OSError, portalocker.LockException) as e:
            try:
                if temp_path.exists():
                    temp_path.unlink()
            except OSError:
                logger.debug(f"Could not remove temp file {temp_path}")
            raise StoreError(f"Failed to write {path}: {e}", key=key) from e
