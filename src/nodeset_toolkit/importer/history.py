"""
Module: importer.history

Purpose:
    Persisted, capped history of recently imported files.

This module handles persisted state with robust error handling. Any
malformed or unreadable data results in an empty history, never an
exception reaching the pipeline.

Key Classes:
    - RecentFileEntry: One history entry
    - RecentFiles: Capped most-recent-first list backed by a KeyValueStore
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from nodeset_toolkit.core.schemas import SchemaValidationError, validate_recent_files
from .storage import KeyValueStore, StoreError

logger = logging.getLogger(__name__)

RECENT_FILES_KEY = "opcua_recent_nodesets"


@dataclass(frozen=True, slots=True)
class RecentFileEntry:
    """
    One recently imported file.

    Attributes:
        id: Metadata id of the accepted nodeset.
        name: File name (history is deduplicated on this).
        size: File size in bytes.
        loaded_at: ISO-8601 timestamp.
    """
    id: str
    name: str
    size: int
    loaded_at: str

    @classmethod
    def now(cls, id: str, name: str, size: int) -> RecentFileEntry:
        return cls(id=id, name=name, size=size, loaded_at=datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "size": self.size, "loadedAt": self.loaded_at}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RecentFileEntry:
        return cls(
            id=data["id"],
            name=data["name"],
            size=int(data["size"]),
            loaded_at=data["loadedAt"],
        )


class RecentFiles:
    """
    Most-recent-first history of imported files, capped at ``limit``.

    Recording a file whose name is already present replaces the older entry.
    Every change is written through to the store; a failing store is logged
    and the in-memory list stays authoritative for the session.

    Example:
        >>> history = RecentFiles(MemoryStore())
        >>> history.record(RecentFileEntry.now("id-1", "a.xml", 120))
        >>> [e.name for e in history.entries]
        ['a.xml']
    """

    def __init__(self, store: KeyValueStore, *, key: str = RECENT_FILES_KEY, limit: int = 5) -> None:
        self._store = store
        self._key = key
        self._limit = limit
        self._entries: List[RecentFileEntry] = self._load()

    @property
    def entries(self) -> List[RecentFileEntry]:
        return list(self._entries)

    def record(self, entry: RecentFileEntry) -> None:
        updated = [entry] + [e for e in self._entries if e.name != entry.name]
        self._entries = updated[: self._limit]
        self._persist()

    def clear(self) -> None:
        self._entries = []
        self._persist()

    def _load(self) -> List[RecentFileEntry]:
        try:
            raw = self._store.get(self._key)
        except StoreError as e:
            logger.warning(f"Failed to load recent files: {e}")
            return []
        if raw is None:
            return []

        try:
            payload = json.loads(raw.decode("utf-8"))
            validate_recent_files(payload)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Recent files data is corrupted, starting empty: {e}")
            return []
        except SchemaValidationError as e:
            logger.warning(f"Recent files data is malformed ({e.path or 'root'}), starting empty: {e}")
            return []

        entries = [RecentFileEntry.from_dict(item) for item in payload]
        return entries[: self._limit]

    def _persist(self) -> None:
        payload = json.dumps([e.to_dict() for e in self._entries], indent=2).encode("utf-8")
        try:
            self._store.put(self._key, payload)
        except StoreError as e:
            logger.warning(f"Failed to save recent files: {e}")

    def find(self, name: str) -> Optional[RecentFileEntry]:
        return next((e for e in self._entries if e.name == name), None)
