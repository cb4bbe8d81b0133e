"""
Importer Package

Imports OPC UA nodeset XML files into an ImportSession: gating, validation,
duplicate detection, parsing, metadata extraction and namespace conflict
resolution.

Usage:
    from nodeset_toolkit.importer import ImportConfig, ImportSession, RawFile, import_batch

    session = ImportSession(ImportConfig())
    result = import_batch([RawFile.from_path("Boiler.NodeSet2.xml")], session)
"""

from .config import ConflictStrategy, ImportConfig, normalize_user_max_mb, default_user_max_mb
from .errors import ErrorCode, ImportInProgressError, NodesetImportError, ParseError
from .history import RECENT_FILES_KEY, RecentFileEntry, RecentFiles
from .notifications import Notification, NotificationBuffer, Severity
from .pipeline import (
    Accepted,
    BatchAborted,
    BatchResult,
    RawFile,
    Skipped,
    dispatch_result,
    import_batch,
)
from .session import ImportSession, LoadedNodeset, ProgressInfo, ThreadScheduler, UploadState
from .storage import FileStore, KeyValueStore, MemoryStore, StoreError

__all__ = [
    "Accepted",
    "BatchAborted",
    "BatchResult",
    "ConflictStrategy",
    "ErrorCode",
    "FileStore",
    "ImportConfig",
    "ImportInProgressError",
    "ImportSession",
    "KeyValueStore",
    "LoadedNodeset",
    "MemoryStore",
    "NodesetImportError",
    "Notification",
    "NotificationBuffer",
    "ParseError",
    "ProgressInfo",
    "RECENT_FILES_KEY",
    "RawFile",
    "RecentFileEntry",
    "RecentFiles",
    "Severity",
    "Skipped",
    "StoreError",
    "ThreadScheduler",
    "UploadState",
    "default_user_max_mb",
    "dispatch_result",
    "import_batch",
    "normalize_user_max_mb",
]
