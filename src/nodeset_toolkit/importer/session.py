"""
Module: importer.session

Purpose:
    All mutable state of an import workspace, owned by the orchestrator and
    handed to each import_batch() call. Nothing here is global: two
    sessions never share accepted nodesets, notifications or history.

Key Classes:
    - UploadState: Upload widget state machine
    - ProgressInfo: Transient per-file progress
    - LoadedNodeset: One accepted (model, metadata) pair
    - ImportSession: The state container
    - ThreadScheduler: Delayed callbacks for callers without an event loop

State machine:
    SELECT_FILE -> LOADING -> {UPLOAD_SUCCESSED | UPLOAD_FAILED}
    -> (after reset delay) -> SELECT_FILE
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generator, List, Optional, Set, Tuple

from nodeset_toolkit.core.models import Namespace, NodesetMetadata, NodesetModel
from .config import ImportConfig
from .errors import ImportInProgressError
from .history import RecentFileEntry, RecentFiles
from .notifications import Notification, NotificationBuffer
from .storage import KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)


class UploadState(str, Enum):
    SELECT_FILE = "SELECT_FILE"
    LOADING = "LOADING"
    # Spelling matches the upload widget's state names
    UPLOAD_SUCCESSED = "UPLOAD_SUCCESSED"
    UPLOAD_FAILED = "UPLOAD_FAILED"


@dataclass(frozen=True, slots=True)
class ProgressInfo:
    file_name: str
    value: int
    stage: str


@dataclass(frozen=True)
class LoadedNodeset:
    model: NodesetModel
    metadata: NodesetMetadata


# (delay_seconds, callback) -> None
Scheduler = Callable[[float, Callable[[], None]], None]


class ThreadScheduler:
    """
    Default scheduler for callers without an event loop (scripts, services).

    Runs each callback once on a daemon timer thread. Only the newest
    request stays pending: scheduling again cancels the previous timer.
    Qt callers pass a QTimer-based scheduler instead.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None

    def __call__(self, delay: float, callback: Callable[[], None]) -> None:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = timer
        timer.start()

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None and self._timer.is_alive()

    def cancel(self) -> None:
        """Drop the pending callback, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


class ImportSession:
    """
    Orchestrator-owned state of one import workspace.

    Listeners (on_progress, on_upload_state) are side channels for a UI.
    They may be called after their display has moved on, and an exception
    raised by a listener is logged without interrupting the import.

    Args:
        config: Session configuration (strategy, limits, delays).
        store: Key-value store for the recent-files history.
        scheduler: Runs the delayed upload-state reset.
        on_progress: Called with ProgressInfo, or None when progress clears.
        on_upload_state: Called with the new UploadState on every change.

    Example:
        >>> session = ImportSession(ImportConfig(), store=MemoryStore())
        >>> result = import_batch([RawFile.from_path(p)], session)
        >>> [item.metadata.name for item in session.loaded]
    """

    def __init__(
        self,
        config: Optional[ImportConfig] = None,
        *,
        store: Optional[KeyValueStore] = None,
        scheduler: Optional[Scheduler] = None,
        on_progress: Optional[Callable[[Optional[ProgressInfo]], Any]] = None,
        on_upload_state: Optional[Callable[[UploadState], Any]] = None,
    ) -> None:
        self.config = config or ImportConfig()
        self._scheduler = scheduler or ThreadScheduler()
        self._on_progress = on_progress
        self._on_upload_state = on_upload_state

        self._loaded: List[LoadedNodeset] = []
        self.notifications = NotificationBuffer(self.config.notification_limit)
        self.recent = RecentFiles(store if store is not None else MemoryStore(), limit=self.config.recent_limit)
        self.required_models: List[str] = []
        self.progress: Optional[ProgressInfo] = None
        self.loading = False
        self._upload_state = UploadState.SELECT_FILE
        self._import_lock = threading.Lock()
        self._state_lock = threading.Lock()

    # ─────────────────────────────────────────────────────────────────────────
    # Accepted nodesets
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def loaded(self) -> List[LoadedNodeset]:
        """Accepted nodesets, newest first."""
        return list(self._loaded)

    @property
    def loaded_checksums(self) -> Set[str]:
        return {item.metadata.checksum for item in self._loaded if item.metadata.checksum}

    @property
    def loaded_namespaces(self) -> List[Tuple[Namespace, ...]]:
        return [item.metadata.namespaces for item in self._loaded]

    def register(self, model: NodesetModel, metadata: NodesetMetadata) -> LoadedNodeset:
        item = LoadedNodeset(model=model, metadata=metadata)
        self._loaded.insert(0, item)
        return item

    def find(self, metadata_id: str) -> Optional[LoadedNodeset]:
        return next((item for item in self._loaded if item.metadata.id == metadata_id), None)

    def remove_nodeset(self, metadata_id: str) -> bool:
        """Unload a nodeset. Its checksum and namespaces become available again."""
        before = len(self._loaded)
        self._loaded = [item for item in self._loaded if item.metadata.id != metadata_id]
        removed = len(self._loaded) != before
        if removed:
            logger.info(f"Removed nodeset {metadata_id}")
        return removed

    # ─────────────────────────────────────────────────────────────────────────
    # Notifications and history
    # ─────────────────────────────────────────────────────────────────────────

    def notify(self, notification: Notification) -> None:
        self.notifications.add(notification)

    def dismiss_notification(self, notification_id: str) -> bool:
        return self.notifications.dismiss(notification_id)

    def record_recent(self, entry: RecentFileEntry) -> None:
        self.recent.record(entry)

    def clear_recent(self) -> None:
        self.recent.clear()

    # ─────────────────────────────────────────────────────────────────────────
    # Upload state and progress
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def upload_state(self) -> UploadState:
        return self._upload_state

    def set_upload_state(self, state: UploadState) -> None:
        # The delayed reset may arrive from a scheduler thread
        with self._state_lock:
            self._upload_state = state
        self._emit(self._on_upload_state, state)

    def reset_upload_state(self) -> None:
        self.set_upload_state(UploadState.SELECT_FILE)

    def schedule_reset(self, delay: float) -> None:
        """Return to SELECT_FILE after ``delay`` seconds. Does not stop running work."""
        self._scheduler(delay, self.reset_upload_state)

    def set_progress(self, file_name: str, value: int, stage: str) -> None:
        self.progress = ProgressInfo(file_name=file_name, value=max(0, min(100, int(value))), stage=stage)
        self._emit(self._on_progress, self.progress)

    def clear_progress(self) -> None:
        self.progress = None
        self._emit(self._on_progress, None)

    @contextmanager
    def importing(self) -> Generator[None, None, None]:
        """
        Mark the session busy for the duration of one batch.

        Raises:
            ImportInProgressError: If another batch is already running
        """
        if not self._import_lock.acquire(blocking=False):
            raise ImportInProgressError("An import is already running in this session")
        self.loading = True
        try:
            yield
        finally:
            self.loading = False
            self._import_lock.release()

    def _emit(self, listener: Optional[Callable[[Any], Any]], value: Any) -> None:
        if listener is None:
            return
        try:
            listener(value)
        except Exception:
            logger.warning("Import listener failed; continuing", exc_info=True)
