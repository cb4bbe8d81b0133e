"""
Module: gui.controller

Purpose:
    Qt adapter around an ImportSession. Runs import batches and translates
    their results and the session's side channels (progress, upload state)
    into signals a widget can bind to.

Key Classes:
    - ImportController: QObject exposing the importer as signals and slots

Dependencies:
    - PySide6: QObject / Signal / QTimer
    - nodeset_toolkit.importer: Pipeline and session

Signals:
    nodesetLoaded(model, metadata), errorOccurred(error),
    uploadStateChanged(state), progressChanged(progress or None),
    notificationsChanged(list), recentFilesChanged(list),
    loadingChanged(bool), closeRequested()
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from PySide6.QtCore import QObject, QTimer, Signal

from nodeset_toolkit.importer import (
    BatchResult,
    ConflictStrategy,
    FileStore,
    ImportConfig,
    ImportSession,
    KeyValueStore,
    RawFile,
    RecentFileEntry,
    default_user_max_mb,
    dispatch_result,
    import_batch,
)
from nodeset_toolkit.gui.utils.paths import get_store_dir

logger = logging.getLogger(__name__)


class ImportController(QObject):
    """
    Bridges the import pipeline to a Qt UI.

    Delayed work (resetting the upload state, asking the dialog to close
    after a success) runs through QTimer.singleShot on the Qt event loop.

    Example:
        >>> controller = ImportController(store=MemoryStore())
        >>> controller.nodesetLoaded.connect(tree_view.add_model)
        >>> controller.import_files(["Boiler.NodeSet2.xml"])
    """

    nodesetLoaded = Signal(object, object)
    errorOccurred = Signal(object)
    uploadStateChanged = Signal(object)
    progressChanged = Signal(object)
    notificationsChanged = Signal(object)
    recentFilesChanged = Signal(object)
    loadingChanged = Signal(bool)
    closeRequested = Signal()

    def __init__(
        self,
        config: Optional[ImportConfig] = None,
        store: Optional[KeyValueStore] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        if store is None:
            store = FileStore(get_store_dir())
        self.session = ImportSession(
            config,
            store=store,
            scheduler=self._schedule,
            on_progress=self.progressChanged.emit,
            on_upload_state=self.uploadStateChanged.emit,
        )
        self._user_max_mb = self.session.config.user_max_file_size_mb or default_user_max_mb(
            self.session.config.max_file_size
        )

    def _schedule(self, delay: float, callback: Callable[[], None]) -> None:
        # Bound to this object: Qt drops the timer if the controller is destroyed first
        QTimer.singleShot(int(delay * 1000), self, callback)

    # ─────────────────────────────────────────────────────────────────────────
    # Settings
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def user_max_file_size_mb(self) -> float:
        """Max size (MiB) shown in the size field."""
        return self._user_max_mb

    def set_user_max_file_size_mb(self, value: object) -> float:
        """Apply operator input for the max size; returns the normalized value."""
        self.session.config = self.session.config.with_user_max_mb(value)
        self._user_max_mb = self.session.config.user_max_file_size_mb or self._user_max_mb
        logger.info(f"Max file size set to {self._user_max_mb} MB")
        return self._user_max_mb

    def set_conflict_strategy(self, strategy: Union[ConflictStrategy, str]) -> ConflictStrategy:
        """Change the namespace conflict strategy; unknown values keep the default."""
        resolved = ImportConfig.from_dict({"namespaceConflictStrategy": strategy}).namespace_conflict_strategy
        self.session.config = replace(self.session.config, namespace_conflict_strategy=resolved)
        return resolved

    # ─────────────────────────────────────────────────────────────────────────
    # Import
    # ─────────────────────────────────────────────────────────────────────────

    def import_files(self, files: Iterable[Union[RawFile, str, Path]]) -> Optional[BatchResult]:
        """
        Import the selected files and emit the outcome.

        Returns None when nothing was imported (empty selection, or an
        import already running). Paths that cannot be read abort the batch
        with PARSE_ERROR like any other read failure.
        """
        raw_files = [f if isinstance(f, RawFile) else RawFile.from_path(f) for f in files]
        if not raw_files:
            return None
        if self.session.loading:
            logger.warning("Import requested while another import is running; ignored")
            return None

        self.loadingChanged.emit(True)
        try:
            result = import_batch(raw_files, self.session)
        finally:
            self.loadingChanged.emit(False)

        dispatch_result(result, self.nodesetLoaded.emit, self.errorOccurred.emit)
        self._emit_notifications()
        self._emit_recent()

        if result.succeeded:
            self._schedule(self.session.config.close_delay_s, self.closeRequested.emit)
        return result

    # ─────────────────────────────────────────────────────────────────────────
    # Operator actions
    # ─────────────────────────────────────────────────────────────────────────

    def remove_nodeset(self, metadata_id: str) -> bool:
        return self.session.remove_nodeset(metadata_id)

    def dismiss_notification(self, notification_id: str) -> None:
        if self.session.dismiss_notification(notification_id):
            self._emit_notifications()

    def clear_recent(self) -> None:
        self.session.clear_recent()
        self._emit_recent()

    def recent_files(self) -> List[RecentFileEntry]:
        return list(self.session.recent.entries)

    def _emit_notifications(self) -> None:
        self.notificationsChanged.emit(self.session.notifications.to_list())

    def _emit_recent(self) -> None:
        self.recentFilesChanged.emit(self.session.recent.entries)
