"""Tests for ImportSession state handling outside of a batch."""

import threading
import time
from datetime import datetime, timezone

from nodeset_toolkit.core.models import Namespace, NodesetMetadata, NodesetModel
from nodeset_toolkit.importer import (
    FileStore,
    ImportConfig,
    ImportSession,
    MemoryStore,
    Notification,
    RecentFileEntry,
    Severity,
    ThreadScheduler,
    UploadState,
)


def _register(session: ImportSession, id: str, uri: str) -> None:
    md = NodesetMetadata(
        id=id,
        name=f"{id}.xml",
        checksum=id * 8,
        namespaces=(Namespace.at(1, uri),),
        node_count=0,
        loaded_at=datetime.now(timezone.utc),
    )
    session.register(NodesetModel(file_name=md.name, namespace_uris=(uri,)), md)


class TestImportSession:
    def test_register_newest_first(self, session):
        _register(session, "a", "urn:a")
        _register(session, "b", "urn:b")
        assert [item.metadata.id for item in session.loaded] == ["b", "a"]
        assert session.loaded_checksums == {"a" * 8, "b" * 8}
        assert session.loaded_namespaces == [(Namespace.at(1, "urn:b"),), (Namespace.at(1, "urn:a"),)]

    def test_find_and_remove(self, session):
        _register(session, "a", "urn:a")
        assert session.find("a") is not None
        assert session.remove_nodeset("a") is True
        assert session.find("a") is None
        assert session.remove_nodeset("a") is False

    def test_dismiss_notification(self, session):
        session.notify(Notification("x", Severity.INFO, "hello"))
        assert session.dismiss_notification("x") is True
        assert session.notifications.to_list() == []

    def test_clear_recent(self, session, store):
        session.record_recent(RecentFileEntry.now("id", "a.xml", 10))
        session.clear_recent()
        assert session.recent.entries == []
        assert ImportSession(ImportConfig(), store=store).recent.entries == []

    def test_history_shared_through_store(self):
        store = MemoryStore()
        ImportSession(store=store).record_recent(RecentFileEntry.now("id", "a.xml", 10))
        assert [e.name for e in ImportSession(store=store).recent.entries] == ["a.xml"]

    def test_upload_state_listener(self, make_session):
        states = []
        session = make_session(on_upload_state=states.append)
        session.set_upload_state(UploadState.LOADING)
        session.reset_upload_state()
        assert states == [UploadState.LOADING, UploadState.SELECT_FILE]

    def test_progress_clamped(self, session):
        session.set_progress("a.xml", 140, "Reading file...")
        assert session.progress.value == 100
        session.clear_progress()
        assert session.progress is None

    def test_limits_follow_config(self, make_session):
        session = make_session(ImportConfig(notification_limit=2))
        for i in range(3):
            session.notify(Notification(str(i), Severity.INFO, "n"))
        assert len(session.notifications) == 2

    def test_schedule_reset_uses_scheduler(self, session, scheduler):
        session.set_upload_state(UploadState.UPLOAD_FAILED)
        session.schedule_reset(3.0)
        assert session.upload_state is UploadState.UPLOAD_FAILED
        scheduler.run_all()
        assert session.upload_state is UploadState.SELECT_FILE

    def test_unusable_store_directory_gives_empty_history(self, tmp_path):
        session = ImportSession(store=FileStore(tmp_path / ("x" * 300)))
        assert session.recent.entries == []
        session.record_recent(RecentFileEntry.now("id", "a.xml", 10))
        assert [e.name for e in session.recent.entries] == ["a.xml"]


class TestThreadScheduler:
    def test_runs_callback_after_delay(self):
        fired = threading.Event()
        scheduler = ThreadScheduler()
        scheduler(0.01, fired.set)
        assert fired.wait(timeout=2.0)

    def test_newer_request_replaces_pending_one(self):
        calls = []
        done = threading.Event()
        scheduler = ThreadScheduler()
        scheduler(0.5, lambda: calls.append("old"))
        scheduler(0.01, lambda: (calls.append("new"), done.set()))
        assert done.wait(timeout=2.0)
        time.sleep(0.7)
        assert calls == ["new"]

    def test_cancel_drops_pending_callback(self):
        calls = []
        scheduler = ThreadScheduler()
        scheduler(0.05, lambda: calls.append(1))
        assert scheduler.pending
        scheduler.cancel()
        assert not scheduler.pending
        time.sleep(0.15)
        assert calls == []

    def test_default_session_reset_runs_on_timer_thread(self):
        reset = threading.Event()
        session = ImportSession(on_upload_state=lambda s: s is UploadState.SELECT_FILE and reset.set())
        session.set_upload_state(UploadState.UPLOAD_FAILED)
        session.schedule_reset(0.01)
        assert reset.wait(timeout=2.0)
        assert session.upload_state is UploadState.SELECT_FILE
