"""Tests for the bounded notification buffer."""

import pytest

from nodeset_toolkit.importer.notifications import Notification, NotificationBuffer, Severity


def _note(i: int) -> Notification:
    return Notification(id=f"n{i}", severity=Severity.ERROR, message=f"failure {i}")


class TestNotificationBuffer:
    def test_newest_first(self):
        buf = NotificationBuffer()
        buf.add(_note(1))
        buf.add(_note(2))
        assert [n.id for n in buf] == ["n2", "n1"]

    def test_capped_at_limit(self):
        buf = NotificationBuffer(limit=5)
        for i in range(6):
            buf.add(_note(i))
        assert len(buf) == 5
        assert [n.id for n in buf.to_list()] == ["n5", "n4", "n3", "n2", "n1"]

    def test_dismiss(self):
        buf = NotificationBuffer(limit=3)
        for i in range(3):
            buf.add(_note(i))
        assert buf.dismiss("n1") is True
        assert [n.id for n in buf] == ["n2", "n0"]
        assert buf.dismiss("missing") is False

    def test_limit_survives_dismiss(self):
        buf = NotificationBuffer(limit=2)
        buf.add(_note(0))
        buf.dismiss("n0")
        for i in range(3):
            buf.add(_note(i))
        assert buf.limit == 2
        assert len(buf) == 2

    def test_clear(self):
        buf = NotificationBuffer()
        buf.add(_note(0))
        buf.clear()
        assert buf.to_list() == []

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            NotificationBuffer(limit=0)
