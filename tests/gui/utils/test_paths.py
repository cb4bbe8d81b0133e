"""Tests for application path resolution."""

import sys
from pathlib import Path

from nodeset_toolkit.gui.utils import paths


class TestIsFrozen:
    def test_dev_mode(self, monkeypatch):
        monkeypatch.delattr(sys, "frozen", raising=False)
        monkeypatch.delattr(sys, "_MEIPASS", raising=False)
        assert not paths.is_frozen()

    def test_frozen_mode(self, monkeypatch):
        monkeypatch.setattr(sys, "frozen", True, raising=False)
        assert paths.is_frozen()


class TestAppDataDir:
    def test_dev_uses_workspace(self, monkeypatch, tmp_path: Path):
        monkeypatch.setattr(paths, "is_frozen", lambda: False)
        monkeypatch.chdir(tmp_path)
        assert paths.get_app_data_dir() == tmp_path / "workspace"
        assert paths.get_store_dir() == tmp_path / "workspace" / "store"

    def test_frozen_uses_standard_location(self, monkeypatch, tmp_path: Path):
        target = tmp_path / "AppData" / "Nodeset Toolkit"

        class FakeStandardPaths:
            class StandardLocation:
                AppLocalDataLocation = "app-local-data"

            @staticmethod
            def writableLocation(location):
                assert location == "app-local-data"
                return str(target)

        monkeypatch.setattr(paths, "is_frozen", lambda: True)
        monkeypatch.setattr(paths, "QStandardPaths", FakeStandardPaths)
        assert paths.get_app_data_dir() == target
        assert target.is_dir()
