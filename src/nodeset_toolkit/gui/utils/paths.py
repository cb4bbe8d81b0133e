"""
Path utilities for handling dev vs production (frozen) file locations.

Dev mode: Uses local workspace/ directory
Frozen mode: Uses the system application data location
"""
from __future__ import annotations

import sys
from pathlib import Path

from PySide6.QtCore import QStandardPaths

APP_DIR_NAME = "Nodeset Toolkit"


def is_frozen() -> bool:
    """Check if running as a frozen (PyInstaller) application."""
    return getattr(sys, 'frozen', False) or hasattr(sys, '_MEIPASS')


def get_app_data_dir() -> Path:
    """
    Get the application data directory for internal state files.

    Frozen: ~/Library/Application Support/Nodeset Toolkit (macOS)
            or %LOCALAPPDATA%/Nodeset Toolkit (Windows)
    Dev: workspace/
    """
    if is_frozen():
        location = QStandardPaths.writableLocation(
            QStandardPaths.StandardLocation.AppLocalDataLocation
        )
        if location:
            app_data = Path(location)
        else:
            app_data = Path.home() / ".local/share" / APP_DIR_NAME
        app_data.mkdir(parents=True, exist_ok=True)
        return app_data
    # Dev mode: use local workspace
    return Path.cwd() / "workspace"


def get_store_dir() -> Path:
    """Directory backing the FileStore (recent-files history)."""
    return get_app_data_dir() / "store"
