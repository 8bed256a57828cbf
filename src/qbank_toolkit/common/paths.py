"""
Path utilities for handling dev vs production (frozen) file locations.

Dev mode: Uses local workspace/ directory
Frozen mode: Uses system-standard per-user data paths
Override: QBANK_HOME environment variable wins in both modes
"""
from __future__ import annotations

import os
import platform
import sys
from pathlib import Path

APP_NAME = "Question Bank"
DATABASE_FILENAME = "questions.sqlite3"


def is_frozen() -> bool:
    """Check if running as a frozen (PyInstaller) application."""
    return getattr(sys, 'frozen', False) or hasattr(sys, '_MEIPASS')


def get_app_data_dir() -> Path:
    """
    Get the application data directory for the question database.

    QBANK_HOME: used as-is when set
    Frozen: ~/Library/Application Support/Question Bank (macOS),
            %LOCALAPPDATA%/Question Bank (Windows),
            ~/.local/share/Question Bank (Linux)
    Dev: workspace/
    """
    override = os.environ.get("QBANK_HOME")
    if override:
        return Path(override).expanduser()

    if not is_frozen():
        return Path.cwd() / "workspace"

    system = platform.system()
    if system == "Windows":
        base = os.environ.get("LOCALAPPDATA", os.environ.get("APPDATA"))
        return Path(base) / APP_NAME if base else Path.home() / ".qbank"
    if system == "Darwin":
        return Path.home() / "Library/Application Support" / APP_NAME
    return Path.home() / ".local/share" / APP_NAME


def get_database_path() -> Path:
    """Default location of the question store."""
    return get_app_data_dir() / DATABASE_FILENAME


def get_export_dir() -> Path:
    """Default directory for JSON exports."""
    return get_app_data_dir() / "exports"
