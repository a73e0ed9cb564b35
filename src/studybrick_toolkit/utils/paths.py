"""
Path utilities for per-device state.

Env override: $STUDYBRICK_HOME
Dev mode: Uses local workspace/ directory
Installed: Uses the platform application-data directory
"""
from __future__ import annotations

import os
import platform
import sys
from pathlib import Path

APP_DIR_NAME = "StudyBrick"


def is_frozen() -> bool:
    """Check if running as a frozen (PyInstaller) application."""
    return getattr(sys, "frozen", False) or hasattr(sys, "_MEIPASS")


def _is_dev_checkout() -> bool:
    """True when running from a source checkout (pyproject next to src/)."""
    return (Path(__file__).resolve().parents[3] / "pyproject.toml").exists()


def get_app_data_dir() -> Path:
    """
    Get the application data directory for per-device state files.

    Resolution order:
        1. $STUDYBRICK_HOME
        2. Dev checkout: ./workspace
        3. Windows: %LOCALAPPDATA%/StudyBrick
           macOS: ~/Library/Application Support/StudyBrick
           Linux: $XDG_DATA_HOME/StudyBrick or ~/.local/share/StudyBrick
    """
    override = os.environ.get("STUDYBRICK_HOME")
    if override:
        return Path(override).expanduser()

    if not is_frozen() and _is_dev_checkout():
        return Path.cwd() / "workspace"

    system = platform.system()
    if system == "Windows":
        base = os.environ.get("LOCALAPPDATA", os.environ.get("APPDATA"))
        return Path(base) / APP_DIR_NAME if base else Path.home() / ".studybrick"
    if system == "Darwin":
        return Path.home() / "Library/Application Support" / APP_DIR_NAME
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / APP_DIR_NAME
    return Path.home() / ".local/share" / APP_DIR_NAME


def get_drafts_dir(data_dir: Path) -> Path:
    """Directory holding persisted paper drafts."""
    return data_dir / "drafts"


def get_export_history_path(data_dir: Path) -> Path:
    """JSON file recording recent export timestamps for rate limiting."""
    return data_dir / "export_history.json"
