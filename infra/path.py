# infra/path.py
from __future__ import annotations
import os
import sys
from pathlib import Path

APP_NAME = "AutomationHub"
COMPANY_NAME = "AutomationHub"


def user_data_dir() -> Path:
    """
    Returns a per-user data directory, e.g.:

    Windows:
        C:\\Users\\<User>\\AppData\\Roaming\\AutomationHub\\AutomationHub

    macOS:
        ~/Library/Application Support/AutomationHub/AutomationHub

    Linux:
        ~/.local/share/AutomationHub/AutomationHub

    ``AH_DATA_DIR`` overrides the platform default.
    """
    override = os.getenv("AH_DATA_DIR")
    if override:
        path = Path(override).expanduser()
        path.mkdir(parents=True, exist_ok=True)
        return path
    try:
        if sys.platform.startswith("win"):
            base = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming"))
        elif sys.platform == "darwin":
            base = Path.home() / "Library" / "Application Support"
        else:
            base = Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share"))

        path = base / COMPANY_NAME / APP_NAME
        path.mkdir(parents=True, exist_ok=True)
        return path
    except OSError:
        # Last-resort fallback: use home directory
        fallback = Path.home() / f".{APP_NAME}"
        fallback.mkdir(parents=True, exist_ok=True)
        return fallback


def default_db_path() -> Path:
    """
    The full path to the SQLite database file under the user data dir.
    """
    return user_data_dir() / "automation_hub.db"


def database_url() -> str:
    override = os.getenv("AH_DB_URL")
    if override:
        return override
    return f"sqlite:///{default_db_path().as_posix()}"
