"""Helpers for locating application directories."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import PlatformDirs


APP_NAME = "LogoutCalculator"
APP_AUTHOR = "LogoutCalculator"
DATA_DIR_ENV = "LOGOUT_CALCULATOR_DATA_DIR"


def get_data_dir() -> Path:
    """Return the directory for saved history, honouring ``LOGOUT_CALCULATOR_DATA_DIR``."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        path = Path(override).expanduser()
    else:
        dirs = PlatformDirs(appname=APP_NAME, appauthor=APP_AUTHOR, roaming=True)
        path = Path(dirs.user_data_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_db_path() -> Path:
    return get_data_dir() / "history.sqlite3"
