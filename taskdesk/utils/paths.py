# Rev 0.2.0

"""Paths and XDG helpers (Rev 0.2.0)
- Uses XDG Base Directory spec
- Logs live under XDG state, settings under XDG config
- No local data dir: the REST gateway owns all persistent state
"""
from __future__ import annotations
import os
from pathlib import Path


APP_NAME = "taskdesk"


def _xdg(var: str, fallback: Path) -> Path:
    return Path(os.environ.get(var) or fallback).expanduser()


def config_dir() -> Path:
    return _xdg("XDG_CONFIG_HOME", Path.home() / ".config") / APP_NAME


def state_dir() -> Path:
    return _xdg("XDG_STATE_HOME", Path.home() / ".local" / "state") / APP_NAME


def logs_dir() -> Path:
    return state_dir() / "logs"
