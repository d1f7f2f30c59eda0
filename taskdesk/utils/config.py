# taskdesk/utils/config.py
# Rev 0.2.0
from __future__ import annotations
import copy
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .logging_setup import get_logger
from .paths import config_dir

_log = get_logger("config")

_DEFAULTS: Dict[str, Any] = {
    "api": {
        "base_url": "http://localhost:3000",
        "timeout_secs": 15,
    },
    "polling": {
        "task_detail_interval_ms": 3000,
        "projects_interval_ms": 30000,
    },
    "main_window": {
        "width": 1200,
        "height": 760,
    },
}

# env var -> (section, key, cast)
_ENV_OVERRIDES = {
    "TASKDESK_API_URL": ("api", "base_url", str),
    "TASKDESK_API_TIMEOUT": ("api", "timeout_secs", float),
    "TASKDESK_POLL_MS": ("polling", "task_detail_interval_ms", int),
}


@dataclass(frozen=True)
class ApiSettings:
    base_url: str
    timeout_secs: float


@dataclass(frozen=True)
class PollingSettings:
    task_detail_interval_ms: int
    projects_interval_ms: int


def settings_file() -> Path:
    return config_dir() / "settings.json"


def _read_object(path: Path) -> Optional[Dict[str, Any]]:
    """The file's top-level JSON object, or None when it is unreadable or not an object."""
    try:
        loaded = json.loads(path.read_text())
    except (OSError, ValueError):
        _log.debug("Could not parse %s", path, exc_info=True)
        return None
    return loaded if isinstance(loaded, dict) else None


def _merge(base: Dict[str, Any], over: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in over.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    path = path or settings_file()
    data = copy.deepcopy(_DEFAULTS)
    if path.exists():
        loaded = _read_object(path)
        if loaded is None:
            _log.warning("Ignoring unreadable settings file %s", path)
        else:
            data = _merge(_DEFAULTS, loaded)

    for var, (section, key, cast) in _ENV_OVERRIDES.items():
        raw = os.environ.get(var)
        if not raw:
            continue
        try:
            data.setdefault(section, {})[key] = cast(raw)
        except ValueError:
            _log.warning("Ignoring %s=%r (not a valid %s)", var, raw, cast.__name__)
    return data


def save_settings(data: Dict[str, Any], path: Optional[Path] = None) -> None:
    path = path or settings_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))


def remember_window_size(width: int, height: int, path: Optional[Path] = None) -> None:
    """Store the main window size in the settings file; env overrides stay out of it."""
    path = path or settings_file()
    data: Dict[str, Any] = {}
    if path.exists():
        loaded = _read_object(path)
        if loaded is None:
            _log.warning("Rewriting unreadable settings file %s", path)
        else:
            data = loaded
    data["main_window"] = {"width": int(width), "height": int(height)}
    save_settings(data, path)


def api_settings(data: Optional[Dict[str, Any]] = None) -> ApiSettings:
    api = (data or load_settings())["api"]
    return ApiSettings(base_url=str(api["base_url"]).rstrip("/"), timeout_secs=float(api["timeout_secs"]))


def polling_settings(data: Optional[Dict[str, Any]] = None) -> PollingSettings:
    polling = (data or load_settings())["polling"]
    return PollingSettings(
        task_detail_interval_ms=int(polling["task_detail_interval_ms"]),
        projects_interval_ms=int(polling["projects_interval_ms"]),
    )
