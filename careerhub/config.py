"""Load settings and env configuration."""
from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from careerhub.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"
REPORTS_DIR: Path = ROOT_DIR / "reports"
DATA_DIR: Path = ROOT_DIR / "data"

TOKEN_ENV = "CAREERHUB_API_TOKEN"

DEFAULT_SETTINGS: dict[str, Any] = {
    "api": {
        "base_url": "http://localhost:3001",
        "timeout": 15,
        # 1 = no automatic retry; reads only, mutations never retry.
        "read_attempts": 1,
    },
    "matches": {
        "limit": 20,
    },
    "alerts": {
        "enabled": True,
        "min_score": 60,
        "max_per_digest": 15,
        "quiet_hours": None,
    },
    "practice": {
        "default_time_limit": 120,
    },
}


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def load_settings(path: Path | None = None) -> dict[str, Any]:
    """Defaults, overlaid by the YAML file (if any), overlaid by env vars."""
    path = path or SETTINGS_PATH
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            log.warning("Ignoring %s: top level is not a mapping", path.name)
            data = {}
    else:
        log.debug("No settings file at %s, using defaults", path)

    settings = _merge(DEFAULT_SETTINGS, data)

    base_url = get_env("CAREERHUB_BASE_URL")
    if base_url:
        settings["api"]["base_url"] = base_url
    return settings


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def get_token() -> str | None:
    return get_env(TOKEN_ENV) or None


def ensure_dirs() -> None:
    for d in (REPORTS_DIR, DATA_DIR):
        d.mkdir(parents=True, exist_ok=True)
