"""Configuration loading and path resolution for the notebook server."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict

from dotenv import dotenv_values
from pydantic import BaseModel


def _runtime_home() -> Path:
    override = str(os.getenv("NOTEBOOK_MCP_HOME", "") or "").strip()
    if override:
        return Path(override).expanduser().resolve()
    return Path.cwd().resolve()


DEFAULT_CONFIG_HOME = _runtime_home()
ENV_PATH = DEFAULT_CONFIG_HOME / ".env"

_PATH_SETTING_KEYS = {"NOTEBOOK_STORAGE_DIRECTORY"}


def _coerce_str(value: object) -> str:
    return str(value or "").strip()


def _strip_inline_comment(value: object) -> str:
    # LOG_LEVEL=DEBUG  # DEBUG|INFO|WARNING
    txt = _coerce_str(value)
    if " #" in txt:
        txt = txt.split(" #", 1)[0].strip()
    return txt


def config_home() -> Path:
    return ENV_PATH.expanduser().resolve().parent


def _resolve_runtime_path(raw: str) -> str:
    txt = _coerce_str(raw)
    if not txt:
        return ""
    path = Path(txt).expanduser()
    if not path.is_absolute():
        path = config_home() / path
    return str(path.resolve())


class Settings(BaseModel):
    NOTEBOOK_STORAGE_DIRECTORY: str = "notebooks"
    LOG_LEVEL: str = "INFO"
    SERVER_NAME: str = "notebook"


def _environment_overrides() -> Dict[str, str]:
    out: Dict[str, str] = {}
    for key in Settings.model_fields:
        value = os.environ.get(key)
        if value is not None and value.strip():
            out[key] = value
    return out


def load_settings() -> Settings:
    """Read ``.env`` from the config home, then let process environment win."""
    vals = {k: v for k, v in dotenv_values(ENV_PATH).items() if v is not None}
    vals.update(_environment_overrides())

    if "LOG_LEVEL" in vals:
        vals["LOG_LEVEL"] = _strip_inline_comment(vals["LOG_LEVEL"]).upper()
    settings = Settings.model_validate(vals)

    payload = settings.model_dump()
    for key in _PATH_SETTING_KEYS:
        payload[key] = _resolve_runtime_path(str(payload.get(key) or ""))
    return Settings.model_validate(payload)


def storage_directory(settings: Settings) -> Path:
    raw = _coerce_str(settings.NOTEBOOK_STORAGE_DIRECTORY)
    if not raw:
        return config_home() / "notebooks"
    return Path(raw)
