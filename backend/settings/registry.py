from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from settings.types import Settings


def _default_config_path() -> Path:
    return Path(__file__).resolve().parent / "default.yaml"


def config_path() -> Path:
    return Path(os.getenv("ECOMAP_CONFIG_PATH") or _default_config_path())


def _load_yaml(path: Path) -> dict:
    raw = path.read_text(encoding="utf-8")
    data = yaml.safe_load(raw) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid settings yaml root: {path}")
    return data


def _env_str(name: str) -> str | None:
    v = (os.getenv(name) or "").strip()
    return v or None


def _env_int(name: str) -> int | None:
    v = _env_str(name)
    if v is None:
        return None
    try:
        return int(v)
    except ValueError:
        return None


def _env_float(name: str) -> float | None:
    v = _env_str(name)
    if v is None:
        return None
    try:
        return float(v)
    except ValueError:
        return None


def _env_flag(name: str) -> bool | None:
    v = _env_str(name)
    if v is None:
        return None
    return v.lower() not in {"0", "false", "no", "off"}


def _apply_env(data: dict[str, Any]) -> dict[str, Any]:
    provider = dict(data.get("provider") or {})
    telemetry = dict(data.get("telemetry") or {})
    out = {**data, "provider": provider, "telemetry": telemetry}

    overrides = [
        (provider, "baseUrl", _env_str("ECOMAP_API_BASE_URL")),
        (provider, "pageSize", _env_int("ECOMAP_PAGE_SIZE")),
        (provider, "timeoutS", _env_float("ECOMAP_HTTP_TIMEOUT_S")),
        (provider, "token", _env_str("ECOMAP_API_TOKEN")),
        (telemetry, "enabled", _env_flag("ECOMAP_TELEMETRY")),
        (telemetry, "path", _env_str("ECOMAP_TELEMETRY_PATH")),
        (out, "seedPath", _env_str("ECOMAP_SEED_PATH")),
        (out, "logLevel", _env_str("ECOMAP_LOG_LEVEL")),
    ]
    for target, key, value in overrides:
        if value is not None:
            target[key] = value
    if isinstance(out.get("logLevel"), str):
        out["logLevel"] = out["logLevel"].upper()
    return out


def load_settings(path: Path | None = None) -> Settings:
    """
    Read settings from YAML, then apply `ECOMAP_*` environment overrides.

    Invalid YAML content raises (pydantic `ValidationError` is a `ValueError`).
    """
    p = path or config_path()
    return Settings.model_validate(_apply_env(_load_yaml(p)))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def clear_settings_cache() -> None:
    """
    Forget cached settings; the next `get_settings()` re-reads YAML and env.
    """
    get_settings.cache_clear()
