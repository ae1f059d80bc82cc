from __future__ import annotations

from pathlib import Path

from settings.types import TelemetrySettings


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def telemetry_path(cfg: TelemetrySettings) -> Path:
    # Store under repo so it's easy to share/query (and stays local).
    return Path(cfg.path or (_repo_root() / "data" / "telemetry" / "aggregations.duckdb"))


def telemetry_enabled(cfg: TelemetrySettings) -> bool:
    return bool(cfg.enabled)
