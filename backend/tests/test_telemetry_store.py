from __future__ import annotations

from settings.types import TelemetrySettings
from telemetry.config import telemetry_enabled, telemetry_path
from telemetry.store import open_store


def _record(store, *, kind="containers", complete=True, failed_pages=0, duration_ms=10.0):
    store.record(
        kind=kind,
        filters={"category": "glass", "sort": "category", "order": "asc"},
        total=250,
        received=250 if complete else 150,
        requests=3,
        failed_pages=failed_pages,
        complete=complete,
        duration_ms=duration_ms,
    )


def test_telemetry_store_writes_rows(tmp_path):
    store = open_store(tmp_path / "telemetry.duckdb")
    try:
        _record(store, duration_ms=10.0)
        _record(store, duration_ms=30.0)
        _record(store, kind="trucks")
        store.flush(timeout_s=2.0)

        # Use the existing connection; DuckDB disallows opening the same file with different configs.
        n = int(store.conn.execute("select count(*) from aggregations").fetchone()[0])
        assert n == 3

        rows = store.summary(kind="containers")
        assert len(rows) == 1
        row = rows[0]
        assert row["kind"] == "containers"
        assert row["n"] == 2
        assert row["avgMs"] == 20.0
        assert row["avgRequests"] == 3.0
        assert row["completeRate"] == 1.0

        assert [r["kind"] for r in store.summary()] == ["containers", "trucks"]
    finally:
        store.close()


def test_incomplete_runs_are_listed_with_their_filters(tmp_path):
    store = open_store(tmp_path / "telemetry.duckdb")
    try:
        _record(store)
        _record(store, complete=False, failed_pages=1)
        store.flush(timeout_s=2.0)

        rows = store.incomplete(kind="containers")
        assert len(rows) == 1
        assert rows[0]["received"] == 150
        assert rows[0]["failedPages"] == 1
        assert rows[0]["filters"]["category"] == "glass"

        (summary,) = store.summary()
        assert summary["failedPages"] == 1
        assert summary["completeRate"] == 0.5
    finally:
        store.close()


def test_telemetry_reset_deletes_db(tmp_path):
    db_path = tmp_path / "nested" / "telemetry.duckdb"
    store = open_store(db_path)
    _record(store)
    assert store.path.resolve() == db_path.resolve()
    assert db_path.exists()

    store.reset()
    assert not db_path.exists()


def test_telemetry_config(tmp_path):
    cfg = TelemetrySettings(enabled=False, path=str(tmp_path / "x.duckdb"))
    assert telemetry_enabled(cfg) is False
    assert telemetry_path(cfg) == tmp_path / "x.duckdb"
    assert telemetry_path(TelemetrySettings()).name == "aggregations.duckdb"
