from __future__ import annotations

import json
import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import duckdb

from telemetry.sql import (
    CREATE_AGGREGATIONS_TABLE_SQL,
    INCOMPLETE_SQL_TEMPLATE,
    INSERT_AGGREGATION_SQL,
    SUMMARY_SQL_TEMPLATE,
)

logger = logging.getLogger(__name__)


def _safe_float(v) -> float | None:
    if v is None:
        return None
    return float(v)


@dataclass
class TelemetryStore:
    """
    Aggregation-run events in DuckDB.

    `record` only enqueues; a single writer thread batches inserts, so callers on
    the event loop never wait on disk.
    """

    path: Path
    conn: duckdb.DuckDBPyConnection
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _q: "queue.Queue[dict[str, Any]]" = field(
        default_factory=lambda: queue.Queue(maxsize=10_000), repr=False
    )
    _stop: threading.Event = field(default_factory=threading.Event, repr=False)
    _worker: threading.Thread | None = field(default=None, repr=False)

    def ensure_schema(self) -> None:
        with self._lock:
            self.conn.execute(CREATE_AGGREGATIONS_TABLE_SQL)

    def start(self) -> None:
        if self._worker is not None:
            return
        self._stop.clear()
        self._worker = threading.Thread(
            target=self._run, name="telemetry-writer", daemon=True
        )
        self._worker.start()

    def stop(self, *, timeout_s: float = 2.0) -> None:
        self._stop.set()
        w = self._worker
        if w is not None and w.is_alive():
            w.join(timeout=timeout_s)
        self._worker = None

    def record(
        self,
        *,
        kind: str,
        filters: dict[str, str],
        total: int,
        received: int,
        requests: int,
        failed_pages: int,
        complete: bool,
        duration_ms: float,
    ) -> None:
        self.start()
        try:
            self._q.put_nowait(
                {
                    "ts_ms": int(time.time() * 1000),
                    "kind": str(kind),
                    "total": int(total),
                    "received": int(received),
                    "requests": int(requests),
                    "failed_pages": int(failed_pages),
                    "complete": bool(complete),
                    "duration_ms": float(duration_ms),
                    "filters_json": json.dumps(filters, ensure_ascii=False, sort_keys=True),
                }
            )
        except queue.Full:
            logger.warning("telemetry queue full; dropping aggregation event kind=%s", kind)

    def flush(self, *, timeout_s: float = 2.0) -> None:
        """
        Wait until queued events are written (used by tests and on shutdown).
        """
        if self._worker is None:
            return
        deadline = time.time() + timeout_s
        while time.time() < deadline:
            if self._q.unfinished_tasks == 0:
                break
            time.sleep(0.01)
        # Give the writer thread time to flush on its time-based trigger.
        time.sleep(0.55)

    def query(self, sql: str, params: list[Any] | None = None) -> list[tuple]:
        with self._lock:
            if params:
                return self.conn.execute(sql, params).fetchall()
            return self.conn.execute(sql).fetchall()

    def summary(
        self, *, kind: str | None = None, since_ms: int | None = None
    ) -> list[dict[str, Any]]:
        where = []
        params: list[Any] = []
        if kind:
            where.append("kind = ?")
            params.append(kind)
        if since_ms is not None:
            where.append("ts_ms >= ?")
            params.append(int(since_ms))
        where_sql = f"WHERE {' AND '.join(where)}" if where else ""

        rows = self.query(SUMMARY_SQL_TEMPLATE.format(where_sql=where_sql), params)
        out: list[dict[str, Any]] = []
        for kind_v, n, avg_ms, p50, p95, avg_requests, failed, complete_rate in rows:
            out.append(
                {
                    "kind": kind_v,
                    "n": int(n),
                    "avgMs": _safe_float(avg_ms),
                    "p50Ms": _safe_float(p50),
                    "p95Ms": _safe_float(p95),
                    "avgRequests": _safe_float(avg_requests),
                    "failedPages": int(failed or 0),
                    "completeRate": _safe_float(complete_rate),
                }
            )
        return out

    def incomplete(self, *, kind: str | None = None, limit: int = 25) -> list[dict[str, Any]]:
        params: list[Any] = []
        and_sql = ""
        if kind:
            and_sql = "AND kind = ?"
            params.append(kind)
        params.append(int(max(1, min(200, limit))))

        rows = self.query(INCOMPLETE_SQL_TEMPLATE.format(and_sql=and_sql), params)
        return [
            {
                "tsMs": int(ts_ms),
                "kind": kind_v,
                "total": int(total),
                "received": int(received),
                "failedPages": int(failed),
                "filters": json.loads(filters_json or "{}"),
            }
            for ts_ms, kind_v, total, received, failed, filters_json in rows
        ]

    def reset(self) -> None:
        # Stop the writer first so it can't write to a closed connection.
        self.stop(timeout_s=2.0)
        with self._lock:
            self.conn.close()
            self.path.unlink(missing_ok=True)

    def close(self) -> None:
        self.stop(timeout_s=2.0)
        with self._lock:
            self.conn.close()

    def _run(self) -> None:
        self.ensure_schema()
        batch: list[dict[str, Any]] = []
        last_flush = time.time()

        def flush_batch() -> None:
            nonlocal batch
            if not batch:
                return
            with self._lock:
                self.conn.executemany(
                    INSERT_AGGREGATION_SQL,
                    [
                        (
                            e["ts_ms"],
                            e["kind"],
                            e["total"],
                            e["received"],
                            e["requests"],
                            e["failed_pages"],
                            e["complete"],
                            e["duration_ms"],
                            e["filters_json"],
                        )
                        for e in batch
                    ],
                )
                # Make results visible to readers immediately.
                self.conn.execute("CHECKPOINT;")
            batch = []

        while not self._stop.is_set():
            try:
                e = self._q.get(timeout=0.1)
            except queue.Empty:
                e = None

            if e is not None:
                batch.append(e)
                self._q.task_done()

            # Flush on size or time.
            now = time.time()
            if len(batch) >= 250 or (batch and (now - last_flush) >= 0.5):
                flush_batch()
                last_flush = now

        # Drain remaining
        while True:
            try:
                e = self._q.get_nowait()
            except queue.Empty:
                break
            batch.append(e)
            self._q.task_done()
        flush_batch()


def open_store(path: Path) -> TelemetryStore:
    path.parent.mkdir(parents=True, exist_ok=True)
    store = TelemetryStore(path=path, conn=duckdb.connect(str(path)))
    store.ensure_schema()
    store.start()
    return store
