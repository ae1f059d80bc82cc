from __future__ import annotations

CREATE_AGGREGATIONS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS aggregations (
  ts_ms BIGINT,
  kind TEXT,
  total BIGINT,
  received BIGINT,
  requests INTEGER,
  failed_pages INTEGER,
  complete BOOLEAN,
  duration_ms DOUBLE,
  filters_json TEXT
);
"""

SUMMARY_SQL_TEMPLATE = """
SELECT
  kind,
  COUNT(*) AS n,
  AVG(duration_ms) AS avg_ms,
  quantile_cont(duration_ms, 0.50) AS p50_ms,
  quantile_cont(duration_ms, 0.95) AS p95_ms,
  AVG(requests) AS avg_requests,
  SUM(failed_pages) AS failed_pages,
  AVG(CASE WHEN complete THEN 1 ELSE 0 END) AS complete_rate
FROM aggregations
{where_sql}
GROUP BY kind
ORDER BY kind
"""

INCOMPLETE_SQL_TEMPLATE = """
SELECT ts_ms, kind, total, received, failed_pages, filters_json
FROM aggregations
WHERE NOT complete {and_sql}
ORDER BY ts_ms DESC
LIMIT ?
"""

INSERT_AGGREGATION_SQL = """
INSERT INTO aggregations
  (ts_ms, kind, total, received, requests, failed_pages, complete, duration_ms, filters_json)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
"""
