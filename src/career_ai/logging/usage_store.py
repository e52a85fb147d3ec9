"""SQLite-backed AI usage audit log."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from career_ai.logging.models import OperationType, UsageLog

DEFAULT_DB_PATH = Path.home() / ".career-ai" / "usage.db"


def _ts(value: datetime) -> str:
    """Fixed-width UTC ISO string, so lexical order equals time order."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


class UsageStore:
    """Append-only SQLite store for AI usage logs with WAL mode."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS ai_usage (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    operation_type TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    success INTEGER NOT NULL DEFAULT 1,
                    tokens_used INTEGER NOT NULL DEFAULT 0,
                    input_tokens INTEGER NOT NULL DEFAULT 0,
                    output_tokens INTEGER NOT NULL DEFAULT 0,
                    estimated_cost_usd REAL,
                    model_version TEXT,
                    latency_ms INTEGER NOT NULL DEFAULT 0,
                    error_message TEXT,
                    input_sample TEXT,
                    output_sample TEXT,
                    metadata TEXT NOT NULL DEFAULT '{}'
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_ai_usage_window
                ON ai_usage (user_id, operation_type, timestamp)
            """)

    def save_log(self, log: UsageLog) -> None:
        """Append a usage log entry."""
        with self._connect() as conn:
            conn.execute(
                """INSERT INTO ai_usage
                   (id, user_id, operation_type, timestamp, success, tokens_used,
                    input_tokens, output_tokens, estimated_cost_usd, model_version,
                    latency_ms, error_message, input_sample, output_sample, metadata)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    log.id,
                    log.user_id,
                    log.operation_type.value,
                    _ts(log.timestamp),
                    1 if log.success else 0,
                    log.tokens_used,
                    log.input_tokens,
                    log.output_tokens,
                    log.estimated_cost_usd,
                    log.model_version,
                    log.latency_ms,
                    log.error_message,
                    log.input_sample,
                    log.output_sample,
                    json.dumps(log.metadata, default=str),
                ),
            )

    def count_since(
        self,
        user_id: str,
        operation_type: OperationType,
        since: datetime,
    ) -> int:
        """Count logs for (user, operation) at or after `since`."""
        with self._connect() as conn:
            row = conn.execute(
                """SELECT COUNT(*) FROM ai_usage
                   WHERE user_id = ? AND operation_type = ? AND timestamp >= ?""",
                (user_id, OperationType(operation_type).value, _ts(since)),
            ).fetchone()
        return row[0] or 0

    def oldest_since(
        self,
        user_id: str,
        operation_type: OperationType,
        since: datetime,
    ) -> datetime | None:
        """Timestamp of the oldest log for (user, operation) at or after `since`."""
        with self._connect() as conn:
            row = conn.execute(
                """SELECT timestamp FROM ai_usage
                   WHERE user_id = ? AND operation_type = ? AND timestamp >= ?
                   ORDER BY timestamp ASC LIMIT 1""",
                (user_id, OperationType(operation_type).value, _ts(since)),
            ).fetchone()
        if row is None:
            return None
        return datetime.fromisoformat(row[0])

    def get_logs(
        self,
        user_id: str | None = None,
        limit: int = 50,
    ) -> list[UsageLog]:
        """Retrieve usage logs newest first, optionally filtered by user_id."""
        with self._connect() as conn:
            if user_id is not None:
                rows = conn.execute(
                    "SELECT * FROM ai_usage WHERE user_id = ? ORDER BY timestamp DESC LIMIT ?",
                    (user_id, limit),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM ai_usage ORDER BY timestamp DESC LIMIT ?",
                    (limit,),
                ).fetchall()
        return [self._row_to_log(row) for row in rows]

    def get_monthly_stats(self, user_id: str | None = None) -> dict:
        """Get aggregated stats for the current (UTC) month."""
        now = datetime.now(timezone.utc)
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        query = """SELECT
                       COUNT(*) as total_calls,
                       SUM(input_tokens) as total_input,
                       SUM(output_tokens) as total_output,
                       SUM(estimated_cost_usd) as total_cost,
                       AVG(latency_ms) as avg_latency,
                       SUM(CASE WHEN success = 1 THEN 1 ELSE 0 END) as success_count
                   FROM ai_usage
                   WHERE timestamp >= ?"""
        params: tuple = (_ts(month_start),)
        if user_id is not None:
            query += " AND user_id = ?"
            params += (user_id,)
        with self._connect() as conn:
            row = conn.execute(query, params).fetchone()
        return {
            "total_calls": row[0] or 0,
            "total_input_tokens": row[1] or 0,
            "total_output_tokens": row[2] or 0,
            "total_cost_usd": row[3] or 0.0,
            "avg_latency_ms": round(row[4], 1) if row[4] is not None else None,
            "success_rate": (row[5] / row[0] * 100) if row[0] else 0.0,
            "month": now.strftime("%Y-%m"),
        }

    def get_total_cost(self, user_id: str | None = None) -> float:
        """Get total estimated cost across all logs."""
        with self._connect() as conn:
            if user_id is not None:
                row = conn.execute(
                    "SELECT SUM(estimated_cost_usd) FROM ai_usage WHERE user_id = ?",
                    (user_id,),
                ).fetchone()
            else:
                row = conn.execute(
                    "SELECT SUM(estimated_cost_usd) FROM ai_usage"
                ).fetchone()
        return row[0] or 0.0

    @staticmethod
    def _row_to_log(row: tuple) -> UsageLog:
        return UsageLog(
            id=row[0],
            user_id=row[1],
            operation_type=OperationType(row[2]),
            timestamp=datetime.fromisoformat(row[3]),
            success=bool(row[4]),
            tokens_used=row[5],
            input_tokens=row[6],
            output_tokens=row[7],
            estimated_cost_usd=row[8],
            model_version=row[9],
            latency_ms=row[10],
            error_message=row[11],
            input_sample=row[12],
            output_sample=row[13],
            metadata=json.loads(row[14]) if row[14] else {},
        )
