"""
Process logging setup and the operation_log audit table.

Every mutating HTTP call records one operation_log row: who did it, what
entity it touched, the before-snapshot and the submitted payload, and how it
ended (OK / NOT_FOUND / ERROR).
"""
import datetime as dt
import json
import logging
import logging.config
import time
import uuid
from typing import Any, Optional

from .db import get_conn

OPERATION_LOG_DDL = """
CREATE TABLE IF NOT EXISTS operation_log (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  ts TEXT NOT NULL,
  user TEXT NOT NULL,
  action TEXT NOT NULL,
  entity_type TEXT,
  entity_id TEXT,
  request_id TEXT,
  before_json TEXT,
  after_json TEXT,
  payload_json TEXT,
  result TEXT,
  err_msg TEXT,
  latency_ms INTEGER
);
CREATE INDEX IF NOT EXISTS idx_operation_log_ts ON operation_log(ts);
CREATE INDEX IF NOT EXISTS idx_operation_log_action ON operation_log(action);
"""

_COLUMNS = (
    "ts", "user", "action", "entity_type", "entity_id", "request_id",
    "before_json", "after_json", "payload_json", "result", "err_msg", "latency_ms",
)


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "console",
                    "level": level,
                }
            },
            "loggers": {
                "shelter": {"handlers": ["default"], "level": level, "propagate": False},
            },
        }
    )


def ensure_log_schema(db_path: Optional[str] = None) -> None:
    with get_conn(db_path) as conn:
        conn.executescript(OPERATION_LOG_DDL)


def _dump(obj: Any) -> Optional[str]:
    return None if obj is None else json.dumps(obj, ensure_ascii=False, default=str)


class LogContext:
    """One audit entry, filled in while a handler runs and written once at the end."""

    def __init__(self, action: str, user: str = "anonymous", db_path: Optional[str] = None):
        self.action = action
        self.user = user
        self.db_path = db_path
        self.request_id = uuid.uuid4().hex
        self.entity_type: Optional[str] = None
        self.entity_id: Optional[str] = None
        self.before = None
        self.after = None
        self.payload = None
        self._started = time.perf_counter()

    def set_entity(self, entity_type: str, entity_id: str):
        self.entity_type, self.entity_id = entity_type, entity_id

    def set_before(self, obj): self.before = obj
    def set_after(self, obj): self.after = obj
    def set_payload(self, obj): self.payload = obj

    def write(self, result: str = "OK", err: Optional[str] = None):
        row = (
            dt.datetime.now(dt.timezone.utc).isoformat(),
            self.user,
            self.action,
            self.entity_type,
            self.entity_id,
            self.request_id,
            _dump(self.before),
            _dump(self.after),
            _dump(self.payload),
            result,
            err,
            int((time.perf_counter() - self._started) * 1000),
        )
        placeholders = ",".join("?" * len(_COLUMNS))
        with get_conn(self.db_path) as conn:
            conn.execute(
                f"INSERT INTO operation_log ({','.join(_COLUMNS)}) VALUES ({placeholders})",
                row,
            )


def search_operation_logs(q: str | None, action: str | None, ts_from: str | None, ts_to: str | None,
                          page: int, size: int, db_path: Optional[str] = None):
    """Newest first. `q` is a substring match over the JSON snapshots."""
    clauses, params = [], []
    if q:
        clauses.append("(payload_json LIKE ? OR before_json LIKE ? OR after_json LIKE ?)")
        params += [f"%{q}%"] * 3
    if action:
        clauses.append("action = ?")
        params.append(action)
    if ts_from:
        clauses.append("ts >= ?")
        params.append(ts_from)
    if ts_to:
        clauses.append("ts <= ?")
        params.append(ts_to)
    where = (" WHERE " + " AND ".join(clauses)) if clauses else ""
    offset = max(page - 1, 0) * size
    with get_conn(db_path) as conn:
        total = conn.execute(f"SELECT COUNT(1) AS cnt FROM operation_log{where}", params).fetchone()["cnt"]
        rows = conn.execute(
            f"SELECT * FROM operation_log{where} ORDER BY id DESC LIMIT ? OFFSET ?",
            [*params, size, offset],
        ).fetchall()
    return total, [dict(r) for r in rows]
