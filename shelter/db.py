from __future__ import annotations

# shelter/db.py
import sqlite3
from contextlib import contextmanager
from typing import Iterator

from .config import get_db_path


@contextmanager
def get_conn(db_path: str | None = None) -> Iterator[sqlite3.Connection]:
    """
    Open an SQLite connection. An explicit db_path wins, otherwise get_db_path().
    Foreign keys are enforced and rows come back as sqlite3.Row.
    """
    path = db_path or get_db_path()
    conn = sqlite3.connect(
        path,
        check_same_thread=False,
        isolation_level=None,
    )
    try:
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.row_factory = sqlite3.Row
        yield conn
    finally:
        conn.close()
