from __future__ import annotations

from sqlite3 import Connection
from typing import Optional


def ensure_schema(conn: Connection):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS user_authentication (
            username TEXT PRIMARY KEY,
            password_hash TEXT NOT NULL,
            role TEXT NOT NULL
        )
        """
    )


def insert(conn: Connection, username: str, password_hash: str, role: str) -> int:
    cur = conn.execute(
        "INSERT INTO user_authentication(username, password_hash, role) VALUES(?,?,?)",
        (username, password_hash, role),
    )
    return cur.rowcount


def get_password_hash(conn: Connection, username: str) -> Optional[str]:
    row = conn.execute("SELECT password_hash FROM user_authentication WHERE username=?", (username,)).fetchone()
    return row["password_hash"] if row else None


def get_role(conn: Connection, username: str) -> Optional[str]:
    row = conn.execute("SELECT role FROM user_authentication WHERE username=?", (username,)).fetchone()
    return row["role"] if row else None


def delete(conn: Connection, username: str) -> int:
    return conn.execute("DELETE FROM user_authentication WHERE username=?", (username,)).rowcount
