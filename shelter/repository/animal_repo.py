from __future__ import annotations

from sqlite3 import Connection

from ..domain.models import Animal

_COLUMNS = (
    "id, name, specie, breed, sex, birth_month, birth_year, neutered, "
    "admission_timestamp, status, image_path, appearance, bio"
)
SUMMARY_COLUMNS = "id, name, specie, breed, sex, admission_timestamp, status, image_path"


def ensure_schema(conn: Connection):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS animals (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            specie TEXT NOT NULL,
            breed TEXT NOT NULL,
            sex TEXT NOT NULL,
            birth_month INTEGER,
            birth_year INTEGER,
            neutered BOOLEAN NOT NULL,
            admission_timestamp INTEGER NOT NULL,
            status TEXT NOT NULL,
            image_path TEXT,
            appearance TEXT NOT NULL,
            bio TEXT NOT NULL
        )
        """
    )


def next_id(conn: Connection) -> str:
    row = conn.execute("SELECT COALESCE(MAX(CAST(id AS INTEGER)), 0) AS m FROM animals").fetchone()
    return str(int(row["m"]) + 1)


def _values(a: Animal) -> tuple:
    return (
        a.name, a.specie, a.breed, a.sex, a.birth_month, a.birth_year,
        1 if a.neutered else 0, a.admission_timestamp, a.status.to_db(),
        a.image_path, a.appearance, a.bio,
    )


def insert(conn: Connection, animal_id: str, a: Animal) -> int:
    cur = conn.execute(
        f"INSERT INTO animals({_COLUMNS}) VALUES(?,?,?,?,?,?,?,?,?,?,?,?,?)",
        (animal_id, *_values(a)),
    )
    return cur.rowcount


def update(conn: Connection, a: Animal) -> int:
    cur = conn.execute(
        "UPDATE animals SET name=?, specie=?, breed=?, sex=?, birth_month=?, birth_year=?, neutered=?, "
        "admission_timestamp=?, status=?, image_path=?, appearance=?, bio=? WHERE id=?",
        (*_values(a), a.id),
    )
    return cur.rowcount


def delete(conn: Connection, animal_id: str) -> int:
    return conn.execute("DELETE FROM animals WHERE id=?", (animal_id,)).rowcount


def get_one(conn: Connection, animal_id: str):
    return conn.execute(f"SELECT {_COLUMNS} FROM animals WHERE id=?", (animal_id,)).fetchone()


def list_summaries(conn: Connection, predicate: str = "", params: list | None = None):
    sql = f"SELECT {SUMMARY_COLUMNS} FROM animals"
    if predicate:
        sql += " WHERE " + predicate
    sql += " ORDER BY CAST(id AS INTEGER), id"
    return conn.execute(sql, params or []).fetchall()
