from __future__ import annotations

from sqlite3 import Connection

from ..domain.models import AdoptionRequest

_COLUMNS = (
    "id, animal_id, username, name, email, tel_number, address, occupation, annual_income, "
    "num_people, num_children, request_timestamp, adoption_timestamp, status, country"
)
_SUMMARY_COLUMNS = "id, animal_id, username, name, email, request_timestamp, status"


def ensure_schema(conn: Connection):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS adoption_requests (
            id TEXT PRIMARY KEY,
            animal_id TEXT NOT NULL,
            username TEXT NOT NULL,
            name TEXT NOT NULL,
            email TEXT NOT NULL,
            tel_number TEXT NOT NULL,
            address TEXT NOT NULL,
            occupation TEXT NOT NULL,
            annual_income TEXT NOT NULL,
            num_people INTEGER NOT NULL,
            num_children INTEGER NOT NULL,
            request_timestamp INTEGER NOT NULL,
            adoption_timestamp INTEGER NOT NULL,
            status TEXT NOT NULL,
            country TEXT NOT NULL,
            FOREIGN KEY (animal_id) REFERENCES animals (id)
        )
        """
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_request_animal ON adoption_requests(animal_id)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_request_username ON adoption_requests(username)")


def next_id(conn: Connection) -> str:
    row = conn.execute("SELECT COALESCE(MAX(CAST(id AS INTEGER)), 0) AS m FROM adoption_requests").fetchone()
    return str(int(row["m"]) + 1)


def _values(r: AdoptionRequest) -> tuple:
    return (
        r.animal_id, r.username, r.name, r.email, r.tel_number, r.address, r.occupation,
        r.annual_income, r.num_people, r.num_children, r.request_timestamp,
        r.adoption_timestamp, r.status.to_db(), r.country,
    )


def insert(conn: Connection, request_id: str, r: AdoptionRequest) -> int:
    cur = conn.execute(
        f"INSERT INTO adoption_requests({_COLUMNS}) VALUES(?,?,?,?,?,?,?,?,?,?,?,?,?,?,?)",
        (request_id, *_values(r)),
    )
    return cur.rowcount


def update(conn: Connection, r: AdoptionRequest) -> int:
    cur = conn.execute(
        "UPDATE adoption_requests SET animal_id=?, username=?, name=?, email=?, tel_number=?, address=?, "
        "occupation=?, annual_income=?, num_people=?, num_children=?, request_timestamp=?, "
        "adoption_timestamp=?, status=?, country=? WHERE id=?",
        (*_values(r), r.id),
    )
    return cur.rowcount


def delete(conn: Connection, request_id: str) -> int:
    return conn.execute("DELETE FROM adoption_requests WHERE id=?", (request_id,)).rowcount


def get_one(conn: Connection, request_id: str):
    return conn.execute(f"SELECT {_COLUMNS} FROM adoption_requests WHERE id=?", (request_id,)).fetchone()


def list_by_animal(conn: Connection, animal_id: str):
    return conn.execute(
        f"SELECT {_COLUMNS} FROM adoption_requests WHERE animal_id=? ORDER BY request_timestamp, id",
        (animal_id,),
    ).fetchall()


def list_by_username(conn: Connection, username: str):
    return conn.execute(
        f"SELECT {_COLUMNS} FROM adoption_requests WHERE username=? ORDER BY request_timestamp, id",
        (username,),
    ).fetchall()


def list_summaries(conn: Connection, predicate: str = "", params: list | None = None):
    sql = f"SELECT {_SUMMARY_COLUMNS} FROM adoption_requests"
    if predicate:
        sql += " WHERE " + predicate
    sql += " ORDER BY CAST(id AS INTEGER), id"
    return conn.execute(sql, params or []).fetchall()
