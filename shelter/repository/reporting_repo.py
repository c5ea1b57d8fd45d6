from __future__ import annotations

from sqlite3 import Connection

from ..domain.models import AnimalStatus, RequestStatus


def adoption_report_sql(predicate: str = "") -> str:
    """
    Adopted animals, one row each, paired with their latest approved request.
    Bind with `adoption_report_params`.
    """
    sql = (
        "SELECT an.id AS animal_id, an.name AS animal_name, an.specie, an.breed, an.sex, "
        "an.admission_timestamp, an.status AS animal_status, an.image_path, "
        "ar.id AS request_id, ar.username, ar.name AS adopter_name, ar.email, ar.tel_number, "
        "ar.address, ar.occupation, ar.annual_income, ar.num_people, ar.num_children, "
        "ar.request_timestamp, ar.adoption_timestamp, ar.status AS request_status, ar.country "
        "FROM adoption_requests ar JOIN animals an ON an.id = ar.animal_id "
        "WHERE an.status = ? AND ar.status = ? "
        "AND ar.id = ("
        "SELECT latest.id FROM adoption_requests latest "
        "WHERE latest.animal_id = an.id AND latest.status = ? "
        "ORDER BY latest.adoption_timestamp DESC, CAST(latest.id AS INTEGER) DESC, latest.id DESC "
        "LIMIT 1)"
    )
    if predicate:
        # Filter predicates are written against the bare `animals` table.
        sql += f" AND an.id IN (SELECT id FROM animals WHERE {predicate})"
    sql += " ORDER BY ar.adoption_timestamp DESC, ar.id"
    return sql


def adoption_report_params(predicate_params: list | None = None) -> list:
    approved = RequestStatus.APPROVED.to_db()
    return [AnimalStatus.ADOPTED.to_db(), approved, approved, *(predicate_params or [])]


def adoption_report(conn: Connection, predicate_params: list | None = None, predicate: str = ""):
    return conn.execute(adoption_report_sql(predicate), adoption_report_params(predicate_params)).fetchall()
