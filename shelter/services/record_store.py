"""
Record store for shelter data: animals and adoption requests.

One instance owns one database file. Every public method holds the instance
lock for its whole duration, so the blank-id max scan and the insert that
follows it cannot interleave with another writer in this process.
"""
from __future__ import annotations

import datetime as dt
import logging
import sqlite3
import threading
from typing import Iterable, Optional

from ..db import get_conn
from ..domain.filters import AnimalFilter, compile_filters
from ..domain.models import (
    AdoptionRequest,
    AdoptionRequestSummary,
    Animal,
    AnimalStatus,
    AnimalSummary,
    RequestStatus,
)
from ..errors import Invariant, from_sqlite
from ..repository import adoption_request_repo, animal_repo, reporting_repo

logger = logging.getLogger(__name__)


def _found(rows_affected: int, what: str) -> bool:
    if rows_affected == 1:
        return True
    if rows_affected == 0:
        return False
    raise Invariant(f"Unexpected number of rows affected when {what}: {rows_affected}")


class RecordStore:
    def __init__(self, db_path: str):
        self.db_path = db_path
        self._lock = threading.Lock()
        try:
            with get_conn(db_path) as conn:
                animal_repo.ensure_schema(conn)
                adoption_request_repo.ensure_schema(conn)
        except sqlite3.Error as e:
            raise from_sqlite(e, f"Failed to initialize database tables at {db_path}") from e
        logger.info("Record store initialized at %s", db_path)

    # ==================== animals ====================

    def list_animals(
        self,
        filters: Optional[Iterable[Optional[AnimalFilter]]] = None,
        now: dt.datetime | None = None,
    ) -> list[AnimalSummary]:
        predicate, params = compile_filters(filters, now)
        try:
            with self._lock, get_conn(self.db_path) as conn:
                rows = animal_repo.list_summaries(conn, predicate, params)
        except sqlite3.Error as e:
            raise from_sqlite(e, "Failed to query animals") from e
        out = [AnimalSummary.from_row(r) for r in rows]
        logger.debug("Retrieved %d animals", len(out))
        return out

    def get_animal(self, animal_id: str) -> Optional[Animal]:
        try:
            with self._lock, get_conn(self.db_path) as conn:
                row = animal_repo.get_one(conn, animal_id)
        except sqlite3.Error as e:
            raise from_sqlite(e, f"Failed to query animal {animal_id}") from e
        if row is None:
            logger.debug("No animal found with ID: %s", animal_id)
            return None
        return Animal.from_row(row)

    def insert_animal(self, animal: Animal) -> str:
        try:
            with self._lock, get_conn(self.db_path) as conn:
                animal_id = animal.id if animal.id.strip() else animal_repo.next_id(conn)
                n = animal_repo.insert(conn, animal_id, animal)
        except sqlite3.Error as e:
            raise from_sqlite(e, "Failed to insert animal") from e
        if n != 1:
            raise Invariant(f"Unexpected number of rows affected when inserting animal: {n}")
        logger.info("Inserted animal with ID: %s", animal_id)
        return animal_id

    def update_animal(self, animal: Animal) -> bool:
        try:
            with self._lock, get_conn(self.db_path) as conn:
                n = animal_repo.update(conn, animal)
        except sqlite3.Error as e:
            raise from_sqlite(e, f"Failed to update animal {animal.id}") from e
        found = _found(n, "updating animal")
        if found:
            logger.info("Updated animal with ID: %s", animal.id)
        else:
            logger.warning("No animal found with ID: %s for update", animal.id)
        return found

    def delete_animal(self, animal_id: str) -> bool:
        # Requests are not cascaded; the foreign key blocks deleting a referenced animal.
        try:
            with self._lock, get_conn(self.db_path) as conn:
                n = animal_repo.delete(conn, animal_id)
        except sqlite3.Error as e:
            raise from_sqlite(e, f"Failed to delete animal {animal_id}") from e
        found = _found(n, "deleting animal")
        if found:
            logger.info("Deleted animal with ID: %s", animal_id)
        else:
            logger.warning("No animal found with ID: %s for deletion", animal_id)
        return found

    # ==================== adoption requests ====================

    def list_adoption_requests(
        self,
        filters: Optional[Iterable[Optional[AnimalFilter]]] = None,
    ) -> list[AdoptionRequestSummary]:
        predicate, params = compile_filters(filters)
        try:
            with self._lock, get_conn(self.db_path) as conn:
                rows = adoption_request_repo.list_summaries(conn, predicate, params)
        except sqlite3.Error as e:
            raise from_sqlite(e, "Failed to query adoption requests") from e
        return [AdoptionRequestSummary.from_row(r) for r in rows]

    def list_requests_by_animal(self, animal_id: str) -> list[AdoptionRequest]:
        try:
            with self._lock, get_conn(self.db_path) as conn:
                rows = adoption_request_repo.list_by_animal(conn, animal_id)
        except sqlite3.Error as e:
            raise from_sqlite(e, f"Failed to query adoption requests for animal {animal_id}") from e
        logger.debug("Retrieved %d adoption requests for animal ID: %s", len(rows), animal_id)
        return [AdoptionRequest.from_row(r) for r in rows]

    def list_requests_by_username(self, username: str) -> list[AdoptionRequest]:
        try:
            with self._lock, get_conn(self.db_path) as conn:
                rows = adoption_request_repo.list_by_username(conn, username)
        except sqlite3.Error as e:
            raise from_sqlite(e, f"Failed to query adoption requests for user {username}") from e
        logger.debug("Retrieved %d adoption requests for user: %s", len(rows), username)
        return [AdoptionRequest.from_row(r) for r in rows]

    def get_adoption_request(self, request_id: str) -> Optional[AdoptionRequest]:
        try:
            with self._lock, get_conn(self.db_path) as conn:
                row = adoption_request_repo.get_one(conn, request_id)
        except sqlite3.Error as e:
            raise from_sqlite(e, f"Failed to query adoption request {request_id}") from e
        return AdoptionRequest.from_row(row) if row else None

    def insert_adoption_request(self, request: AdoptionRequest) -> str:
        try:
            with self._lock, get_conn(self.db_path) as conn:
                request_id = request.id if request.id.strip() else adoption_request_repo.next_id(conn)
                n = adoption_request_repo.insert(conn, request_id, request)
        except sqlite3.Error as e:
            raise from_sqlite(e, f"Failed to insert adoption request for animal {request.animal_id}") from e
        if n != 1:
            raise Invariant(f"Unexpected number of rows affected when inserting adoption request: {n}")
        logger.info("Inserted adoption request with ID: %s", request_id)
        return request_id

    def update_adoption_request(self, request: AdoptionRequest) -> bool:
        try:
            with self._lock, get_conn(self.db_path) as conn:
                n = adoption_request_repo.update(conn, request)
        except sqlite3.Error as e:
            raise from_sqlite(e, f"Failed to update adoption request {request.id}") from e
        found = _found(n, "updating adoption request")
        if found:
            logger.info("Updated adoption request with ID: %s", request.id)
        else:
            logger.warning("No adoption request found with ID: %s for update", request.id)
        return found

    def delete_adoption_request(self, request_id: str) -> bool:
        try:
            with self._lock, get_conn(self.db_path) as conn:
                n = adoption_request_repo.delete(conn, request_id)
        except sqlite3.Error as e:
            raise from_sqlite(e, f"Failed to delete adoption request {request_id}") from e
        found = _found(n, "deleting adoption request")
        if found:
            logger.info("Deleted adoption request with ID: %s", request_id)
        else:
            logger.warning("No adoption request found with ID: %s for deletion", request_id)
        return found

    # ==================== reports ====================

    def adoption_report(
        self,
        filters: Optional[Iterable[Optional[AnimalFilter]]] = None,
        now: dt.datetime | None = None,
    ) -> list[dict]:
        """
        Adopted animals that pass `filters`, one entry per animal, each with its
        latest approved request (highest adoption_timestamp, then highest id).
        """
        predicate, params = compile_filters(filters, now)
        try:
            with self._lock, get_conn(self.db_path) as conn:
                rows = reporting_repo.adoption_report(conn, params, predicate)
        except sqlite3.Error as e:
            raise from_sqlite(e, "Failed to build adoption report") from e

        out = []
        for r in rows:
            animal = AnimalSummary(
                id=r["animal_id"],
                name=r["animal_name"],
                specie=r["specie"],
                breed=r["breed"],
                sex=r["sex"],
                admission_timestamp=int(r["admission_timestamp"]),
                status=AnimalStatus.from_db(r["animal_status"]),
                image_path=r["image_path"],
            )
            adoption = AdoptionRequest(
                id=r["request_id"],
                animal_id=r["animal_id"],
                username=r["username"],
                name=r["adopter_name"],
                email=r["email"],
                tel_number=r["tel_number"],
                address=r["address"],
                occupation=r["occupation"],
                annual_income=r["annual_income"],
                num_people=int(r["num_people"]),
                num_children=int(r["num_children"]),
                request_timestamp=int(r["request_timestamp"]),
                adoption_timestamp=int(r["adoption_timestamp"]),
                status=RequestStatus.from_db(r["request_status"]),
                country=r["country"],
            )
            out.append({"animal": animal, "adoption": adoption})
        return out
