from __future__ import annotations

import logging
import sqlite3
import threading
from typing import Optional

from ..db import get_conn
from ..domain.models import CurrentUser, LoginOutcome, UserRole
from ..errors import Invariant, InvalidInput, from_sqlite
from ..repository import user_repo
from ..security import PasswordHasher

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class CredentialStore:
    """Sign-up / log-in against the credentials database, with one active session."""

    def __init__(self, db_path: str, hasher: PasswordHasher | None = None):
        self.db_path = db_path
        self.hasher = hasher or PasswordHasher()
        self._lock = threading.Lock()
        self._current_user: Optional[str] = None
        try:
            with get_conn(db_path) as conn:
                user_repo.ensure_schema(conn)
        except sqlite3.Error as e:
            raise from_sqlite(e, f"Failed to initialize credentials table at {db_path}") from e
        logger.debug("Credential store initialized at %s", db_path)

    @property
    def current_username(self) -> Optional[str]:
        return self._current_user

    def sign_up(self, username: str, password: str, role: UserRole) -> None:
        if not username or not username.strip():
            raise InvalidInput("Username cannot be empty")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidInput(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

        password_hash = self.hasher.hash(password)
        try:
            with self._lock, get_conn(self.db_path) as conn:
                n = user_repo.insert(conn, username, password_hash, role.to_db())
        except sqlite3.Error as e:
            raise from_sqlite(e, f"Failed to create user account {username}") from e
        if n != 1:
            raise Invariant(f"Unexpected number of rows affected when creating user: {n}")

        with self._lock:
            self._current_user = username
        logger.info("User account created and logged in: %s", username)

    def log_in(self, username: str, password: str) -> LoginOutcome:
        try:
            with self._lock, get_conn(self.db_path) as conn:
                stored_hash = user_repo.get_password_hash(conn, username)
        except sqlite3.Error as e:
            raise from_sqlite(e, f"Failed to look up user {username}") from e
        if stored_hash is None:
            logger.warning("Login attempt for non-existent username: %s", username)
            return LoginOutcome.USER_NOT_FOUND

        try:
            valid = self.hasher.verify(password, stored_hash)
        except (ValueError, TypeError) as e:
            raise Invariant(f"Failed to verify password for {username}") from e

        if not valid:
            logger.warning("Invalid password for username: %s", username)
            return LoginOutcome.INVALID_PASSWORD
        with self._lock:
            self._current_user = username
        logger.info("User logged in: %s", username)
        return LoginOutcome.SUCCESS

    def get_current_user(self) -> Optional[CurrentUser]:
        with self._lock:
            username = self._current_user
            if username is None:
                return None
            try:
                with get_conn(self.db_path) as conn:
                    raw_role = user_repo.get_role(conn, username)
            except sqlite3.Error as e:
                raise from_sqlite(e, f"Failed to look up role for {username}") from e
        if raw_role is None:
            raise Invariant(f"Current user not found in database: {username}")
        return CurrentUser(username=username, role=UserRole.from_db(raw_role))

    def log_out(self) -> None:
        with self._lock:
            username, self._current_user = self._current_user, None
        if username is None:
            logger.debug("No user was logged in to log out")
        else:
            logger.info("User logged out: %s", username)

    def delete_user(self, username: str) -> bool:
        try:
            with self._lock, get_conn(self.db_path) as conn:
                n = user_repo.delete(conn, username)
                if n == 1 and self._current_user == username:
                    self._current_user = None
        except sqlite3.Error as e:
            raise from_sqlite(e, f"Failed to delete user {username}") from e
        if n > 1:
            raise Invariant(f"Unexpected number of rows affected when deleting user: {n}")
        if n == 0:
            logger.warning("No user found with username: %s for deletion", username)
        return n == 1
