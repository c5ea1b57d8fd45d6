"""
Application context handed to every command handler.

Services are built lazily on first use. The context lock only guards that
construction; each store serializes its own database access, and the file
picker runs with no lock held at all.
"""
from __future__ import annotations

import threading
from typing import Optional

from .config import get_auth_db_path, get_db_path, get_files_root
from .logs import LogContext, ensure_log_schema
from .security import PasswordHasher
from .services.auth_svc import CredentialStore
from .services.file_svc import FileService
from .services.record_store import RecordStore


class AppContext:
    def __init__(
        self,
        db_path: str,
        auth_db_path: str,
        files_root: str,
        hasher: PasswordHasher | None = None,
    ):
        self.db_path = db_path
        self.auth_db_path = auth_db_path
        self.files_root = files_root
        self._hasher = hasher
        self._lock = threading.Lock()
        self._records: Optional[RecordStore] = None
        self._credentials: Optional[CredentialStore] = None
        self._files: Optional[FileService] = None

    @classmethod
    def from_config(cls) -> "AppContext":
        return cls(get_db_path(), get_auth_db_path(), get_files_root())

    @property
    def records(self) -> RecordStore:
        with self._lock:
            if self._records is None:
                self._records = RecordStore(self.db_path)
                ensure_log_schema(self.db_path)
            return self._records

    @property
    def credentials(self) -> CredentialStore:
        with self._lock:
            if self._credentials is None:
                self._credentials = CredentialStore(self.auth_db_path, self._hasher)
            return self._credentials

    @property
    def files(self) -> FileService:
        with self._lock:
            if self._files is None:
                self._files = FileService(self.files_root)
            return self._files

    def acting_user(self) -> str:
        """Username for the operation log; 'anonymous' with no session."""
        return self.credentials.current_username or "anonymous"

    def open_log(self, action: str) -> LogContext:
        # operation_log lives in the records database, created alongside it
        _ = self.records
        return LogContext(action, self.acting_user(), self.db_path)


_default: Optional[AppContext] = None
_default_lock = threading.Lock()


def get_context() -> AppContext:
    global _default
    with _default_lock:
        if _default is None:
            _default = AppContext.from_config()
        return _default


def set_context(ctx: Optional[AppContext]) -> None:
    global _default
    with _default_lock:
        _default = ctx
