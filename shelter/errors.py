from __future__ import annotations

import sqlite3


class ShelterError(Exception):
    code = "shelter_error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(ShelterError, ValueError):
    """Bad caller-supplied data."""

    code = "invalid_input"
    status_code = 400


class Conflict(ShelterError):
    """Uniqueness or referential violation."""

    code = "conflict"
    status_code = 409


class Invariant(ShelterError):
    """Unexpected affected-row count or dangling session state."""

    code = "invariant"
    status_code = 500


class BackendError(ShelterError):
    code = "backend_error"
    status_code = 500


class DecodeError(ShelterError, ValueError):
    """A stored value does not map to any known enum member."""

    code = "decode_error"
    status_code = 500


def from_sqlite(exc: sqlite3.Error, context: str) -> ShelterError:
    """Wrap an sqlite3 failure; the caller raises it `from exc`."""
    if isinstance(exc, sqlite3.IntegrityError):
        return Conflict(context)
    return BackendError(context)


def describe(exc: BaseException) -> str:
    """Render an exception and its causes as `outer: cause: root`."""
    parts: list[str] = []
    seen: set[int] = set()
    cur: BaseException | None = exc
    while cur is not None and id(cur) not in seen:
        seen.add(id(cur))
        text = str(cur) or type(cur).__name__
        if not parts or parts[-1] != text:
            parts.append(text)
        cur = cur.__cause__
    return ": ".join(parts)
