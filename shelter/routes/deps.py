from __future__ import annotations

from fastapi import HTTPException

from ..errors import ShelterError, describe
from ..logs import LogContext


def fail(e: Exception, log: LogContext | None = None) -> HTTPException:
    """Collapse any failure into an HTTPException carrying a readable message."""
    detail = describe(e)
    if log is not None:
        log.write("ERROR", detail)
    status = e.status_code if isinstance(e, ShelterError) else 500
    return HTTPException(status_code=status, detail=detail)
