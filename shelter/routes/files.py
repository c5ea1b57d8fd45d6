from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..context import AppContext, get_context
from .deps import fail

router = APIRouter()


class UploadBody(BaseModel):
    # Path chosen in the desktop file dialog; null when the user cancelled.
    source_path: Optional[str] = None


class DeleteFileBody(BaseModel):
    path: str


@router.post("/api/files/upload")
def api_files_upload(body: UploadBody, ctx: AppContext = Depends(get_context)):
    try:
        dest = ctx.files.upload(lambda: body.source_path)
        return {"path": str(dest) if dest else None}
    except Exception as e:
        raise fail(e)


@router.post("/api/files/delete")
def api_files_delete(body: DeleteFileBody, ctx: AppContext = Depends(get_context)):
    log = ctx.open_log("FILE_DELETE")
    log.set_entity("file", body.path)
    try:
        ctx.files.delete(body.path)
        log.write("OK")
        return {"message": "ok"}
    except Exception as e:
        raise fail(e, log)
