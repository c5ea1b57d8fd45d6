from __future__ import annotations

from fastapi import APIRouter, Depends

from ..context import AppContext, get_context
from ..logs import search_operation_logs

router = APIRouter()


@router.get("/api/logs/search")
def api_logs_search(
    page: int = 1,
    size: int = 20,
    action: str | None = None,
    query: str | None = None,
    ts_from: str | None = None,
    ts_to: str | None = None,
    ctx: AppContext = Depends(get_context),
):
    _ = ctx.records  # creates operation_log on first use
    total, items = search_operation_logs(query, action, ts_from, ts_to, page, size, db_path=ctx.db_path)
    return {"total": total, "items": items}
