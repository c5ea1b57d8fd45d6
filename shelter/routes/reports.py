from __future__ import annotations

from fastapi import APIRouter, Depends

from ..context import AppContext, get_context
from ..domain.filters import ANIMAL_CRITERIA, parse_filters
from .animals import FilterBody
from .deps import fail

router = APIRouter()


@router.post("/api/reports/adoptions")
def api_adoption_report(body: FilterBody, ctx: AppContext = Depends(get_context)):
    try:
        filters = parse_filters(body.filters, ANIMAL_CRITERIA)
        rows = ctx.records.adoption_report(filters)
        return {
            "items": [
                {"animal": r["animal"].to_dict(), "adoption": r["adoption"].to_dict()}
                for r in rows
            ]
        }
    except Exception as e:
        raise fail(e)
