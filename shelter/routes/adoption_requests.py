from __future__ import annotations

import time
from typing import Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, field_validator

from ..context import AppContext, get_context
from ..domain.filters import REQUEST_CRITERIA, parse_filters
from ..domain.models import REQUEST_STATUS_CODEC, AdoptionRequest, RequestStatus
from ..errors import InvalidInput
from .animals import FilterBody
from .deps import fail

router = APIRouter()


class AdoptionRequestBody(BaseModel):
    id: str = ""
    animal_id: str
    username: str
    name: str
    email: str
    tel_number: str = ""
    address: str = ""
    occupation: str = ""
    annual_income: str = ""
    num_people: int = 1
    num_children: int = 0
    request_timestamp: Optional[int] = None
    adoption_timestamp: int = 0
    status: str = "pending"
    country: str = ""

    @field_validator("status")
    @classmethod
    def _known_status(cls, v: str) -> str:
        if v not in REQUEST_STATUS_CODEC.values():
            raise ValueError(f"unknown request status: {v}")
        return v

    def to_model(self) -> AdoptionRequest:
        if self.request_timestamp is None:
            raise InvalidInput("request_timestamp is required")
        return AdoptionRequest(
            id=self.id,
            animal_id=self.animal_id,
            username=self.username,
            name=self.name,
            email=self.email,
            tel_number=self.tel_number,
            address=self.address,
            occupation=self.occupation,
            annual_income=self.annual_income,
            num_people=self.num_people,
            num_children=self.num_children,
            request_timestamp=self.request_timestamp,
            adoption_timestamp=self.adoption_timestamp,
            status=RequestStatus.from_db(self.status),
            country=self.country,
        )


@router.post("/api/adoption-requests/list")
def api_requests_list(body: FilterBody, ctx: AppContext = Depends(get_context)):
    try:
        filters = parse_filters(body.filters, REQUEST_CRITERIA)
        items = ctx.records.list_adoption_requests(filters)
        return {"items": [r.to_dict() for r in items]}
    except Exception as e:
        raise fail(e)


@router.get("/api/adoption-requests/by-animal/{animal_id}")
def api_requests_by_animal(animal_id: str, ctx: AppContext = Depends(get_context)):
    try:
        return {"items": [r.to_dict() for r in ctx.records.list_requests_by_animal(animal_id)]}
    except Exception as e:
        raise fail(e)


@router.get("/api/adoption-requests/by-username/{username}")
def api_requests_by_username(username: str, ctx: AppContext = Depends(get_context)):
    try:
        return {"items": [r.to_dict() for r in ctx.records.list_requests_by_username(username)]}
    except Exception as e:
        raise fail(e)


@router.get("/api/adoption-requests/{request_id}")
def api_requests_get(request_id: str, ctx: AppContext = Depends(get_context)):
    try:
        req = ctx.records.get_adoption_request(request_id)
        return {"item": req.to_dict() if req else None}
    except Exception as e:
        raise fail(e)


@router.post("/api/adoption-requests/create", status_code=201)
def api_requests_create(body: AdoptionRequestBody, ctx: AppContext = Depends(get_context)):
    log = ctx.open_log("REQUEST_CREATE")
    log.set_payload(body.model_dump())
    try:
        if body.request_timestamp is None:
            body.request_timestamp = int(time.time())
        request_id = ctx.records.insert_adoption_request(body.to_model())
        log.set_entity("adoption_request", request_id)
        log.write("OK")
        return {"message": "ok", "id": request_id}
    except Exception as e:
        raise fail(e, log)


@router.post("/api/adoption-requests/update")
def api_requests_update(body: AdoptionRequestBody, ctx: AppContext = Depends(get_context)):
    log = ctx.open_log("REQUEST_UPDATE")
    log.set_entity("adoption_request", body.id)
    log.set_payload(body.model_dump())
    try:
        before = ctx.records.get_adoption_request(body.id)
        log.set_before(before.to_dict() if before else None)
        updated = ctx.records.update_adoption_request(body.to_model())
        log.write("OK" if updated else "NOT_FOUND")
        return {"updated": updated}
    except Exception as e:
        raise fail(e, log)


@router.post("/api/adoption-requests/delete")
def api_requests_delete(request_id: str = Body(..., embed=True), ctx: AppContext = Depends(get_context)):
    log = ctx.open_log("REQUEST_DELETE")
    log.set_entity("adoption_request", request_id)
    try:
        before = ctx.records.get_adoption_request(request_id)
        log.set_before(before.to_dict() if before else None)
        deleted = ctx.records.delete_adoption_request(request_id)
        log.write("OK" if deleted else "NOT_FOUND")
        return {"deleted": deleted}
    except Exception as e:
        raise fail(e, log)
