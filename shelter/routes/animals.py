from __future__ import annotations

import time
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, field_validator

from ..context import AppContext, get_context
from ..domain.filters import ANIMAL_CRITERIA, parse_filters
from ..domain.models import ANIMAL_STATUS_CODEC, Animal, AnimalStatus
from ..errors import InvalidInput
from .deps import fail

router = APIRouter()


class AnimalBody(BaseModel):
    id: str = ""
    name: str
    specie: str
    breed: str
    sex: str
    birth_month: Optional[int] = None
    birth_year: Optional[int] = None
    neutered: bool = False
    admission_timestamp: Optional[int] = None
    status: str = "available"
    image_path: Optional[str] = None
    appearance: str = ""
    bio: str = ""

    @field_validator("status")
    @classmethod
    def _known_status(cls, v: str) -> str:
        if v not in ANIMAL_STATUS_CODEC.values():
            raise ValueError(f"unknown animal status: {v}")
        return v

    def to_model(self) -> Animal:
        if self.admission_timestamp is None:
            raise InvalidInput("admission_timestamp is required")
        return Animal(
            id=self.id,
            name=self.name,
            specie=self.specie,
            breed=self.breed,
            sex=self.sex,
            birth_month=self.birth_month,
            birth_year=self.birth_year,
            neutered=self.neutered,
            admission_timestamp=self.admission_timestamp,
            status=AnimalStatus.from_db(self.status),
            image_path=self.image_path,
            appearance=self.appearance,
            bio=self.bio,
        )


class FilterBody(BaseModel):
    filters: Optional[dict[str, Any]] = None


@router.post("/api/animals/list")
def api_animals_list(body: FilterBody, ctx: AppContext = Depends(get_context)):
    try:
        filters = parse_filters(body.filters, ANIMAL_CRITERIA)
        items = ctx.records.list_animals(filters)
        return {"items": [a.to_dict() for a in items]}
    except Exception as e:
        raise fail(e)


@router.get("/api/animals/{animal_id}")
def api_animals_get(animal_id: str, ctx: AppContext = Depends(get_context)):
    try:
        animal = ctx.records.get_animal(animal_id)
        return {"item": animal.to_dict() if animal else None}
    except Exception as e:
        raise fail(e)


@router.post("/api/animals/create", status_code=201)
def api_animals_create(body: AnimalBody, ctx: AppContext = Depends(get_context)):
    log = ctx.open_log("ANIMAL_CREATE")
    log.set_payload(body.model_dump())
    try:
        if body.admission_timestamp is None:
            body.admission_timestamp = int(time.time())
        animal_id = ctx.records.insert_animal(body.to_model())
        log.set_entity("animal", animal_id)
        log.write("OK")
        return {"message": "ok", "id": animal_id}
    except Exception as e:
        raise fail(e, log)


@router.post("/api/animals/update")
def api_animals_update(body: AnimalBody, ctx: AppContext = Depends(get_context)):
    log = ctx.open_log("ANIMAL_UPDATE")
    log.set_entity("animal", body.id)
    log.set_payload(body.model_dump())
    try:
        before = ctx.records.get_animal(body.id)
        log.set_before(before.to_dict() if before else None)
        updated = ctx.records.update_animal(body.to_model())
        log.write("OK" if updated else "NOT_FOUND")
        return {"updated": updated}
    except Exception as e:
        raise fail(e, log)


@router.post("/api/animals/delete")
def api_animals_delete(animal_id: str = Body(..., embed=True), ctx: AppContext = Depends(get_context)):
    log = ctx.open_log("ANIMAL_DELETE")
    log.set_entity("animal", animal_id)
    try:
        before = ctx.records.get_animal(animal_id)
        log.set_before(before.to_dict() if before else None)
        deleted = ctx.records.delete_animal(animal_id)
        log.write("OK" if deleted else "NOT_FOUND")
        return {"deleted": deleted}
    except Exception as e:
        raise fail(e, log)
