from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator

from ..context import AppContext, get_context
from ..domain.models import USER_ROLE_CODEC, UserRole
from .deps import fail

router = APIRouter()


class SignUpBody(BaseModel):
    username: str
    password: str
    role: str = "customer"

    @field_validator("role")
    @classmethod
    def _known_role(cls, v: str) -> str:
        if v not in USER_ROLE_CODEC.values():
            raise ValueError(f"unknown role: {v}")
        return v


class LogInBody(BaseModel):
    username: str
    password: str


@router.post("/api/auth/sign-up", status_code=201)
def api_sign_up(body: SignUpBody, ctx: AppContext = Depends(get_context)):
    log = ctx.open_log("SIGN_UP")
    log.set_entity("user", body.username)
    # never log the password
    log.set_payload({"username": body.username, "role": body.role})
    try:
        ctx.credentials.sign_up(body.username, body.password, UserRole.from_db(body.role))
        log.user = body.username
        log.write("OK")
        return {"message": "ok"}
    except Exception as e:
        raise fail(e, log)


@router.post("/api/auth/log-in")
def api_log_in(body: LogInBody, ctx: AppContext = Depends(get_context)):
    try:
        outcome = ctx.credentials.log_in(body.username, body.password)
        return {"result": outcome.value}
    except Exception as e:
        raise fail(e)


@router.get("/api/auth/current-user")
def api_current_user(ctx: AppContext = Depends(get_context)):
    try:
        user = ctx.credentials.get_current_user()
        return {"user": user.to_dict() if user else None}
    except Exception as e:
        raise fail(e)


@router.post("/api/auth/log-out")
def api_log_out(ctx: AppContext = Depends(get_context)):
    ctx.credentials.log_out()
    return {"message": "ok"}
