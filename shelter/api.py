"""
FastAPI app exposing the shelter operations to the desktop front end.
Keep as `uvicorn shelter.api:app`.
"""
from __future__ import annotations


from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_log_level
from .logs import configure_logging


app = FastAPI(title="shelter-records-api", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:1420",
        "http://127.0.0.1:1420",
        "tauri://localhost",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    configure_logging(get_log_level())


@app.exception_handler(RequestValidationError)
async def on_validation_error(request: Request, exc: RequestValidationError):
    # Flatten pydantic errors into one line, e.g. "status: Value error, unknown animal status: lost"
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())[1:])
        parts.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return JSONResponse(status_code=422, content={"detail": "; ".join(parts)})


# Include routers (split by business domain)
from .routes import base as base_routes
from .routes import animals as animal_routes
from .routes import adoption_requests as request_routes
from .routes import auth as auth_routes
from .routes import files as file_routes
from .routes import reports as report_routes
from .routes import logs as logs_routes

app.include_router(base_routes.router)
app.include_router(animal_routes.router)
app.include_router(request_routes.router)
app.include_router(auth_routes.router)
app.include_router(file_routes.router)
app.include_router(report_routes.router)
app.include_router(logs_routes.router)
