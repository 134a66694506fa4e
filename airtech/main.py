"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from airtech.api.router import api_router
from airtech.config import get_settings
from airtech.db.backends import backend_from_config
from airtech.db.repository import Repository
from airtech.services.tripletex import TripletexClient
from airtech.services.upload_store import URL_PREFIX

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    Path(settings.uploads.base_dir).mkdir(parents=True, exist_ok=True)

    repository = Repository(backend_from_config(settings.storage))
    await repository.load()
    pruned = await repository.prune_expired_sessions()
    if pruned:
        logger.info("Pruned %d expired sessions", pruned)

    tripletex = TripletexClient(settings.tripletex)
    if not tripletex.configured:
        logger.warning("Tripletex is not configured; customer import is disabled")

    app.state.settings = settings
    app.state.repository = repository
    app.state.tripletex = tripletex
    yield
    await tripletex.aclose()
    await repository.close()


app = FastAPI(
    title="Air-Tech Service",
    description="Orders, equipment checklists, service reports and quotes for HVAC field service.",
    version="0.3.0",
    lifespan=lifespan,
)

app.include_router(api_router)

# Uploaded photos and their thumbnails
app.mount(
    URL_PREFIX,
    StaticFiles(directory=settings.uploads.base_dir, check_dir=False),
    name="uploads",
)


# ── Error rendering: every error is {"error": message} ───

def _format_errors(errors) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": _format_errors(exc.errors())})


@app.exception_handler(ValidationError)
async def model_validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": _format_errors(exc.errors())})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})
