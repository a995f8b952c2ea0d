"""
Main entrypoint for the Library API.

This module assembles the FastAPI application, sets up logging,
registers the error envelope handlers, mounts the blob storage and
includes the versioned routers.  ``create_app`` builds and configures
the app, which is then instantiated at module import time as ``app``::

    uvicorn library_api.app.main:app --reload

Every error leaves the API as ``{"errors": {<field or "message">:
[<messages>]}}``.  Request validation failures answer 400 (not
FastAPI's default 422) with Laravel style wording such as ``The first
name field is required.``
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db, resolve_path
from .core.errors import UNAUTHENTICATED_MESSAGE, ServiceError
from .core.logging_config import setup_logging
from .schemas.common import label

LOCATIONS = ("body", "query", "path", "header", "cookie")


def _error_response(status_code: int, errors: Dict[str, List[str]]) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content={"errors": errors}, headers=headers)


def _field_name(loc: Sequence[Any]) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in LOCATIONS:
        parts = parts[1:]
    return ".".join(parts) or "message"


def _validation_message(error: Dict[str, Any], field: str) -> str:
    name = label(field.split(".")[-1]) if field != "message" else "request body"
    kind = error.get("type", "")
    ctx = error.get("ctx") or {}
    if kind == "missing":
        return f"The {name} field is required."
    if kind == "string_too_long":
        return f"The {name} field must not be greater than {ctx.get('max_length')} characters."
    if kind == "string_too_short":
        return f"The {name} field must be at least {ctx.get('min_length')} characters."
    if kind == "value_error" and "error" in ctx:
        return str(ctx["error"])
    if kind == "literal_error":
        return f"The selected {name} is invalid."
    if kind in ("int_parsing", "int_type", "int_from_float"):
        return f"The {name} field must be an integer."
    if kind.startswith("date"):
        return f"The {name} field must be a valid date."
    if kind == "string_type":
        return f"The {name} field must be a string."
    return error.get("msg", "Invalid value.")


def validation_errors(errors: Sequence[Dict[str, Any]]) -> Dict[str, List[str]]:
    """Group pydantic errors by field in request order."""
    grouped: Dict[str, List[str]] = {}
    for error in errors:
        field = _field_name(error.get("loc", ()))
        message = _validation_message(error, field)
        if message not in grouped.setdefault(field, []):
            grouped[field].append(message)
    return grouped


def register_exception_handlers(app: FastAPI) -> None:
    logger = logging.getLogger(__name__)

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return _error_response(exc.status_code, exc.errors)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(400, validation_errors(exc.errors()))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 401:
            return _error_response(401, {"message": [UNAUTHENTICATED_MESSAGE]})
        return _error_response(exc.status_code, {"message": [str(exc.detail)]})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(500, {"message": ["Server error."]})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Apply migrations and make sure the default user categories exist.
    init_db(seed=True)
    yield


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Reads ``settings`` when called, so tests that point the database or
    the storage directory elsewhere build their own app after changing
    them.
    """
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    register_exception_handlers(app)

    app.include_router(v1_router, prefix=settings.api_prefix)

    storage_root = resolve_path(settings.storage_dir)
    os.makedirs(storage_root, exist_ok=True)
    app.mount(settings.storage_url, StaticFiles(directory=storage_root, check_dir=False), name="storage")

    return app


app = create_app()
