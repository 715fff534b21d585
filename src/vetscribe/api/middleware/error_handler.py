"""Global exception handlers mapping domain exceptions to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from vetscribe.exceptions import (
    InsufficientDataError,
    MalformedOutputError,
    NotFoundError,
    UpstreamError,
    ValidationError,
    VetScribeError,
)

log = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register exception-to-HTTP-status mappings."""

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc), "type": "validation_error"})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": str(exc), "type": "not_found"})

    @app.exception_handler(MalformedOutputError)
    async def handle_malformed(request: Request, exc: MalformedOutputError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"error": str(exc), "type": "malformed_output", "rawPreview": exc.raw_previews},
        )

    @app.exception_handler(InsufficientDataError)
    async def handle_insufficient(request: Request, exc: InsufficientDataError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"error": str(exc), "type": "insufficient_data"})

    @app.exception_handler(UpstreamError)
    async def handle_upstream(request: Request, exc: UpstreamError) -> JSONResponse:
        log.warning("Upstream failure on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=502, content={"error": str(exc), "type": "upstream_error"})

    @app.exception_handler(VetScribeError)
    async def handle_generic_error(request: Request, exc: VetScribeError) -> JSONResponse:
        log.error("Unhandled pipeline error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": str(exc), "type": "vetscribe_error"})
