"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe; 200 whenever the process is up."""
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request) -> JSONResponse:
    """Readiness probe; 503 until the pipeline context has been built."""
    ctx = getattr(request.app.state, "context", None)
    if ctx is None:
        return JSONResponse(status_code=503, content={"status": "starting"})
    return JSONResponse(
        content={
            "status": "ready",
            "model": ctx.client.model,
            "persistence": ctx.settings.persistence.backend,
            "validation": ctx.rules_engine is not None,
        }
    )
