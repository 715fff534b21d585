"""FastAPI application with lifespan management."""

from __future__ import annotations

import importlib.metadata
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from vetscribe.api.middleware.error_handler import register_error_handlers
from vetscribe.api.routes import exams, health
from vetscribe.context import PipelineContext
from vetscribe.core.config import APIConfig, AppSettings
from vetscribe.core.startup_checks import validate_settings
from vetscribe.hooks import setup_logging


def _get_version() -> str:
    """Read package version from installed metadata, with dev fallback."""
    try:
        return importlib.metadata.version("vetscribe")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0-dev"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build settings and the pipeline context once per process.

    A context already placed on ``app.state`` (tests) is left alone.
    """
    if getattr(app.state, "context", None) is None:
        settings = AppSettings()
        validate_settings(settings)
        setup_logging(settings.observability)
        app.state.settings = settings
        app.state.context = PipelineContext.from_settings(settings)
    yield


_api_config = APIConfig()

app = FastAPI(
    title=_api_config.title,
    description=_api_config.description,
    version=_get_version(),
    lifespan=lifespan,
)
register_error_handlers(app)

app.include_router(health.router)
app.include_router(exams.router, prefix="/api")
