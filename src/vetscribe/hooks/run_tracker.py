"""Per-stage timing and structlog context binding.

Usage::

    with track_stage("facts", exam_id="exam-1", version="facts-v13") as meta:
        meta.telemetry["usedRetry"] = False
    record.facts_meta = meta
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Generator

import structlog

from vetscribe.models import StageMeta


@contextmanager
def track_stage(stage: str, *, exam_id: str = "", version: str = "") -> Generator[StageMeta, None, None]:
    """Yield a ``StageMeta`` whose ``duration_ms`` is filled on exit.

    ``exam_id`` and ``stage`` are bound into structlog contextvars for the
    duration of the block so every log line in between carries them.
    """
    meta = StageMeta(version=version or stage)
    structlog.contextvars.bind_contextvars(exam_id=exam_id, stage=stage)
    started = time.perf_counter()
    try:
        yield meta
    finally:
        meta.duration_ms = round((time.perf_counter() - started) * 1000, 1)
        structlog.contextvars.unbind_contextvars("exam_id", "stage")
