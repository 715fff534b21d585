"""vetscribe: veterinary ultrasound transcript to structured report.

Typical use::

    from vetscribe import AppSettings, ExamPipeline, PipelineContext

    ctx = PipelineContext.from_settings(AppSettings())
    record = await ExamPipeline(ctx).run_all("exam-1", transcript=text)
    print(record.report)
"""

from __future__ import annotations

from vetscribe.context import PipelineContext
from vetscribe.core.config import AppSettings
from vetscribe.exceptions import (
    InsufficientDataError,
    MalformedOutputError,
    NotFoundError,
    UpstreamError,
    ValidationError,
    VetScribeError,
)
from vetscribe.models import Analysis, ExamRecord, Facts, Impression, TranscriptQuality
from vetscribe.quality import compute_transcript_quality
from vetscribe.services.pipeline import ExamPipeline

__all__ = [
    "Analysis",
    "AppSettings",
    "ExamPipeline",
    "ExamRecord",
    "Facts",
    "Impression",
    "InsufficientDataError",
    "MalformedOutputError",
    "NotFoundError",
    "PipelineContext",
    "TranscriptQuality",
    "UpstreamError",
    "ValidationError",
    "VetScribeError",
    "compute_transcript_quality",
]
