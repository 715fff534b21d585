"""Exam endpoints: transcript ingest, per-stage runs, record and report retrieval."""

from __future__ import annotations

import re
from typing import Any, Literal

from fastapi import APIRouter, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field

from vetscribe.formatters import get_formatter
from vetscribe.models import ExamRecord
from vetscribe.services.pipeline import ExamPipeline

router = APIRouter(tags=["exams"])

StageName = Literal["facts", "impression", "validation", "analysis", "report", "all"]


class TranscriptRequest(BaseModel):
    """Externally produced transcript text."""

    text: str = Field(min_length=1)


class StageResponse(BaseModel):
    exam_id: str
    stage: str
    ok: bool = True
    errors: dict[str, Any] = Field(default_factory=dict)
    record: dict[str, Any]


def _pipeline(req: Request) -> ExamPipeline:
    return ExamPipeline(req.app.state.context)


def _response(record: ExamRecord, stage: str) -> StageResponse:
    dumped = record.model_dump(by_alias=True)
    return StageResponse(
        exam_id=record.exam_id,
        stage=stage,
        ok=stage not in record.errors,
        errors=dumped.get("errors", {}),
        record=dumped,
    )


@router.put("/exams/{exam_id}/transcript", response_model=StageResponse)
async def put_transcript(exam_id: str, body: TranscriptRequest, req: Request) -> StageResponse:
    """Store a transcript, then score and normalize it."""
    record = await _pipeline(req).ingest_transcript(exam_id, body.text)
    return _response(record, "transcript")


@router.post("/exams/{exam_id}/{stage}", response_model=StageResponse)
async def run_stage(exam_id: str, stage: StageName, req: Request) -> StageResponse:
    """Run one stage (or ``all`` remaining stages) for an exam with a stored transcript."""
    pipeline = _pipeline(req)
    if stage == "all":
        record = await pipeline.run_all(exam_id)
    else:
        record = await pipeline.run_stage(exam_id, stage)
    return _response(record, stage)


@router.get("/exams/{exam_id}")
async def get_exam(exam_id: str, req: Request) -> dict[str, Any]:
    return req.app.state.context.store.load(exam_id).model_dump(by_alias=True)


@router.get("/exams/{exam_id}/report")
async def get_report(
    exam_id: str, req: Request, output_format: Literal["text", "json"] = "text"
) -> Response:
    """Report export as plain text (default) or JSON."""
    record = req.app.state.context.store.load(exam_id)
    formatter = get_formatter(output_format)
    safe_id = re.sub(r"[^\w\-]", "_", exam_id)
    ext = "txt" if output_format == "text" else "json"
    return Response(
        content=formatter.format(record),
        media_type=formatter.content_type,
        headers={"Content-Disposition": f'inline; filename="report_{safe_id}.{ext}"'},
    )
