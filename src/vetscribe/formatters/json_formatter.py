"""JSON export: the report plus the structured stage outputs behind it."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from vetscribe.exceptions import NotFoundError
from vetscribe.models import ExamRecord


class JSONFormatter:
    """Renders the report and its Facts/Impression/Analysis as indented JSON bytes.

    Pass ``include_transcript=True`` to also embed the normalized transcript.
    """

    def format(self, record: ExamRecord, **kwargs: Any) -> bytes:
        if not record.report:
            raise NotFoundError(f"Exam {record.exam_id} has no report (generate it first)")
        doc: dict[str, Any] = {
            "examId": record.exam_id,
            "report": record.report,
            "reportMeta": record.report_meta.model_dump(by_alias=True) if record.report_meta else None,
            "facts": record.facts.model_dump(by_alias=True) if record.facts else None,
            "impression": record.impression.model_dump(by_alias=True) if record.impression else None,
            "analysis": record.analysis.model_dump(by_alias=True) if record.analysis else None,
            "validation": record.validation,
            "transcriptQuality": (
                record.transcript_quality.model_dump(by_alias=True) if record.transcript_quality else None
            ),
        }
        if kwargs.get("include_transcript"):
            doc["transcript"] = record.transcript
        return json.dumps(doc, indent=2, ensure_ascii=False, default=str).encode("utf-8")

    def format_to_file(self, record: ExamRecord, path: Path, **kwargs: Any) -> Path:
        path.write_bytes(self.format(record, **kwargs))
        return path

    @property
    def content_type(self) -> str:
        return "application/json"
