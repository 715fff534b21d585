"""Plain-text report export."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from vetscribe.exceptions import NotFoundError
from vetscribe.models import ExamRecord


class TextFormatter:
    """Emits the rendered report exactly as stored."""

    def format(self, record: ExamRecord, **kwargs: Any) -> bytes:
        if not record.report:
            raise NotFoundError(f"Exam {record.exam_id} has no report (generate it first)")
        text = record.report if record.report.endswith("\n") else record.report + "\n"
        return text.encode("utf-8")

    def format_to_file(self, record: ExamRecord, path: Path, **kwargs: Any) -> Path:
        path.write_bytes(self.format(record, **kwargs))
        return path

    @property
    def content_type(self) -> str:
        return "text/plain; charset=utf-8"
