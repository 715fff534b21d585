"""Output formatter protocol for exporting a finished exam."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from vetscribe.models import ExamRecord


@runtime_checkable
class IOutputFormatter(Protocol):
    """Renders an :class:`ExamRecord` (with a report) into bytes."""

    def format(self, record: ExamRecord, **kwargs: Any) -> bytes: ...

    def format_to_file(self, record: ExamRecord, path: Path, **kwargs: Any) -> Path:
        """Render and write to ``path``. Returns the output path."""
        ...

    @property
    def content_type(self) -> str:
        """MIME type, e.g. ``text/plain; charset=utf-8``."""
        ...


__all__ = ["IOutputFormatter"]
