"""Tests for report export formatters."""

from __future__ import annotations

import json

import pytest

from vetscribe.exceptions import NotFoundError
from vetscribe.formatters import IOutputFormatter, JSONFormatter, TextFormatter, get_formatter
from vetscribe.models import ExamRecord, StageMeta, TranscriptQuality


@pytest.fixture
def record(sample_facts, sample_impression) -> ExamRecord:
    return ExamRecord(
        exam_id="exam-7",
        transcript="Wątroba jednorodna.",
        transcript_quality=TranscriptQuality(score=82, flags=["QUALITY_GOOD"]),
        facts=sample_facts,
        impression=sample_impression,
        report="RAPORT BADANIA: USG jamy brzusznej",
        report_meta=StageMeta(version="report-template-v3-aggregated-rules"),
    )


class TestRegistry:
    @pytest.mark.parametrize(("name", "cls"), [("text", TextFormatter), ("json", JSONFormatter)])
    def test_get_formatter(self, name: str, cls: type) -> None:
        formatter = get_formatter(name)
        assert isinstance(formatter, cls)
        assert isinstance(formatter, IOutputFormatter)

    def test_unknown(self) -> None:
        with pytest.raises(KeyError, match="pdf"):
            get_formatter("pdf")


class TestTextFormatter:
    def test_report_with_trailing_newline(self, record) -> None:
        assert TextFormatter().format(record) == "RAPORT BADANIA: USG jamy brzusznej\n".encode("utf-8")
        assert TextFormatter().content_type.startswith("text/plain")

    def test_missing_report(self, record) -> None:
        with pytest.raises(NotFoundError):
            TextFormatter().format(record.model_copy(update={"report": None}))

    def test_format_to_file(self, record, tmp_path) -> None:
        path = TextFormatter().format_to_file(record, tmp_path / "report.txt")
        assert path.read_text(encoding="utf-8").startswith("RAPORT BADANIA")


class TestJSONFormatter:
    def test_document_shape(self, record) -> None:
        doc = json.loads(JSONFormatter().format(record))

        assert doc["examId"] == "exam-7"
        assert doc["report"].startswith("RAPORT")
        assert doc["reportMeta"]["version"] == "report-template-v3-aggregated-rules"
        assert doc["facts"]["exam"]["patientName"] == "Burek"
        assert doc["impression"]["doctorKeyConcerns"] == ["poszerzenie miedniczki lewej nerki"]
        assert doc["analysis"] is None
        assert doc["transcriptQuality"]["score"] == 82
        assert "transcript" not in doc

    def test_include_transcript(self, record) -> None:
        doc = json.loads(JSONFormatter().format(record, include_transcript=True))
        assert doc["transcript"] == "Wątroba jednorodna."

    def test_utf8_not_escaped(self, record) -> None:
        assert "Wątroba".encode("utf-8") in JSONFormatter().format(record, include_transcript=True)
