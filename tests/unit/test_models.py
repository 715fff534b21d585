"""Unit tests for data models and their camelCase wire form."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from vetscribe.models import (
    Analysis,
    ExamRecord,
    Facts,
    Impression,
    Measurement,
    TranscriptionHistory,
    TranscriptionRun,
    TranscriptQuality,
)


class TestFacts:
    def test_wire_aliases(self) -> None:
        facts = Facts.model_validate({"exam": {"bodyRegion": "jama brzuszna", "patientName": "Burek"}})
        assert facts.exam.body_region == "jama brzuszna"
        assert facts.model_dump(by_alias=True)["exam"]["patientName"] == "Burek"

    def test_null_lists_become_empty(self) -> None:
        facts = Facts.model_validate({"findings": None, "conditions": None, "measurements": None})
        assert facts.findings == []
        assert facts.is_empty()

    def test_reason_alone_is_not_empty(self) -> None:
        assert not Facts.model_validate({"exam": {"reason": "wymioty"}}).is_empty()

    def test_body_region_alone_is_empty(self) -> None:
        assert Facts.model_validate({"exam": {"bodyRegion": "jama brzuszna"}}).is_empty()


class TestMeasurement:
    def test_requires_a_value(self) -> None:
        with pytest.raises(ValidationError):
            Measurement(structure="nerka", value=[])


class TestImpression:
    def test_consent_literal(self) -> None:
        assert Impression(consent_recording="yes").consent_recording == "yes"
        with pytest.raises(ValidationError):
            Impression(consent_recording="maybe")

    def test_is_empty(self) -> None:
        assert Impression().is_empty()
        assert not Impression(quotes=["cytat"]).is_empty()


class TestAnalysis:
    def test_confidence_bounds(self) -> None:
        with pytest.raises(ValidationError):
            Analysis(confidence=101)

    def test_defaults(self) -> None:
        analysis = Analysis()
        assert analysis.confidence == 80
        assert not analysis.fallback_used


class TestTranscriptQuality:
    def test_frozen(self) -> None:
        quality = TranscriptQuality(score=50)
        with pytest.raises(ValidationError):
            quality.score = 60

    def test_score_range(self) -> None:
        with pytest.raises(ValidationError):
            TranscriptQuality(score=120)


class TestExamRecord:
    def test_round_trip_through_wire_json(self, sample_facts) -> None:
        record = ExamRecord(exam_id="e1", facts=sample_facts, validation={"findings": ["Nerki: ok"]})
        restored = ExamRecord.model_validate_json(record.model_dump_json(by_alias=True))
        assert restored == record
        assert '"examId"' in record.model_dump_json(by_alias=True)

    def test_validated_findings_prefers_validation(self, sample_facts) -> None:
        record = ExamRecord(exam_id="e1", facts=sample_facts, validation={"findings": ["Nerki: ok"]})
        assert record.validated_findings() == ["Nerki: ok"]

    def test_validated_findings_falls_back_to_facts(self, sample_facts) -> None:
        record = ExamRecord(exam_id="e1", facts=sample_facts)
        assert record.validated_findings() == sample_facts.findings
        assert ExamRecord(exam_id="e2").validated_findings() == []


class TestTranscriptionHistory:
    def test_active_run(self) -> None:
        run = TranscriptionRun(run_id="r1", quality=TranscriptQuality(score=70))
        history = TranscriptionHistory(runs=[run], active_run_id="r1")
        assert history.active_run() is run
        assert TranscriptionHistory(runs=[run]).active_run() is None
