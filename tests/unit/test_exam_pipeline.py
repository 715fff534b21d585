"""End-to-end stage tests for ExamPipeline with a scripted model backend."""

from __future__ import annotations

import json

import pytest

from tests.fakes.fake_stt import FakeSttRunner
from tests.fakes.payloads import facts_json, impression_json
from vetscribe.exceptions import MalformedOutputError, NotFoundError, ValidationError
from vetscribe.report.recommendations import RECOMMENDATION_RULES
from vetscribe.services.pipeline import ExamPipeline
from vetscribe.synthesis import INSUFFICIENT_DISCLAIMER

FINDINGS = [
    "Wątroba: jednorodna",
    "Wątroba: ściana pogrubiała",
    "Nerki: poszerzona miedniczka lewej nerki",
]
CONCERNS = ["poszerzenie miedniczki lewej nerki"]
KIDNEY_LINES = next(r.lines for r in RECOMMENDATION_RULES if r.rule_id == "REC-KIDNEY-DILATION")


def _analysis(summary: str = "Poszerzenie miedniczki lewej nerki.", confidence: int = 75) -> str:
    return json.dumps({"summary": summary, "confidence": confidence}, ensure_ascii=False)


@pytest.fixture
def pipeline(context) -> ExamPipeline:
    return ExamPipeline(context)


class TestTranscriptStage:
    @pytest.mark.asyncio
    async def test_ingest_scores_and_normalizes(self, pipeline, sample_transcript) -> None:
        record = await pipeline.ingest_transcript("e1", "Netki bez zmian.\n" + sample_transcript)

        assert record.transcript.startswith("Nerki bez zmian.")
        assert record.transcript_raw.startswith("Netki")
        assert record.transcript_quality.score > 0
        telemetry = record.transcript_meta.telemetry
        assert telemetry["source"] == "ingest"
        assert telemetry["qualityBand"] in ("good", "medium", "low")
        assert telemetry["dictionaryAppliedCount"] == 1

    @pytest.mark.asyncio
    async def test_empty_transcript_rejected(self, pipeline) -> None:
        with pytest.raises(ValidationError):
            await pipeline.ingest_transcript("e1", "   ")

    @pytest.mark.asyncio
    async def test_transcribe_with_runner(self, context, tmp_path, sample_transcript) -> None:
        audio = tmp_path / "exam.wav"
        audio.write_bytes(b"RIFF")
        context.stt_runner = FakeSttRunner({1: sample_transcript})
        record = await ExamPipeline(context).transcribe("e2", audio)

        assert record.transcription.decision == "single_pass"
        assert len(record.transcription.runs) == 1
        assert record.transcript_meta.telemetry["source"] == "stt:single_pass"
        assert "Wątroba jednorodna" in record.transcript

    @pytest.mark.asyncio
    async def test_transcribe_missing_audio(self, pipeline, tmp_path) -> None:
        with pytest.raises(ValidationError):
            await pipeline.transcribe("e2", tmp_path / "missing.wav")


class TestRunAll:
    @pytest.mark.asyncio
    async def test_full_run(self, pipeline, fake_backend, context, sample_transcript) -> None:
        fake_backend.push(
            facts_json(findings=FINDINGS, exam={"bodyRegion": None, "reason": None, "patientName": None}),
            impression_json(doctorKeyConcerns=CONCERNS, doctorRedFlags=["brak oddawania moczu"]),
            _analysis(),
        )
        record = await pipeline.run_all("e3", transcript=sample_transcript)

        assert record.errors == {}
        assert record.facts.findings == FINDINGS
        assert record.facts.exam.reason.startswith("Pani Kowalska")
        assert record.facts.exam.patient_name == "Kowalska"
        assert record.facts_meta.telemetry["reasonFromTranscript"] is True

        assert record.validation["rejectedCount"] == 1
        assert "Wątroba: ściana pogrubiała" not in record.validated_findings()

        assert record.analysis.diagnoses == CONCERNS
        assert record.analysis.recommendations == []
        assert record.analysis.confidence == 75

        assert "ściana pogrubiała" not in record.report
        assert "- Wątroba: jednorodna" in record.report
        assert "Pacjent: Kowalska" in record.report
        for line in KIDNEY_LINES:
            assert f"- {line}" in record.report
        assert record.report_meta.version == "report-template-v3-aggregated-rules"

        stored = context.store.load("e3")
        assert stored.report == record.report
        assert len(fake_backend.calls) == 3

    @pytest.mark.asyncio
    async def test_repeated_findings_collapse_to_one_line_per_organ(
        self, pipeline, fake_backend, settings
    ) -> None:
        assert settings.normalization.repeat_threshold == 2
        transcript = (
            "Wątroba: jednorodna. Wątroba: jednorodna. Wątroba: jednorodna. Nerki bez zmian."
        )
        fake_backend.push(
            facts_json(findings=["Wątroba: jednorodna", "Wątroba: jednorodna.", "Nerki: bez zmian"]),
            impression_json(),
            _analysis(summary="Obraz prawidłowy.", confidence=80),
        )
        record = await pipeline.run_all("e12", transcript=transcript)

        assert record.transcript == "Wątroba: jednorodna. Nerki bez zmian."
        assert record.transcript_meta.telemetry["antiLoopDropped"] == 2

        lines = record.report.splitlines()
        start = lines.index("OPIS BADANIA:") + 1
        end = lines.index("", start)
        assert lines[start:end] == ["- Wątroba: jednorodna", "- Nerki: bez zmian"]

    @pytest.mark.asyncio
    async def test_facts_failure_recorded_and_raised(
        self, pipeline, fake_backend, context, sample_transcript
    ) -> None:
        fake_backend.push("nie json", "dalej nie json")
        with pytest.raises(MalformedOutputError):
            await pipeline.run_all("e4", transcript=sample_transcript)

        record = context.store.load("e4")
        assert record.facts is None
        assert record.errors["facts"].type == "MalformedOutputError"
        assert record.errors["facts"].raw_preview == ["nie json", "dalej nie json"]

    @pytest.mark.asyncio
    async def test_rerun_clears_stage_error(self, pipeline, fake_backend, sample_transcript) -> None:
        await pipeline.ingest_transcript("e5", sample_transcript)
        fake_backend.push("zły", "zły")
        with pytest.raises(MalformedOutputError):
            await pipeline.extract_facts("e5")

        fake_backend.push(facts_json())
        record = await pipeline.extract_facts("e5")
        assert "facts" not in record.errors
        assert record.facts is not None

    @pytest.mark.asyncio
    async def test_analysis_failure_still_reports(self, pipeline, fake_backend, sample_transcript) -> None:
        fake_backend.push(facts_json(findings=FINDINGS), impression_json(), RuntimeError("model down"))
        record = await pipeline.run_all("e6", transcript=sample_transcript)

        assert record.analysis.fallback_used
        assert record.analysis.summary.startswith(INSUFFICIENT_DISCLAIMER)
        assert record.errors["analysis"].type == "RetryableError"
        assert record.report is not None
        assert record.report_meta.telemetry["analysisFallbackUsed"] is True

    @pytest.mark.asyncio
    async def test_stage_outputs_not_clobbered(
        self, pipeline, fake_backend, context, sample_transcript
    ) -> None:
        fake_backend.push(facts_json(), impression_json(), _analysis())
        await pipeline.run_all("e7", transcript=sample_transcript)
        before = context.store.load("e7")

        fake_backend.push(impression_json(doctorOverall="Nowa ocena."))
        after = await pipeline.extract_impression("e7")

        assert after.impression.doctor_overall == "Nowa ocena."
        assert after.facts == before.facts
        assert after.analysis == before.analysis


class TestStageGuards:
    @pytest.mark.asyncio
    async def test_unknown_exam(self, pipeline) -> None:
        with pytest.raises(NotFoundError):
            await pipeline.extract_facts("nope")

    @pytest.mark.asyncio
    async def test_analysis_needs_impression(self, pipeline, fake_backend, sample_transcript) -> None:
        await pipeline.ingest_transcript("e8", sample_transcript)
        fake_backend.push(facts_json())
        await pipeline.extract_facts("e8")
        with pytest.raises(NotFoundError, match="impression"):
            await pipeline.analyze("e8")

    @pytest.mark.asyncio
    async def test_unknown_stage(self, pipeline) -> None:
        with pytest.raises(ValidationError):
            await pipeline.run_stage("e9", "pdf")

    @pytest.mark.asyncio
    async def test_validation_skipped_without_engine(self, context, fake_backend, sample_transcript) -> None:
        context.rules_engine = None
        pipeline = ExamPipeline(context)
        await pipeline.ingest_transcript("e10", sample_transcript)
        fake_backend.push(facts_json(findings=FINDINGS))
        await pipeline.extract_facts("e10")
        record = await pipeline.validate_findings("e10")

        assert record.validation["skipped"] is True
        assert record.validated_findings() == FINDINGS

    @pytest.mark.asyncio
    async def test_report_without_analysis(self, pipeline, fake_backend, sample_transcript) -> None:
        await pipeline.ingest_transcript("e11", sample_transcript)
        fake_backend.push(facts_json())
        await pipeline.extract_facts("e11")
        record = await pipeline.generate_report("e11")

        assert record.report.startswith("RAPORT BADANIA:")
        assert record.report_meta.telemetry["hasAnalysis"] is False
