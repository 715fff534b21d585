"""Exam pipeline service: one coroutine per stage over a persisted ExamRecord.

Each stage loads the latest record, computes its output, and writes only
its own field plus the ``*_meta`` sibling.  Failures are recorded under
``record.errors[stage]``.  Facts and Impression failures are re-raised so the
caller can re-run them later; Analysis and Report always persist a
deterministic result.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from vetscribe.exceptions import (
    MalformedOutputError,
    NotFoundError,
    ValidationError,
    VetScribeError,
)
from vetscribe.extraction.engine import ExtractionEngine, ExtractionOutcome
from vetscribe.hooks.run_tracker import track_stage
from vetscribe.models import Analysis, ExamRecord, Impression, StageError
from vetscribe.normalization import normalize_transcript
from vetscribe.normalization.signals import find_patient_name, find_reason_candidate
from vetscribe.quality.scorer import alert_level, compute_transcript_quality, quality_band
from vetscribe.report.assembler import ReportAssembler
from vetscribe.synthesis.pipeline import AnalysisSynthesizer
from vetscribe.transcription.orchestrator import TranscriptionOrchestrator
from vetscribe.transcription.postprocess import postprocess_transcript
from vetscribe.transcription.runner import WhisperRunner

if TYPE_CHECKING:
    from vetscribe.context import PipelineContext

log = logging.getLogger(__name__)

NORMALIZATION_VERSION = "normalize-v2-dictionary-antiloop"
VALIDATION_VERSION = "logic-validation-v1"


def _stage_error(exc: Exception, previews: list[str] | None = None) -> StageError:
    if previews is None and isinstance(exc, MalformedOutputError):
        previews = exc.raw_previews
    return StageError(type=type(exc).__name__, message=str(exc), raw_preview=list(previews or []))


class ExamPipeline:
    """Stage runner bound to a :class:`PipelineContext`."""

    def __init__(self, ctx: PipelineContext) -> None:
        self._ctx = ctx
        self._settings = ctx.settings
        self._store = ctx.store
        self._engine = ExtractionEngine(ctx.client, ctx.settings)
        self._synthesizer = AnalysisSynthesizer(ctx.client, ctx.settings, ctx.sanitize_policy)
        self._assembler = ReportAssembler(ctx.settings.report)

    # ── Helpers ─────────────────────────────────────────────────────

    def _require_transcript(self, record: ExamRecord) -> str:
        if not (record.transcript or "").strip():
            raise NotFoundError(f"Exam {record.exam_id} has no transcript (ingest or transcribe first)")
        return record.transcript or ""

    def _fail(self, exam_id: str, stage: str, exc: Exception, previews: list[str] | None = None) -> None:
        log.warning("Stage %s failed for exam %s: %s", stage, exam_id, exc)
        self._store.record_error(exam_id, stage, _stage_error(exc, previews))

    # ── Transcript ──────────────────────────────────────────────────

    async def transcribe(self, exam_id: str, audio_path: Path) -> ExamRecord:
        """Run STT on ``audio_path`` and store the winning run as the transcript.

        Raises:
            ValidationError: the audio file does not exist.
            UpstreamError: the STT binary is missing or failed.
        """
        if not audio_path.is_file():
            raise ValidationError(f"Audio file not found: {audio_path}")
        record = self._store.load_or_create(exam_id)
        runner = self._ctx.stt_runner or WhisperRunner(self._settings.transcription)
        orchestrator = TranscriptionOrchestrator(
            runner,
            self._settings.transcription,
            use_dictionary=self._settings.normalization.enable_dictionary,
        )
        try:
            outcome = await orchestrator.transcribe(audio_path, record.transcription)
        except VetScribeError as exc:
            self._fail(exam_id, "transcribe", exc)
            raise
        self._store.update(exam_id, transcription=outcome.history)
        return self._store_transcript(
            exam_id, outcome.active.raw_text, source=f"stt:{outcome.history.decision}"
        )

    async def ingest_transcript(self, exam_id: str, text: str) -> ExamRecord:
        """Store an externally produced transcript after cleanup and scoring."""
        if text is None or not str(text).strip():
            raise ValidationError("Transcript text is empty")
        return self._store_transcript(exam_id, str(text), source="ingest")

    def _store_transcript(self, exam_id: str, raw: str, *, source: str) -> ExamRecord:
        norm_cfg = self._settings.normalization
        with track_stage("transcript", exam_id=exam_id, version=NORMALIZATION_VERSION) as meta:
            cleaned = postprocess_transcript(raw)
            normalized = normalize_transcript(
                cleaned,
                threshold=norm_cfg.repeat_threshold,
                keep=norm_cfg.repeat_keep,
                use_dictionary=norm_cfg.enable_dictionary,
            )
            quality = compute_transcript_quality(normalized.text, raw)
            meta.telemetry.update(normalized.telemetry())
            meta.telemetry.update(
                {
                    "source": source,
                    "qualityBand": quality_band(quality.score),
                    "alertLevel": alert_level(quality.score),
                }
            )
        self._store.clear_error(exam_id, "transcript")
        log.info("Transcript stored for %s (score=%d, flags=%s)", exam_id, quality.score, quality.flags)
        return self._store.update(
            exam_id,
            transcript=normalized.text,
            transcript_raw=raw,
            transcript_quality=quality,
            transcript_meta=meta,
        )

    # ── Extraction ──────────────────────────────────────────────────

    async def _extract(self, exam_id: str, stage: str) -> tuple[ExamRecord, ExtractionOutcome]:
        record = self._store.load(exam_id)
        transcript = self._require_transcript(record)
        try:
            if stage == "facts":
                outcome: ExtractionOutcome = await self._engine.extract_facts(transcript)
            else:
                outcome = await self._engine.extract_impression(transcript)
        except VetScribeError as exc:
            self._fail(exam_id, stage, exc)
            raise
        if not outcome.ok:
            error = outcome.error or MalformedOutputError(f"{stage}: extraction failed")
            self._fail(exam_id, stage, error, outcome.raw_previews)
            raise error
        return record, outcome

    async def extract_facts(self, exam_id: str) -> ExamRecord:
        """Raises:
            NotFoundError: no record or no transcript.
            MalformedOutputError | InsufficientDataError | UpstreamError: extraction failed.
        """
        with track_stage("facts", exam_id=exam_id) as meta:
            record, outcome = await self._extract(exam_id, "facts")
            facts = outcome.value
            transcript = record.transcript or ""
            if not facts.exam.reason:
                facts.exam.reason = find_reason_candidate(transcript)
                meta.telemetry["reasonFromTranscript"] = facts.exam.reason is not None
            if not facts.exam.patient_name:
                facts.exam.patient_name = find_patient_name(transcript)
                meta.telemetry["patientNameFromTranscript"] = facts.exam.patient_name is not None
            meta.version = outcome.version
            meta.telemetry.update(outcome.telemetry)
        self._store.clear_error(exam_id, "facts")
        return self._store.update(exam_id, facts=facts, facts_meta=meta)

    async def extract_impression(self, exam_id: str) -> ExamRecord:
        with track_stage("impression", exam_id=exam_id) as meta:
            _, outcome = await self._extract(exam_id, "impression")
            meta.version = outcome.version
            meta.telemetry.update(outcome.telemetry)
        self._store.clear_error(exam_id, "impression")
        return self._store.update(exam_id, impression=outcome.value, impression_meta=meta)

    # ── Validation ──────────────────────────────────────────────────

    async def validate_findings(self, exam_id: str) -> ExamRecord:
        """Filter Facts findings through the rules engine; Facts itself is untouched."""
        record = self._store.load(exam_id)
        if record.facts is None:
            raise NotFoundError(f"Exam {exam_id} has no facts (run facts extraction first)")
        engine = self._ctx.rules_engine
        with track_stage("validation", exam_id=exam_id, version=VALIDATION_VERSION) as meta:
            if engine is None:
                validation = {
                    "findings": list(record.facts.findings),
                    "rulesVersion": None,
                    "totalRulesEvaluated": 0,
                    "rejectedCount": 0,
                    "warningCount": 0,
                    "issues": [],
                    "skipped": True,
                }
            else:
                validation = engine.validate(list(record.facts.findings)).to_dict()
            meta.telemetry["rejected"] = validation["rejectedCount"]
            meta.telemetry["warnings"] = validation["warningCount"]
        return self._store.update(exam_id, validation=validation, validation_meta=meta)

    # ── Analysis / report ───────────────────────────────────────────

    async def analyze(self, exam_id: str) -> ExamRecord:
        """Always persists an Analysis; model failures fall back to the disclaimer."""
        record = self._store.load(exam_id)
        if record.facts is None:
            raise NotFoundError(f"Exam {exam_id} has no facts (run facts extraction first)")
        if record.impression is None:
            raise NotFoundError(f"Exam {exam_id} has no impression (run impression extraction first)")

        with track_stage("analysis", exam_id=exam_id) as meta:
            result = await self._synthesizer.synthesize(
                record.facts,
                record.impression,
                findings=record.validated_findings(),
                quality=record.transcript_quality,
            )
            meta.version = result.version
            meta.telemetry.update(result.telemetry)
            meta.telemetry["fallbackUsed"] = result.analysis.fallback_used

        if result.error is not None:
            self._fail(exam_id, "analysis", result.error, result.raw_preview)
        else:
            self._store.clear_error(exam_id, "analysis")
        return self._store.update(exam_id, analysis=result.analysis, analysis_meta=meta)

    async def generate_report(self, exam_id: str) -> ExamRecord:
        record = self._store.load(exam_id)
        if record.facts is None:
            raise NotFoundError(f"Exam {exam_id} has no facts (run facts extraction first)")
        with track_stage("report", exam_id=exam_id, version=self._assembler.version) as meta:
            analysis = record.analysis or Analysis()
            report = self._assembler.render(
                record.facts,
                record.impression or Impression(),
                analysis,
                findings=record.validated_findings(),
                quality=record.transcript_quality,
                transcript=record.transcript,
            )
            meta.telemetry.update(
                {
                    "hasImpression": record.impression is not None,
                    "hasAnalysis": record.analysis is not None,
                    "analysisFallbackUsed": analysis.fallback_used,
                    "chars": len(report),
                }
            )
        return self._store.update(exam_id, report=report, report_meta=meta)

    # ── Driver ──────────────────────────────────────────────────────

    async def run_stage(self, exam_id: str, stage: str) -> ExamRecord:
        """Dispatch a stage by name (``facts``, ``impression``, ``validation``, ...)."""
        handlers = {
            "facts": self.extract_facts,
            "impression": self.extract_impression,
            "validation": self.validate_findings,
            "analysis": self.analyze,
            "report": self.generate_report,
        }
        handler = handlers.get(stage)
        if handler is None:
            raise ValidationError(
                f"Unknown stage {stage!r}; expected one of {', '.join(sorted(handlers))}"
            )
        return await handler(exam_id)

    async def run_all(
        self,
        exam_id: str,
        *,
        transcript: str | None = None,
        audio_path: Path | None = None,
    ) -> ExamRecord:
        """Run every stage in order.  Facts/Impression errors stop the run."""
        if audio_path is not None:
            await self.transcribe(exam_id, audio_path)
        elif transcript is not None:
            await self.ingest_transcript(exam_id, transcript)

        await self.extract_facts(exam_id)
        await self.extract_impression(exam_id)
        await self.validate_findings(exam_id)
        await self.analyze(exam_id)
        return await self.generate_report(exam_id)
