"""Pydantic data models for vetscribe.

Field names are snake_case in Python and camelCase on the wire
(``transcriptQuality``, ``factsMeta``, ...) so persisted exam records keep
the document-store shape.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


# ── Transcript quality ───────────────────────────────────────────────


class QualityMetrics(_WireModel):
    """Token-level heuristics behind a quality score."""

    model_config = ConfigDict(frozen=True)

    token_count: int = 0
    unknown_token_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    repetition_score: float = Field(default=0.0, ge=0.0, le=1.0)
    organ_hit_count: int = 0
    organ_hit_ratio: float = 0.0
    suspicious_term_count: int = 0
    raw_length: int = 0
    clean_length: int = 0


class TranscriptQuality(_WireModel):
    """Score, flags and metrics for one transcript. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    flags: list[str] = Field(default_factory=list)
    metrics: QualityMetrics = Field(default_factory=QualityMetrics)


# ── Facts / Impression ───────────────────────────────────────────────


class Measurement(_WireModel):
    """A numeric measurement. ``value`` is never empty."""

    structure: str
    location: Optional[str] = None
    value: list[float] = Field(min_length=1)
    unit: str = ""


class ExamInfo(_WireModel):
    body_region: Optional[str] = None
    reason: Optional[str] = None
    patient_name: Optional[str] = None


class Facts(_WireModel):
    """Objective exam data extracted without interpretation."""

    exam: ExamInfo = Field(default_factory=ExamInfo)
    conditions: list[str] = Field(default_factory=list)
    findings: list[str] = Field(default_factory=list)
    measurements: list[Measurement] = Field(default_factory=list)

    @field_validator("conditions", "findings", "measurements", mode="before")
    @classmethod
    def _none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v

    def is_empty(self) -> bool:
        """True when nothing usable was extracted."""
        return not (
            self.findings
            or self.measurements
            or self.conditions
            or self.exam.reason
            or self.exam.patient_name
        )


class Impression(_WireModel):
    """The clinician's subjective assessment as stated in the recording."""

    doctor_overall: Optional[str] = None
    doctor_key_concerns: list[str] = Field(default_factory=list)
    doctor_plan: list[str] = Field(default_factory=list)
    doctor_red_flags: list[str] = Field(default_factory=list)
    quotes: list[str] = Field(default_factory=list)
    consent_recording: Optional[Literal["yes", "no"]] = None

    @field_validator(
        "doctor_key_concerns", "doctor_plan", "doctor_red_flags", "quotes", mode="before"
    )
    @classmethod
    def _none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v

    def is_empty(self) -> bool:
        return not (
            self.doctor_overall
            or self.doctor_key_concerns
            or self.doctor_plan
            or self.doctor_red_flags
            or self.quotes
        )


# ── Analysis ─────────────────────────────────────────────────────────


class Analysis(_WireModel):
    """Narrative summary plus lists copied verbatim from the Impression."""

    summary: Optional[str] = None
    confidence: int = Field(default=80, ge=0, le=100)
    diagnoses: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    red_flags: list[str] = Field(default_factory=list)
    clinical_reasoning: list[str] = Field(default_factory=list)
    measurements_summary: list[str] = Field(default_factory=list)
    fallback_used: bool = False


# ── Stage metadata ───────────────────────────────────────────────────


class StageError(_WireModel):
    """Error annotation stored on the record when a stage fails."""

    type: str
    message: str
    raw_preview: list[str] = Field(default_factory=list)
    occurred_at: str = Field(default_factory=_utcnow)


class StageMeta(_WireModel):
    """Version tag, timing and telemetry written next to a stage's output."""

    version: str
    started_at: str = Field(default_factory=_utcnow)
    duration_ms: float = 0.0
    telemetry: dict[str, Any] = Field(default_factory=dict)


# ── Transcription ────────────────────────────────────────────────────


class SttMeta(_WireModel):
    engine: str = "mlx_whisper"
    model: str = ""
    language: str = "pl"
    beam_size: int = 1
    duration_ms: float = 0.0
    exit_code: Optional[int] = None
    timed_out: bool = False


class TranscriptionRun(_WireModel):
    """One STT pass. Kept in history even when discarded."""

    run_id: str
    source: str = "stt"
    raw_text: str = ""
    text: str = ""
    quality: TranscriptQuality
    stt: SttMeta = Field(default_factory=SttMeta)
    dictionary_rules_fired: list[str] = Field(default_factory=list)
    created_at: str = Field(default_factory=_utcnow)


class TranscriptionHistory(_WireModel):
    """Additive audit trail of every transcription run for an exam."""

    version: str = "transcription-v1"
    decision: str = ""
    active_run_id: Optional[str] = None
    runs: list[TranscriptionRun] = Field(default_factory=list)

    def active_run(self) -> Optional[TranscriptionRun]:
        for run in self.runs:
            if run.run_id == self.active_run_id:
                return run
        return None


# ── Exam record ──────────────────────────────────────────────────────


class ExamRecord(_WireModel):
    """One persisted exam. Each stage owns its field and its ``*_meta`` sibling."""

    exam_id: str
    transcript: Optional[str] = None
    transcript_raw: Optional[str] = None
    transcript_quality: Optional[TranscriptQuality] = None
    transcript_meta: Optional[StageMeta] = None
    transcription: Optional[TranscriptionHistory] = None
    facts: Optional[Facts] = None
    facts_meta: Optional[StageMeta] = None
    impression: Optional[Impression] = None
    impression_meta: Optional[StageMeta] = None
    validation: Optional[dict[str, Any]] = None
    validation_meta: Optional[StageMeta] = None
    analysis: Optional[Analysis] = None
    analysis_meta: Optional[StageMeta] = None
    report: Optional[str] = None
    report_meta: Optional[StageMeta] = None
    errors: dict[str, StageError] = Field(default_factory=dict)

    def validated_findings(self) -> list[str]:
        """Findings after logic validation, or the raw Facts findings."""
        if self.validation is not None:
            return list(self.validation.get("findings", []))
        return list(self.facts.findings) if self.facts else []
