"""Analysis synthesis: one narrative model call plus deterministic copies.

The model contributes ``summary`` and ``confidence`` only.  Diagnoses,
recommendations and red flags are copied from the Impression, so the
analysis never holds a recommendation or red flag the clinician did not
state.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from vetscribe.common.json_parser import extract_json_object
from vetscribe.exceptions import JSONParseError, UpstreamError, VetScribeError
from vetscribe.extraction.schemas import ANALYSIS_JSON_SCHEMA, response_format
from vetscribe.models import Analysis, Facts, Impression, TranscriptQuality
from vetscribe.prompts import get_prompt, prompt_version
from vetscribe.synthesis.measurements import summarize_measurements
from vetscribe.synthesis.sanitize import DEFAULT_POLICY, SanitizePolicy, sanitize_text

if TYPE_CHECKING:
    from vetscribe.core.config import AppSettings
    from vetscribe.inference.client import LLMClient

log = logging.getLogger(__name__)

RAW_PREVIEW_CHARS = 800
TRUNCATION_MARKER = "\n\n[... UCIĘTO ŚRODEK (dla limitu kontekstu) ...]\n\n"
INSUFFICIENT_DISCLAIMER = (
    "Materiał niewystarczający do jednoznacznej analizy - proszę zweryfikować opis badania."
)
LOW_QUALITY_SUFFIX = " (niska jakość transkrypcji)"

MAX_REASONING_LINES = 12
MAX_REASONING_QUOTES = 3


def truncate_for_llm(text: str, max_chars: int) -> str:
    """Keep 70% head and 30% tail of an over-long input with a marker between."""
    if len(text) <= max_chars:
        return text
    head_len = int(max_chars * 0.7)
    tail_len = max_chars - head_len
    return f"{text[:head_len]}{TRUNCATION_MARKER}{text[-tail_len:]}"


def clamp_confidence(value: Any, default: int) -> int:
    """Numeric values are clamped to 0..100; anything else yields ``default``."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return int(max(0, min(100, round(value))))


def build_clinical_reasoning(
    impression: Impression, policy: SanitizePolicy = DEFAULT_POLICY
) -> list[str]:
    """Reasoning lines derived from what the clinician said, in a fixed order."""

    def clean(s: str) -> str:
        return sanitize_text(s, policy) or ""

    out: list[str] = []
    overall = clean(impression.doctor_overall or "")
    if overall:
        out.append(overall)
    for concern in impression.doctor_key_concerns:
        c = clean(concern)
        if c:
            out.append(f"Do obserwacji wg lekarza: {c.rstrip('.')}.")
    if impression.doctor_plan:
        out.append(f"Zalecenia wg lekarza: {'; '.join(impression.doctor_plan).rstrip('.')}.")
    quotes = [q for q in (clean(q) for q in impression.quotes[:MAX_REASONING_QUOTES]) if q]
    if quotes:
        out.append(f"Źródło (cytaty): {' | '.join(quotes)}.")
    return out[:MAX_REASONING_LINES]


def disclaimer(quality: TranscriptQuality | None, low_quality_threshold: int) -> str:
    if quality is not None and quality.score < low_quality_threshold:
        return INSUFFICIENT_DISCLAIMER + LOW_QUALITY_SUFFIX
    return INSUFFICIENT_DISCLAIMER


@dataclass
class SynthesisResult:
    analysis: Analysis
    version: str
    telemetry: dict[str, Any] = field(default_factory=dict)
    error: VetScribeError | None = None
    raw_preview: list[str] = field(default_factory=list)


class AnalysisSynthesizer:
    """Builds an :class:`Analysis` from Facts and Impression."""

    def __init__(
        self,
        client: LLMClient,
        settings: AppSettings,
        policy: SanitizePolicy | None = None,
    ) -> None:
        self._client = client
        self._cfg = settings.analysis
        self._policy = policy or SanitizePolicy(enabled=settings.analysis.sanitize)

    @property
    def policy(self) -> SanitizePolicy:
        return self._policy

    def _payload(
        self, facts: Facts, impression: Impression, findings: list[str] | None, measurements: list[str]
    ) -> str:
        facts_doc = facts.model_dump(by_alias=True)
        if findings is not None:
            facts_doc["findings"] = list(findings)
        body = json.dumps(
            {
                "facts": facts_doc,
                "impression": impression.model_dump(by_alias=True),
                "measurementsSummary": measurements,
            },
            ensure_ascii=False,
            indent=2,
        )
        return truncate_for_llm(body, self._cfg.max_input_chars)

    async def synthesize(
        self,
        facts: Facts,
        impression: Impression,
        *,
        findings: list[str] | None = None,
        quality: TranscriptQuality | None = None,
    ) -> SynthesisResult:
        """Never raises for model failures; the fallback disclaimer is used instead.

        ``findings`` overrides ``facts.findings`` with the validated list.
        """
        measurements = summarize_measurements(facts.measurements)
        reasoning = build_clinical_reasoning(impression, self._policy)
        analysis = Analysis(
            diagnoses=list(impression.doctor_key_concerns),
            recommendations=list(impression.doctor_plan),
            red_flags=list(impression.doctor_red_flags),
            clinical_reasoning=reasoning,
            measurements_summary=measurements,
            confidence=self._cfg.default_confidence,
        )
        result = SynthesisResult(
            analysis=analysis,
            version=prompt_version("analysis"),
            telemetry={
                "sanitize": self._policy.enabled,
                "stripForeignScript": self._policy.strip_foreign_script,
            },
        )

        user = self._payload(facts, impression, findings, measurements)
        result.telemetry["inputChars"] = len(user)
        try:
            llm = await self._client.chat(
                system=get_prompt("analysis", "ANALYSIS_SYSTEM_PROMPT"),
                user=user,
                max_tokens=self._cfg.max_tokens,
                timeout=self._cfg.timeout,
                response_format=response_format("analysis", ANALYSIS_JSON_SCHEMA),
                stage="analysis",
            )
        except UpstreamError as exc:
            log.warning("Analysis model call failed, using fallback: %s", exc)
            result.error = exc
            return self._fallback(result, quality)

        result.telemetry["finishReason"] = llm.finish_reason
        result.telemetry["usage"] = dict(llm.usage)
        try:
            data = extract_json_object(llm.content)
        except JSONParseError as exc:
            log.warning("Analysis model returned non-JSON, using fallback")
            result.error = exc
            result.raw_preview = [llm.content[:RAW_PREVIEW_CHARS]]
            return self._fallback(result, quality)

        summary = data.get("summary")
        analysis.summary = sanitize_text(summary, self._policy) if isinstance(summary, str) else None
        analysis.confidence = clamp_confidence(data.get("confidence"), self._cfg.default_confidence)

        if not (
            analysis.summary
            or analysis.diagnoses
            or analysis.recommendations
            or analysis.red_flags
            or analysis.measurements_summary
        ):
            analysis.summary = disclaimer(quality, self._cfg.low_quality_threshold)
            analysis.fallback_used = True
        return result

    def _fallback(
        self,
        result: SynthesisResult,
        quality: TranscriptQuality | None,
    ) -> SynthesisResult:
        analysis = result.analysis
        analysis.summary = disclaimer(quality, self._cfg.low_quality_threshold)
        analysis.confidence = 0
        analysis.fallback_used = True
        result.telemetry["fallback"] = True
        return result
