"""Analysis synthesis: narrative summary, sanitization and measurement lines."""

from __future__ import annotations

from vetscribe.synthesis.measurements import format_values, summarize_measurements
from vetscribe.synthesis.pipeline import (
    INSUFFICIENT_DISCLAIMER,
    LOW_QUALITY_SUFFIX,
    TRUNCATION_MARKER,
    AnalysisSynthesizer,
    SynthesisResult,
    build_clinical_reasoning,
    clamp_confidence,
    truncate_for_llm,
)
from vetscribe.synthesis.sanitize import SanitizePolicy, sanitize_text, strip_foreign_script

__all__ = [
    "INSUFFICIENT_DISCLAIMER",
    "LOW_QUALITY_SUFFIX",
    "TRUNCATION_MARKER",
    "AnalysisSynthesizer",
    "SanitizePolicy",
    "SynthesisResult",
    "build_clinical_reasoning",
    "clamp_confidence",
    "format_values",
    "sanitize_text",
    "strip_foreign_script",
    "summarize_measurements",
    "truncate_for_llm",
]
