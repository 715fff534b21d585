"""Dictionary correction, anti-loop collapsing and weak-signal candidates.

Usage::

    from vetscribe.normalization import normalize_transcript
    result = normalize_transcript(text, threshold=2, keep=1)
    result.text, result.telemetry()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from vetscribe.normalization.anti_loop import AntiLoopResult, collapse_repeats, loop_key
from vetscribe.normalization.dictionary import (
    DEFAULT_RULES,
    CorrectionRule,
    DictionaryResult,
    apply_dictionary,
)
from vetscribe.normalization.signals import find_patient_name, find_reason_candidate


@dataclass
class NormalizedTranscript:
    text: str
    dictionary: DictionaryResult
    anti_loop: AntiLoopResult
    reason_candidate: str | None = None
    patient_name_candidate: str | None = None

    def telemetry(self) -> dict[str, Any]:
        return {
            "dictionaryAppliedCount": self.dictionary.applied_count,
            "dictionaryRulesFired": list(self.dictionary.fired),
            "antiLoopDropped": self.anti_loop.dropped,
            "reasonCandidate": self.reason_candidate,
            "patientNameCandidate": self.patient_name_candidate,
        }


def normalize_transcript(
    text: str,
    *,
    threshold: int = 2,
    keep: int = 1,
    use_dictionary: bool = True,
    rules: tuple[CorrectionRule, ...] = DEFAULT_RULES,
) -> NormalizedTranscript:
    """Dictionary pass, then anti-loop pass, then weak-signal extraction."""
    dictionary = apply_dictionary(text, rules) if use_dictionary else DictionaryResult(text=text or "")
    anti_loop = collapse_repeats(dictionary.text, threshold=threshold, keep=keep)
    return NormalizedTranscript(
        text=anti_loop.text,
        dictionary=dictionary,
        anti_loop=anti_loop,
        reason_candidate=find_reason_candidate(anti_loop.text),
        patient_name_candidate=find_patient_name(anti_loop.text),
    )


__all__ = [
    "AntiLoopResult",
    "CorrectionRule",
    "DEFAULT_RULES",
    "DictionaryResult",
    "NormalizedTranscript",
    "apply_dictionary",
    "collapse_repeats",
    "find_patient_name",
    "find_reason_candidate",
    "loop_key",
    "normalize_transcript",
]
