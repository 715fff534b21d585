"""Facts and Impression extraction."""

from __future__ import annotations

from vetscribe.extraction.engine import ExtractionEngine, ExtractionOutcome, head_tail, looks_english, tail
from vetscribe.extraction.normalize import normalize_facts, normalize_impression

__all__ = [
    "ExtractionEngine",
    "ExtractionOutcome",
    "head_tail",
    "looks_english",
    "normalize_facts",
    "normalize_impression",
    "tail",
]
