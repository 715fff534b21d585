"""Transcript quality scoring from token-level heuristics.

Pure computation: no I/O, no model calls, no hidden state.  The same
``(clean, raw)`` pair always produces the same score, flags and metrics.
"""

from __future__ import annotations

import re
from typing import Literal

from vetscribe.models import QualityMetrics, TranscriptQuality

# Backchannel words the examiner says to the animal or owner; repeating them is not STT looping.
FILLER_WORDS = frozenset(
    {
        "spokojnie",
        "super",
        "dobrze",
        "tak",
        "no",
        "witam",
        "już",
        "chwila",
        "ok",
        "idealnie",
        "proszę",
        "leżymy",
        "leż",
        "ładnie",
        "brawo",
    }
)

_VOWELS = frozenset("aeiouyąęó")
_GARBAGE_RE = re.compile(r"(wty|tsym|rzq|xq|qq|jjj)")
_NON_TOKEN_RE = re.compile(r"[^\w\s-]|_")
_LETTERS_ONLY_RE = re.compile(r"^[^\W\d_]+$")

ORGAN_PATTERNS: dict[str, re.Pattern[str]] = {
    "liver": re.compile(r"\bwątrob\w*", re.IGNORECASE),
    "gallbladder": re.compile(r"\bpęcherzyk\w*\b[\s\S]{0,40}?\bż[óo]łciow", re.IGNORECASE),
    "spleen": re.compile(r"\bśledzion\w*", re.IGNORECASE),
    "kidneys": re.compile(r"\bnerk[aięąo]\w*|\bnerek\b", re.IGNORECASE),
    "urinary_bladder": re.compile(r"\bpęcherz\w*\b[^\n]{0,40}?\bmoczow", re.IGNORECASE),
    "intestines": re.compile(r"\bjelit\w*", re.IGNORECASE),
    "pancreas": re.compile(r"\btrzustk\w*", re.IGNORECASE),
}

SUSPICIOUS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bmocznik\s+(powiększon|wypełnion|ścian)", re.IGNORECASE),
    re.compile(r"\bws?g\b", re.IGNORECASE),
    re.compile(r"\bszóstk[ai]\b", re.IGNORECASE),
    re.compile(r"\bżujic", re.IGNORECASE),
    re.compile(r"\bpręg\w*\s+żółciow", re.IGNORECASE),
)

VERY_SHORT_CHARS = 120
LENGTH_SATURATION_CHARS = 600

QualityBand = Literal["good", "medium", "low"]
AlertLevel = Literal["critical", "warn", "info", "ok"]


def tokenize(text: str) -> list[str]:
    """Lowercase, drop punctuation other than hyphens, split on whitespace."""
    return _NON_TOKEN_RE.sub(" ", text.lower()).split()


def is_weird_token(token: str) -> bool:
    """Heuristic for STT garbage tokens."""
    if len(token) <= 2:
        return False
    if len(token) >= 20:
        return True
    if _LETTERS_ONLY_RE.match(token) and not any(ch in _VOWELS for ch in token):
        return True
    return bool(_GARBAGE_RE.search(token))


def repetition_score(tokens: list[str]) -> float:
    """Share of tokens echoing one of the two preceding tokens, capped at 1."""
    hits = 0
    for i, tok in enumerate(tokens):
        if tok in FILLER_WORDS:
            continue
        if i >= 1 and tokens[i - 1] == tok:
            hits += 1
        if i >= 2 and tokens[i - 2] == tok:
            hits += 1
    return min(1.0, hits / max(1, len(tokens)))


def organ_hits(text: str) -> list[str]:
    """Names of checklist organs mentioned anywhere in ``text``."""
    return [name for name, pattern in ORGAN_PATTERNS.items() if pattern.search(text)]


def suspicious_term_count(text: str) -> int:
    return sum(len(p.findall(text)) for p in SUSPICIOUS_PATTERNS)


def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))


def compute_transcript_quality(clean: str, raw: str = "") -> TranscriptQuality:
    """Score a transcript 0-100.

    Args:
        clean: The post-processed, dictionary-corrected transcript.
        raw: The untouched STT output (only its length is recorded).

    Returns:
        A frozen ``TranscriptQuality``.
    """
    clean = (clean or "").strip()
    raw_length = len(raw or "")

    if not clean:
        return TranscriptQuality(
            score=0,
            flags=["EMPTY_TRANSCRIPT"],
            metrics=QualityMetrics(
                unknown_token_ratio=1.0,
                repetition_score=1.0,
                raw_length=raw_length,
            ),
        )

    tokens = tokenize(clean)
    token_count = len(tokens)
    weird = sum(1 for t in tokens if is_weird_token(t))
    unknown_ratio = weird / max(1, token_count)
    repetition = repetition_score(tokens)
    organs = organ_hits(clean)
    organ_ratio = len(organs) / len(ORGAN_PATTERNS)
    suspicious = suspicious_term_count(clean)

    value = (
        0.45 * organ_ratio
        + 0.25 * (1 - min(1.0, unknown_ratio * 6))
        + 0.20 * (1 - min(1.0, repetition * 2.5))
        + 0.10 * min(1.0, len(clean) / LENGTH_SATURATION_CHARS)
    )
    score = int(round(100 * _clamp01(value)))

    flags: set[str] = set()
    if len(clean) < VERY_SHORT_CHARS:
        flags.add("VERY_SHORT_TRANSCRIPT")
    if repetition > 0.22:
        flags.add("HEAVY_REPETITIONS")
    elif repetition > 0.10:
        flags.add("MANY_REPETITIONS")
    if unknown_ratio > 0.12:
        flags.add("HEAVY_UNKNOWN_TOKENS")
    elif unknown_ratio > 0.06:
        flags.add("MANY_UNKNOWN_TOKENS")
    if len(organs) <= 1:
        flags.add("VERY_LOW_ORGAN_COVERAGE")
    elif len(organs) <= 2:
        flags.add("LOW_ORGAN_COVERAGE")
    if suspicious >= 3:
        flags.add("MANY_SUSPICIOUS_TERMS")
    elif suspicious >= 1:
        flags.add("SUSPICIOUS_TERMS")
    if score < 60:
        flags.add("QUALITY_LOW")
    elif score < 75:
        flags.add("QUALITY_MEDIUM")
    else:
        flags.add("QUALITY_GOOD")

    return TranscriptQuality(
        score=score,
        flags=sorted(flags),
        metrics=QualityMetrics(
            token_count=token_count,
            unknown_token_ratio=round(unknown_ratio, 4),
            repetition_score=round(repetition, 4),
            organ_hit_count=len(organs),
            organ_hit_ratio=round(organ_ratio, 4),
            suspicious_term_count=suspicious,
            raw_length=raw_length,
            clean_length=len(clean),
        ),
    )


def quality_band(score: int) -> QualityBand:
    if score >= 75:
        return "good"
    if score >= 60:
        return "medium"
    return "low"


def alert_level(score: int) -> AlertLevel:
    """Operator-facing alert level for a transcription run."""
    if score < 55:
        return "critical"
    if score < 65:
        return "warn"
    if score < 75:
        return "info"
    return "ok"
