"""Collapse STT stutter: sentences or lines repeated more often than a threshold."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")
_TRAILING_PUNCT_RE = re.compile(r"[\s.,;:!?…]+$")
_WS_RE = re.compile(r"\s+")


@dataclass
class AntiLoopResult:
    text: str
    dropped: int = 0
    collapsed_keys: list[str] = field(default_factory=list)


def loop_key(segment: str) -> str:
    """Comparison key: lowercased, trailing punctuation stripped, whitespace collapsed."""
    return _WS_RE.sub(" ", _TRAILING_PUNCT_RE.sub("", segment.strip().lower()))


def split_segments(text: str) -> list[list[str]]:
    """Split into lines, then each line into sentences."""
    return [
        [s for s in _SENTENCE_SPLIT_RE.split(line.strip()) if s.strip()]
        for line in text.splitlines()
    ]


def collapse_repeats(text: str, *, threshold: int = 2, keep: int = 1) -> AntiLoopResult:
    """Keep only the first ``keep`` copies of any segment seen more than ``threshold`` times.

    Segments whose key occurs ``threshold`` times or fewer are untouched,
    as are blank lines.
    """
    if not text:
        return AntiLoopResult(text="")

    lines = split_segments(text)
    counts = Counter(loop_key(s) for line in lines for s in line)
    looping = {k for k, c in counts.items() if k and c > threshold}
    if not looping:
        return AntiLoopResult(text=text)

    seen: Counter[str] = Counter()
    out_lines: list[str] = []
    dropped = 0
    for original, segments in zip(text.splitlines(), lines):
        if not segments:
            out_lines.append(original.strip())
            continue
        kept: list[str] = []
        for seg in segments:
            key = loop_key(seg)
            if key in looping:
                seen[key] += 1
                if seen[key] > keep:
                    dropped += 1
                    continue
            kept.append(seg)
        if kept:
            out_lines.append(" ".join(kept))

    return AntiLoopResult(
        text="\n".join(out_lines).strip(),
        dropped=dropped,
        collapsed_keys=sorted(looping),
    )
