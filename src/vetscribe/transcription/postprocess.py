"""Strip timestamps and subtitle artifacts from raw STT output."""

from __future__ import annotations

import re

_TS = r"\d{1,2}:\d{2}(?::\d{2})?(?:[.,]\d{1,3})?"

_BRACKETED_RANGE_RE = re.compile(rf"^\[\s*{_TS}\s*-->\s*{_TS}\s*\]\s*")
_BARE_RANGE_RE = re.compile(rf"^{_TS}\s*-->\s*{_TS}\s*")
_LEADING_TS_RE = re.compile(rf"^[(\[]?\s*{_TS}\s*[)\]]?\s*")
_SRT_INDEX_RE = re.compile(r"^\d+\s*$")
_INLINE_WS_RE = re.compile(r"[ \t]+")
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def clean_line(line: str) -> str:
    line = line.strip()
    if _SRT_INDEX_RE.match(line):
        return ""
    line = _BRACKETED_RANGE_RE.sub("", line)
    line = _BARE_RANGE_RE.sub("", line)
    line = _LEADING_TS_RE.sub("", line)
    return line.strip()


def postprocess_transcript(raw: str) -> str:
    """Plain transcript text with one utterance per line."""
    lines = (clean_line(line) for line in (raw or "").splitlines())
    text = "\n".join(line for line in lines if line)
    text = _INLINE_WS_RE.sub(" ", text)
    return _BLANK_RUN_RE.sub("\n\n", text).strip()
