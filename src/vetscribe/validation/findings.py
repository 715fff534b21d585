"""Helpers for ``"Organ: description"`` finding lines."""

from __future__ import annotations

import re

_SPLIT_RE = re.compile(r"^\s*([^:]{1,60}?)\s*:\s*(.*)$", re.DOTALL)


def split_finding(line: str) -> tuple[str, str]:
    """Return ``(organ, description)``; organ is ``""`` when there is no colon."""
    match = _SPLIT_RE.match(line or "")
    if not match:
        return "", (line or "").strip()
    return match.group(1).strip(), match.group(2).strip()


# Matches nothing; an empty term list must not degrade into a match-all.
NEVER_MATCH = re.compile(r"(?!)")


def compile_terms(terms: list[str] | tuple[str, ...]) -> re.Pattern[str]:
    """Word-start alternation over ``terms`` (prefix match, case-insensitive).

    Blank terms are dropped; with nothing left the result is :data:`NEVER_MATCH`.
    """
    kept = [t.strip() for t in terms if t and t.strip()]
    if not kept:
        return NEVER_MATCH
    alternation = "|".join(re.escape(t) for t in sorted(kept, key=len, reverse=True))
    return re.compile(rf"\b(?:{alternation})\w*", re.IGNORECASE)
