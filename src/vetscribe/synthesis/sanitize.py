"""Deterministic vocabulary sanitization for model-written narrative.

The rewrite table is a policy, not a clinical rule: it is injectable and can
be switched off per request.  Foreign-script stripping is independent of the
table and defends against a model answering in an unexpected language.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

DEFAULT_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    (r"\bmoże sugerować\b", "może wskazywać na"),
    (r"\bzapaln\w*", "inny"),
    (r"\bnowotwor\w*", "inny"),
    (r"\bpatologi\w*", "odchylenia"),
    (r"\binflamacj\w*", "odchylenia"),
    (r"\bguz\w*", "zmiana"),
    (r"\bneoplazj\w*", "zmiana"),
)

# Kana, CJK unified ideographs (+ extension A), CJK compatibility ideographs.
FOREIGN_SCRIPT_RE = re.compile(r"[぀-ヿ㐀-䶿一-鿿豈-﫿]")

_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class SanitizePolicy:
    enabled: bool = True
    replacements: tuple[tuple[str, str], ...] = DEFAULT_REPLACEMENTS
    strip_foreign_script: bool = True


DEFAULT_POLICY = SanitizePolicy()


def strip_foreign_script(text: str) -> str:
    return _WS_RE.sub(" ", FOREIGN_SCRIPT_RE.sub("", text)).strip()


def sanitize_text(text: str | None, policy: SanitizePolicy = DEFAULT_POLICY) -> str | None:
    """Apply ``policy`` to ``text``; None and blank input yield None."""
    if text is None:
        return None
    s = _WS_RE.sub(" ", text).strip()
    if policy.strip_foreign_script:
        s = strip_foreign_script(s)
    if policy.enabled:
        for pattern, replacement in policy.replacements:
            s = re.sub(pattern, replacement, s, flags=re.IGNORECASE)
        s = re.sub(r"\s+\.", ".", s)
        s = re.sub(r"\.{2,}", ".", s)
        s = s.strip()
    return s or None
