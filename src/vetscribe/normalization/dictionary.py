"""Deterministic correction table for recurring STT errors in ultrasound vocabulary.

Rules are ordered ``(pattern, replacement)`` pairs consumed by a pure
function.  No replacement re-matches any pattern in the table, so applying
the table twice changes nothing after the first pass.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CorrectionRule:
    """A single whole-word, case-insensitive replacement."""

    rule_id: str
    pattern: str
    replacement: str

    def compiled(self) -> re.Pattern[str]:
        return _compile(self.pattern)


@dataclass
class DictionaryResult:
    text: str
    fired: list[str] = field(default_factory=list)
    applied_count: int = 0


DEFAULT_RULES: tuple[CorrectionRule, ...] = (
    CorrectionRule("miazsz", r"\bmiąż\b", "miąższ"),
    CorrectionRule("echogenicznosc", r"\b(?:ehebryczn|echogoniczn|echogenicn)(\w*)", r"echogeniczn\1"),
    CorrectionRule("miedniczka", r"\bjedniczk(\w*)", r"miedniczk\1"),
    CorrectionRule("jamy_brzusznej", r"\bamy brzusznej\b", "jamy brzusznej"),
    CorrectionRule("jomy", r"\bjomy\b", "jamy"),
    CorrectionRule("jedynie", r"\bjedeja\b", "jedynie"),
    CorrectionRule("dopplerem", r"\bdo plerem\b", "dopplerem"),
    CorrectionRule("nerki", r"\bnetki\b", "nerki"),
    CorrectionRule("brzuszny", r"\bbruszn(ej|a|y|ego|ą|ych)\b", r"brzuszn\1"),
    CorrectionRule("przerosniety", r"\bprzero[źz]ni[oę]t(\w*)", r"przerośnięt\1"),
    CorrectionRule("gesty", r"\bkęst([eyąa]\w*)", r"gęst\1"),
    CorrectionRule("torbiel", r"\bcyst[aę]\b", "torbiel"),
    CorrectionRule("torbiele", r"\bcyst[ye]\b", "torbiele"),
    CorrectionRule("torbielami", r"\bcystami\b", "torbielami"),
    CorrectionRule("torbielach", r"\bcystach\b", "torbielach"),
    CorrectionRule("unaczynienie", r"\bzwiększoną naczynienie\b", "zwiększone unaczynienie"),
    CorrectionRule("nieregularny", r"\bniereguraln(\w*)", r"nieregularn\1"),
    CorrectionRule("pecherz", r"\bpęcharz(\w*)", r"pęcherz\1"),
    CorrectionRule("plynu", r"\bwpłynu\b", "płynu"),
    CorrectionRule("wezly", r"\bwęzy\b", "węzły"),
    CorrectionRule("krezkowe", r"\bkrężkow(\w*)", r"krezkow\1"),
)

_COMPILED: dict[str, re.Pattern[str]] = {}


def _compile(pattern: str) -> re.Pattern[str]:
    compiled = _COMPILED.get(pattern)
    if compiled is None:
        compiled = re.compile(pattern, re.IGNORECASE)
        _COMPILED[pattern] = compiled
    return compiled


def _match_case(replacement: str, original: str) -> str:
    # Sentence-initial capitals survive the correction.
    if original[:1].isupper() and replacement:
        return replacement[0].upper() + replacement[1:]
    return replacement


def apply_dictionary(
    text: str,
    rules: tuple[CorrectionRule, ...] | list[CorrectionRule] = DEFAULT_RULES,
) -> DictionaryResult:
    """Apply ``rules`` in order and record which of them fired."""
    result = DictionaryResult(text=text or "")
    for rule in rules:
        pattern = rule.compiled()
        new_text, count = pattern.subn(
            lambda m, r=rule: _match_case(m.expand(r.replacement), m.group(0)),
            result.text,
        )
        if count:
            result.text = new_text
            result.fired.append(rule.rule_id)
            result.applied_count += count
    return result
