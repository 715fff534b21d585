"""Conservative recommendation rules used when the clinician stated no plan.

Rules map an organ plus a keyword in its finding to generic follow-up
actions.  They never name a diagnosis.  Order matters: the first matching
rules contribute their lines in table order, duplicates removed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

DEFAULT_RECOMMENDATION = (
    "W razie potrzeby uzupełnić opis badania w dokumentacji lub wykonać badanie kontrolne."
)


@dataclass(frozen=True)
class RecommendationRule:
    rule_id: str
    organ: re.Pattern[str] | None
    keywords: re.Pattern[str]
    lines: tuple[str, ...]


def _rx(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


RECOMMENDATION_RULES: tuple[RecommendationRule, ...] = (
    RecommendationRule(
        rule_id="REC-KIDNEY-DILATION",
        organ=_rx(r"\bnerk|\bmiedniczk|\bmoczow|\bkidney"),
        keywords=_rx(r"poszerz|zastój|zastoj|kamie|złog|obstrukc|wodonercz|dilat|hydroneph"),
        lines=(
            "Zaleca się oznaczenie parametrów nerkowych (mocznik, kreatynina, SDMA) oraz badanie moczu.",
            "Rozważyć kontrolne USG układu moczowego.",
        ),
    ),
    RecommendationRule(
        rule_id="REC-FOREIGN-BODY",
        organ=None,
        keywords=_rx(r"ciał[oa]\s+obc|niedrożno|poszerzone światło|foreign body|obstruction"),
        lines=(
            "Pilna konsultacja chirurgiczna zgodnie z obrazem klinicznym.",
            "Rozważyć RTG jamy brzusznej lub TK w celu potwierdzenia lokalizacji.",
            "Monitorować stan ogólny pacjenta oraz parametry życiowe.",
        ),
    ),
    RecommendationRule(
        rule_id="REC-WALL-VASCULARITY",
        organ=None,
        keywords=_rx(
            r"zwiększone unaczynienie|pogrubieni\w* ścian|zatarta warstwowość|"
            r"osłabiona perystaltyka|wall thickening"
        ),
        lines=(
            "Korelacja z objawami klinicznymi i badaniami laboratoryjnymi; rozważyć kontrolne USG.",
        ),
    ),
    RecommendationRule(
        rule_id="REC-FREE-FLUID",
        organ=None,
        keywords=_rx(r"woln\w*\s+płyn|płyn\w*\s+woln|free fluid"),
        lines=("Rozważyć kontrolne USG w celu oceny ilości wolnego płynu.",),
    ),
)


# Negation cue ending right before a keyword, within the same clause.
_NEGATION_RE = _rx(
    r"(?:\bnie\s*|\b(?:bez|brak\w*|no|without)\s+(?:[\w-]+\s+){0,2})$"
)
_CLAUSE_BREAK_RE = re.compile(r"[,;.:]")


def _organ_of(finding: str) -> str:
    return finding.split(":", 1)[0] if ":" in finding else ""


def _affirmed(keywords: re.Pattern[str], finding: str) -> bool:
    """True when some keyword match in ``finding`` is not negated."""
    for match in keywords.finditer(finding):
        clause = _CLAUSE_BREAK_RE.split(finding[: match.start()])[-1]
        if not _NEGATION_RE.search(clause):
            return True
    return False


def recommend(findings: list[str]) -> list[str]:
    """Rule-table recommendations for ``findings``; empty when there are no findings.

    Negated mentions ("nieposzerzone", "bez złogów", "brak cech zastoju")
    do not trigger a rule.
    """
    if not findings:
        return []
    out: list[str] = []
    for rule in RECOMMENDATION_RULES:
        for finding in findings:
            if rule.organ is not None and not rule.organ.search(_organ_of(finding) or finding):
                continue
            if _affirmed(rule.keywords, finding):
                out.extend(line for line in rule.lines if line not in out)
                break
    return out or [DEFAULT_RECOMMENDATION]
