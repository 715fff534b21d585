"""Imaging-artifact checks (IMG-001): acoustic shadow needs a solid source."""

from __future__ import annotations

from vetscribe.validation.findings import compile_terms, split_finding
from vetscribe.validation.models import Rule, ValidationIssue

ACOUSTIC_SHADOW = "IMG-001"


def check_imaging(findings: list[str], rules: list[Rule]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    rules_by_id = {r.rule_id: r for r in rules}

    if ACOUSTIC_SHADOW in rules_by_id:
        rule = rules_by_id[ACOUSTIC_SHADOW]
        shadow_re = compile_terms(rule.params.get("shadow_terms", ["cień akustyczn", "acoustic shadow"]))
        solid_re = compile_terms(rule.params.get("solid_terms", []))
        for line in findings:
            shadow = shadow_re.search(line)
            if shadow is None or solid_re.search(line):
                continue
            organ, _ = split_finding(line)
            issues.append(
                ValidationIssue(
                    rule_id=rule.rule_id,
                    rule_name=rule.name,
                    severity=rule.severity,
                    category=rule.category,
                    message="Cień akustyczny bez wskazania struktury litej (złóg/kamień/zwapnienie); do weryfikacji",
                    organ=organ,
                    finding=line,
                    matched_text=shadow.group(0),
                )
            )

    return issues
