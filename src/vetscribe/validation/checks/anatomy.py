"""Anatomy checks (ANAT-001): wall terms only belong to wall-bearing structures.

A parenchymal organ (liver, spleen, kidney, pancreas) has no wall; a finding
such as ``"Wątroba: ściana pogrubiała"`` is an STT or extraction error and is
rejected.
"""

from __future__ import annotations

import logging

from vetscribe.validation.findings import compile_terms, split_finding
from vetscribe.validation.models import Rule, ValidationIssue

log = logging.getLogger(__name__)

WALL_ASSIGNMENT = "ANAT-001"


def check_anatomy(findings: list[str], rules: list[Rule]) -> list[ValidationIssue]:
    """Run all anatomy rules against ``findings``."""
    issues: list[ValidationIssue] = []
    rules_by_id = {r.rule_id: r for r in rules}

    if WALL_ASSIGNMENT in rules_by_id:
        issues.extend(_check_wall_assignment(findings, rules_by_id[WALL_ASSIGNMENT]))

    return issues


def _check_wall_assignment(findings: list[str], rule: Rule) -> list[ValidationIssue]:
    wall_re = compile_terms(rule.params.get("wall_terms", ["ścian", "wall"]))
    bearing_re = compile_terms(rule.params.get("wall_bearing", []))

    issues: list[ValidationIssue] = []
    for line in findings:
        organ, description = split_finding(line)
        if not organ:
            continue
        wall = wall_re.search(description)
        if wall is None or bearing_re.search(organ):
            continue
        issues.append(
            ValidationIssue(
                rule_id=rule.rule_id,
                rule_name=rule.name,
                severity=rule.severity,
                category=rule.category,
                message=f"'{organ}' nie jest narządem jamistym; opis ściany ('{wall.group(0)}') odrzucony",
                organ=organ,
                finding=line,
                matched_text=wall.group(0),
            )
        )
        log.info("Rejected finding (rule=%s, organ=%s): %r", rule.rule_id, organ, line)
    return issues
