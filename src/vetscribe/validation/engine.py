"""Rules engine: loads rules from a backend and dispatches to check modules."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from vetscribe.validation.checks.anatomy import check_anatomy
from vetscribe.validation.checks.imaging import check_imaging
from vetscribe.validation.models import (
    Rule,
    RuleCategory,
    ValidationIssue,
    ValidationReport,
)

if TYPE_CHECKING:
    from vetscribe.validation.backends.protocol import IRulesBackend

log = logging.getLogger(__name__)

_CheckFn = Callable[[list[str], list[Rule]], list[ValidationIssue]]


class RulesEngine:
    """Filters findings against deterministic anatomy/imaging rules.

    Pure computation, no model calls.  Each category's check module runs
    independently; a failure in one category does not block others, and a
    rejection never halts the pipeline.
    """

    def __init__(self, backend: IRulesBackend) -> None:
        self._backend = backend
        self._dispatchers: list[tuple[RuleCategory, _CheckFn]] = [
            (RuleCategory.ANATOMY, check_anatomy),
            (RuleCategory.IMAGING, check_imaging),
        ]

    def validate(self, findings: list[str]) -> ValidationReport:
        """Return the kept findings plus every rejection and warning."""
        all_rules = self._backend.list_rules(enabled_only=True)
        report = ValidationReport(
            total_rules_evaluated=len(all_rules),
            rules_version=self._backend.get_version(),
        )

        for category, check in self._dispatchers:
            category_rules = [r for r in all_rules if r.category == category]
            if not category_rules:
                continue
            try:
                report.issues.extend(check(findings, category_rules))
            except Exception:
                log.exception("Validation category %s failed", category.value)

        rejected = {issue.finding for issue in report.rejected}
        report.findings = [f for f in findings if f not in rejected]

        if report.issues:
            log.info(
                "Logic validation: %d finding(s) rejected, %d warning(s)",
                len(report.rejected),
                len(report.warnings),
            )
        return report
