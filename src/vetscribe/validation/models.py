"""Validation data models: rules, issues, and reports."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class IssueSeverity(str, Enum):
    """Severity of a validation issue.

    ``ERROR`` issues reject the finding; ``WARNING`` issues keep it and flag
    it for review.
    """

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class RuleCategory(str, Enum):
    """Category of a validation rule.

    Additional categories may be given as plain strings.
    """

    ANATOMY = "anatomy"
    IMAGING = "imaging"

    @classmethod
    def _missing_(cls, value: object) -> RuleCategory | None:
        """Allow arbitrary string values for extensibility."""
        if isinstance(value, str):
            obj = str.__new__(cls, value)
            obj._value_ = value
            obj._name_ = value.upper()
            return obj
        return None


@dataclass(frozen=True)
class Rule:
    """A single validation rule loaded from a backend."""

    rule_id: str
    name: str
    description: str
    category: RuleCategory
    severity: IssueSeverity = IssueSeverity.WARNING
    enabled: bool = True
    params: dict[str, Any] = field(default_factory=dict)
    version: int = 1


@dataclass
class ValidationIssue:
    """One rejected or flagged finding."""

    rule_id: str
    rule_name: str
    severity: IssueSeverity
    category: RuleCategory
    message: str
    organ: str = ""
    finding: str = ""
    matched_text: str = ""

    @property
    def rejects(self) -> bool:
        return self.severity == IssueSeverity.ERROR


@dataclass
class ValidationReport:
    """Filtered findings plus the rejection/warning log."""

    findings: list[str] = field(default_factory=list)
    total_rules_evaluated: int = 0
    issues: list[ValidationIssue] = field(default_factory=list)
    rules_version: int = 1

    @property
    def rejected(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.rejects]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == IssueSeverity.WARNING]

    @property
    def passed(self) -> bool:
        return not self.rejected

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form stored on the exam record."""
        return {
            "findings": list(self.findings),
            "rulesVersion": self.rules_version,
            "totalRulesEvaluated": self.total_rules_evaluated,
            "rejectedCount": len(self.rejected),
            "warningCount": len(self.warnings),
            "issues": [
                {
                    **asdict(issue),
                    "severity": issue.severity.value,
                    "category": str(issue.category.value),
                }
                for issue in self.issues
            ],
        }
