"""Logic validation: deterministic rules rejecting anatomically inconsistent findings.

Factory function::

    from vetscribe.validation import create_rules_engine
    engine = create_rules_engine(settings)
    if engine:
        report = engine.validate(facts.findings)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from vetscribe.validation.backends.file_backend import FileRulesBackend
from vetscribe.validation.backends.memory_backend import MemoryRulesBackend
from vetscribe.validation.default_rules import DEFAULT_RULES, RULES_VERSION
from vetscribe.validation.engine import RulesEngine
from vetscribe.validation.models import (
    IssueSeverity,
    Rule,
    RuleCategory,
    ValidationIssue,
    ValidationReport,
)

if TYPE_CHECKING:
    from vetscribe.core.config import AppSettings


def create_rules_engine(settings: AppSettings) -> RulesEngine | None:
    """Create a RulesEngine from application settings, or None if disabled."""
    cfg = settings.validation
    if not cfg.enabled:
        return None
    if cfg.backend == "file":
        return RulesEngine(FileRulesBackend(cfg.rules_path))
    return RulesEngine(MemoryRulesBackend(DEFAULT_RULES, version=RULES_VERSION))


__all__ = [
    "DEFAULT_RULES",
    "FileRulesBackend",
    "IssueSeverity",
    "MemoryRulesBackend",
    "Rule",
    "RuleCategory",
    "RulesEngine",
    "ValidationIssue",
    "ValidationReport",
    "create_rules_engine",
]
