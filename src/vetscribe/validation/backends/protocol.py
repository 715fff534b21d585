"""Rules backend protocol — defines the contract all backends implement."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from vetscribe.validation.models import Rule, RuleCategory


@runtime_checkable
class IRulesBackend(Protocol):
    """Protocol for rules storage backends (builtin/memory, file)."""

    def list_rules(
        self,
        *,
        category: RuleCategory | None = None,
        enabled_only: bool = True,
    ) -> list[Rule]:
        """Return rules, optionally filtered by category and enabled status."""
        ...

    def get_rule(self, rule_id: str) -> Rule:
        """Get a single rule by ID. Raises KeyError if not found."""
        ...

    def get_version(self) -> int:
        """Return the current ruleset version number."""
        ...
