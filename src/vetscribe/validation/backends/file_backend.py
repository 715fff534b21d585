"""File-backed rules backend — loads a versioned rule table from JSON on disk.

File shape::

    {"version": 2, "rules": [{"rule_id": "ANAT-001", "name": "...", "category": "anatomy",
                              "severity": "error", "params": {...}}]}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from vetscribe.validation.models import IssueSeverity, Rule, RuleCategory

log = logging.getLogger(__name__)


class FileRulesBackend:
    """Loads rules from a JSON file, lazily on first access."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._rules: dict[str, Rule] | None = None
        self._version: int = 1

    def list_rules(
        self,
        *,
        category: RuleCategory | None = None,
        enabled_only: bool = True,
    ) -> list[Rule]:
        rules = self._ensure_loaded()
        result: list[Rule] = []
        for rule in rules.values():
            if enabled_only and not rule.enabled:
                continue
            if category is not None and rule.category != category:
                continue
            result.append(rule)
        return result

    def get_rule(self, rule_id: str) -> Rule:
        rules = self._ensure_loaded()
        if rule_id not in rules:
            raise KeyError(f"Rule {rule_id!r} not found in {self._path}")
        return rules[rule_id]

    def get_version(self) -> int:
        self._ensure_loaded()
        return self._version

    def _ensure_loaded(self) -> dict[str, Rule]:
        if self._rules is not None:
            return self._rules
        if not self._path.exists():
            raise FileNotFoundError(f"Rules file not found: {self._path}")
        data = json.loads(self._path.read_text(encoding="utf-8"))
        self._rules = self._parse(data)
        return self._rules

    def _parse(self, data: dict[str, Any]) -> dict[str, Rule]:
        self._version = int(data.get("version", 1))
        rules: dict[str, Rule] = {}
        for rule_data in data.get("rules", []):
            rule = Rule(
                rule_id=rule_data["rule_id"],
                name=rule_data["name"],
                description=rule_data.get("description", ""),
                category=RuleCategory(rule_data["category"]),
                severity=IssueSeverity(rule_data.get("severity", "warning")),
                enabled=rule_data.get("enabled", True),
                params=rule_data.get("params", {}),
                version=rule_data.get("version", self._version),
            )
            rules[rule.rule_id] = rule
        log.info("Loaded %d rules from %s (version %d)", len(rules), self._path, self._version)
        return rules
