"""Tests for MemoryRulesBackend."""

from __future__ import annotations

import pytest

from vetscribe.validation import DEFAULT_RULES, MemoryRulesBackend, Rule, RuleCategory
from vetscribe.validation.backends.protocol import IRulesBackend


class TestMemoryRulesBackend:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(MemoryRulesBackend(), IRulesBackend)

    def test_builtin_table(self) -> None:
        backend = MemoryRulesBackend(DEFAULT_RULES, version=7)
        assert {r.rule_id for r in backend.list_rules()} == {"ANAT-001", "IMG-001"}
        assert backend.get_version() == 7

    def test_custom_category_string(self) -> None:
        rule = Rule(rule_id="X-1", name="x", description="", category=RuleCategory("doppler"))
        backend = MemoryRulesBackend([rule])
        assert backend.list_rules(category=RuleCategory("doppler")) == [rule]
        assert backend.list_rules(category=RuleCategory.ANATOMY) == []

    def test_disabled_hidden(self) -> None:
        rule = Rule(rule_id="X-2", name="x", description="", category=RuleCategory.ANATOMY, enabled=False)
        backend = MemoryRulesBackend([rule])
        assert backend.list_rules() == []
        assert backend.list_rules(enabled_only=False) == [rule]

    def test_get_rule_missing(self) -> None:
        with pytest.raises(KeyError):
            MemoryRulesBackend().get_rule("missing")
