"""Tests for the logic validation rules engine."""

from __future__ import annotations

import pytest

from vetscribe.core.config import AppSettings, ValidationConfig
from vetscribe.validation import (
    DEFAULT_RULES,
    IssueSeverity,
    MemoryRulesBackend,
    Rule,
    RuleCategory,
    RulesEngine,
    create_rules_engine,
)
from vetscribe.validation.findings import NEVER_MATCH, compile_terms, split_finding


@pytest.fixture
def engine() -> RulesEngine:
    return RulesEngine(MemoryRulesBackend(DEFAULT_RULES, version=1))


class TestWallAssignment:
    @pytest.mark.parametrize(
        ("line", "organ", "matched"),
        [
            ("Wątroba: ściana pogrubiała", "Wątroba", "ściana"),
            ("Liver: wall thickened", "Liver", "wall"),
        ],
    )
    def test_parenchymal_wall_rejected(self, engine, line: str, organ: str, matched: str) -> None:
        findings = [line, "Wątroba: jednorodna"]
        report = engine.validate(findings)

        assert report.findings == ["Wątroba: jednorodna"]
        assert len(report.rejected) == 1
        issue = report.rejected[0]
        assert issue.rule_id == "ANAT-001"
        assert issue.organ == organ
        assert issue.matched_text == matched

    @pytest.mark.parametrize(
        "line",
        [
            "Pęcherz moczowy: ściana pogrubiała",
            "Pęcherzyk żółciowy: ściana cienka",
            "Jelito cienkie: ściana warstwowa",
            "Bladder: wall thickened",
        ],
    )
    def test_hollow_organ_wall_kept(self, engine, line: str) -> None:
        report = engine.validate([line])
        assert report.findings == [line]
        assert report.passed

    def test_line_without_organ_ignored(self, engine) -> None:
        report = engine.validate(["ściana pogrubiała"])
        assert report.findings == ["ściana pogrubiała"]


class TestAcousticShadow:
    def test_shadow_without_source_warns_but_keeps(self, engine) -> None:
        line = "Nerka lewa: obszar z cieniem akustycznym"
        report = engine.validate([line])

        assert report.findings == [line]
        assert len(report.warnings) == 1
        assert report.warnings[0].severity == IssueSeverity.WARNING

    def test_shadow_with_stone_is_fine(self, engine) -> None:
        report = engine.validate(["Pęcherz moczowy: kamień z cieniem akustycznym"])
        assert report.issues == []


class TestReport:
    def test_to_dict_shape(self, engine) -> None:
        data = engine.validate(["Śledziona: ściana nieregularna"]).to_dict()

        assert data["findings"] == []
        assert data["rulesVersion"] == 1
        assert data["totalRulesEvaluated"] == len(DEFAULT_RULES)
        assert data["rejectedCount"] == 1
        assert data["warningCount"] == 0
        assert data["issues"][0]["severity"] == "error"
        assert data["issues"][0]["category"] == "anatomy"

    def test_failing_category_does_not_block_others(self, engine) -> None:
        def boom(findings, rules):
            raise RuntimeError("broken check")

        engine._dispatchers[0] = (engine._dispatchers[0][0], boom)
        report = engine.validate(["Nerka: z cieniem akustycznym"])
        assert len(report.warnings) == 1


class TestEmptyTermLists:
    def test_compile_terms_empty_never_matches(self) -> None:
        assert compile_terms([]) is NEVER_MATCH
        assert compile_terms(["", "  "]).search("Wątroba: ściana") is None

    def test_missing_wall_bearing_still_rejects_parenchymal_wall(self) -> None:
        rule = Rule(
            rule_id="ANAT-001",
            name="wall_assignment",
            description="",
            category=RuleCategory.ANATOMY,
            severity=IssueSeverity.ERROR,
            params={"wall_terms": ["ścian"], "wall_bearing": []},
        )
        report = RulesEngine(MemoryRulesBackend([rule])).validate(["Wątroba: ściana pogrubiała"])

        assert report.findings == []
        assert [i.rule_id for i in report.rejected] == ["ANAT-001"]

    def test_missing_solid_terms_warns_on_every_shadow(self) -> None:
        rule = Rule(
            rule_id="IMG-001",
            name="acoustic_shadow_source",
            description="",
            category=RuleCategory.IMAGING,
            params={"shadow_terms": ["cieniem akustyczn"]},
        )
        line = "Pęcherz moczowy: kamień z cieniem akustycznym"
        report = RulesEngine(MemoryRulesBackend([rule])).validate([line])

        assert report.findings == [line]
        assert len(report.warnings) == 1


class TestFactory:
    def test_disabled_returns_none(self) -> None:
        settings = AppSettings(validation=ValidationConfig(enabled=False))
        assert create_rules_engine(settings) is None

    def test_builtin_default(self) -> None:
        assert isinstance(create_rules_engine(AppSettings()), RulesEngine)


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("Wątroba: jednorodna", ("Wątroba", "jednorodna")),
        ("  Nerki :  bez zmian ", ("Nerki", "bez zmian")),
        ("bez dwukropka", ("", "bez dwukropka")),
    ],
)
def test_split_finding(line: str, expected: tuple[str, str]) -> None:
    assert split_finding(line) == expected
