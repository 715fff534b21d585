"""Built-in versioned rule table for the logic validation layer."""

from __future__ import annotations

from vetscribe.validation.models import IssueSeverity, Rule, RuleCategory

RULES_VERSION = 1

HOLLOW_ORGANS: tuple[str, ...] = (
    # Polish stems
    "pęcherz",  # pęcherz moczowy, pęcherzyk żółciowy
    "żołąd",
    "jelit",
    "dwunastnic",
    "okrężnic",
    "odbytnic",
    "kątnic",
    "macic",
    "moczowod",
    "cewk",
    "przełyk",
    # English
    "bladder",
    "gallbladder",
    "stomach",
    "intestin",
    "bowel",
    "colon",
    "duoden",
    "jejun",
    "ileum",
    "uterus",
    "ureter",
    "esophag",
)

# Non-organ structures that legitimately have a wall.
OTHER_WALL_BEARING: tuple[str, ...] = (
    "jam",  # jama brzuszna
    "powłok",
    "aort",
    "żył",
    "tętnic",
    "naczyni",
    "torbiel",
    "ropień",
    "ropni",
    "abdominal",
    "vessel",
    "vein",
    "arter",
    "cyst",
    "abscess",
)

SOLID_SOURCES: tuple[str, ...] = (
    "kamie",
    "kamic",
    "złóg",
    "złog",
    "konkrement",
    "zwapni",
    "mineraliz",
    "ciało obce",
    "ciała obcego",
    "gaz",
    "stone",
    "calcul",
    "calcif",
    "foreign body",
    "gas",
)

DEFAULT_RULES: tuple[Rule, ...] = (
    Rule(
        rule_id="ANAT-001",
        name="wall_assignment",
        description="Wall terms are valid only for hollow organs and other wall-bearing structures",
        category=RuleCategory.ANATOMY,
        severity=IssueSeverity.ERROR,
        params={
            "wall_terms": ["ścian", "wall"],
            "wall_bearing": [*HOLLOW_ORGANS, *OTHER_WALL_BEARING],
        },
        version=RULES_VERSION,
    ),
    Rule(
        rule_id="IMG-001",
        name="acoustic_shadow_source",
        description="Acoustic shadow should co-occur with a solid structure (stone, concretion, calcification)",
        category=RuleCategory.IMAGING,
        severity=IssueSeverity.WARNING,
        params={
            "shadow_terms": ["cień akustyczn", "cienia akustyczn", "cieniem akustyczn", "acoustic shadow"],
            "solid_terms": list(SOLID_SOURCES),
        },
        version=RULES_VERSION,
    ),
)
