"""Plain-text report assembly.

The report is rendered from Facts, Impression and Analysis alone; no model
call is made here.  Rendering is deterministic: the same inputs always give
the same text, and no timestamp is embedded.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from vetscribe.models import Analysis, Facts, Impression, Measurement, TranscriptQuality
from vetscribe.normalization.anti_loop import collapse_repeats, loop_key
from vetscribe.normalization.dictionary import apply_dictionary
from vetscribe.report.recommendations import recommend
from vetscribe.synthesis.measurements import clean_structure, format_values

if TYPE_CHECKING:
    from vetscribe.core.config import ReportConfig

log = logging.getLogger(__name__)

REPORT_VERSION = "report-template-v3-aggregated-rules"

EMPTY = "—"
MISSING_REASON = "- Nie podano w transkrypcji."
FOOTER = (
    "Uwaga: Dokument został automatycznie wygenerowany na podstawie transkrypcji i analizy AI.",
    "Wymagana jest weryfikacja i zatwierdzenie przez lekarza.",
)

SECTION_REASON = "POWÓD BADANIA:"
SECTION_CONDITIONS = "WARUNKI BADANIA:"
SECTION_FINDINGS = "OPIS BADANIA:"
SECTION_MEASUREMENTS = "POMIARY:"
SECTION_CONCLUSIONS = "WNIOSKI:"
SECTION_RECOMMENDATIONS = "ZALECENIA:"
SECTION_RED_FLAGS = "OBJAWY ALARMOWE:"

# Technical exam conditions only; clinical statements are not conditions.
ALLOWED_CONDITIONS: tuple[str, ...] = (
    "bez sedacji",
    "z sedacją",
    "w sedacji",
    "pozycja",
    "position",
    "na plecach",
    "na boku",
    "na boczku",
    "pacjent niespokojny",
    "niespokojny",
    "utrudnione badanie",
    "utrudniony",
    "ograniczona widoczność",
    "słaba widoczność",
    "duży pacjent",
    "pacjent duży",
    "trudne badanie",
    "bez narkozy",
    "znieczulenie",
    "gazy jelitowe",
)

_CONDITION_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\bbez sedacji\b", re.IGNORECASE), "bez sedacji"),
    (re.compile(r"\b(?<!bez )sedacj[iaę]\b", re.IGNORECASE), "w sedacji"),
    (re.compile(r"\bpozycj[iaę]\s+grzbietow", re.IGNORECASE), "pozycja grzbietowa"),
    (re.compile(r"\bpozycj[iaę]\s+bocz", re.IGNORECASE), "pozycja boczna"),
    (re.compile(r"\bniespokojn", re.IGNORECASE), "pacjent okresowo niespokojny"),
)

_GENERIC_REASONS = ("badanie usg", "usg jamy brzusznej", "badanie kontrolne usg")


# ── Section builders ─────────────────────────────────────────────────


def _polish(line: str) -> str:
    return apply_dictionary(" ".join(line.split())).text


def filter_conditions(lines: list[str]) -> list[str]:
    out: list[str] = []
    for line in lines:
        s = line.strip()
        if s and any(k in s.lower() for k in ALLOWED_CONDITIONS):
            out.append(s)
    return out


def conditions_from_transcript(transcript: str | None) -> list[str]:
    """Fallback condition phrases found verbatim-ish in the transcript."""
    if not transcript:
        return []
    found = [label for pattern, label in _CONDITION_PATTERNS if pattern.search(transcript)]
    if "bez sedacji" in found and "w sedacji" in found:
        found.remove("w sedacji")
    return found


def aggregate_findings(findings: list[str]) -> list[str]:
    """One line per organ with deduplicated descriptions joined by ``"; "``.

    The organ is the text before the first colon, compared case-insensitively;
    the first spelling wins.  Lines without a colon pass through, deduplicated,
    in their original position.
    """
    order: list[str] = []
    organs: dict[str, tuple[str, list[str]]] = {}
    seen_desc: dict[str, set[str]] = {}
    passthrough: dict[str, str] = {}

    for raw in findings:
        line = raw.strip()
        if not line:
            continue
        organ, sep, desc = line.partition(":")
        organ, desc = organ.strip(), desc.strip()
        if not sep or not organ or not desc:
            key = "\x00" + loop_key(line)
            if key not in passthrough:
                passthrough[key] = line
                order.append(key)
            continue
        key = organ.lower()
        if key not in organs:
            organs[key] = (organ, [])
            seen_desc[key] = set()
            order.append(key)
        dkey = loop_key(desc)
        if dkey not in seen_desc[key]:
            seen_desc[key].add(dkey)
            organs[key][1].append(desc.rstrip("."))

    out: list[str] = []
    for key in order:
        if key in passthrough:
            out.append(passthrough[key])
        else:
            organ, descs = organs[key]
            out.append(f"{organ}: {'; '.join(descs)}")
    return out


def format_measurement(m: Measurement) -> str:
    """``structure–location: value unit`` with a dash range for two values."""
    label = clean_structure(m.structure.strip())
    if m.location:
        label = f"{label}–{m.location.strip()}"
    values = format_values(m) if len(m.value) != 2 else format_values(m, dimension_sep="–")
    unit = f" {m.unit}" if m.unit else ""
    return f"{label}: {values}{unit}"


def quality_notice(quality: TranscriptQuality | None, threshold: int) -> str | None:
    if quality is None or quality.score >= threshold:
        return None
    if quality.score >= 60:
        return (
            "Uwaga: Średnia jakość nagrania/transkrypcji - prosimy o zweryfikowanie "
            "raportu przed zatwierdzeniem."
        )
    return (
        "Uwaga: Niska jakość nagrania/transkrypcji - raport może być niepełny lub zawierać "
        "błędy. Prosimy o zweryfikowanie raportu przed zatwierdzeniem."
    )


def _unique(lines: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for line in lines:
        key = loop_key(line)
        if key and key not in seen:
            seen.add(key)
            out.append(line)
    return out


def _bullets(lines: list[str]) -> list[str]:
    body = collapse_repeats(
        "\n".join(f"- {line.rstrip()}" for line in _unique(lines)), threshold=1, keep=1
    ).text
    return body.splitlines() if body else [EMPTY]


# ── Assembler ────────────────────────────────────────────────────────


class ReportAssembler:
    """Renders the final plain-text report."""

    def __init__(self, config: ReportConfig) -> None:
        self._config = config

    @property
    def version(self) -> str:
        return REPORT_VERSION

    def render(
        self,
        facts: Facts,
        impression: Impression,
        analysis: Analysis,
        *,
        findings: list[str] | None = None,
        quality: TranscriptQuality | None = None,
        transcript: str | None = None,
    ) -> str:
        """``findings`` replaces ``facts.findings`` (the validated list)."""
        source_findings = list(facts.findings if findings is None else findings)
        finding_lines = aggregate_findings([_polish(f) for f in source_findings])

        conditions = filter_conditions(facts.conditions) or conditions_from_transcript(transcript)
        measurements = [format_measurement(m) for m in facts.measurements]

        conclusions = [_polish(c) for c in impression.doctor_key_concerns]
        if not conclusions and analysis.summary:
            conclusions = [analysis.summary]

        recommendations = list(analysis.recommendations)
        if not recommendations:
            recommendations = recommend(finding_lines)

        out: list[str] = [f"RAPORT BADANIA: {self._config.body_region}"]
        if facts.exam.patient_name:
            out.append(f"Pacjent: {facts.exam.patient_name.strip()}")

        out += ["", SECTION_REASON, self._reason_line(facts.exam.reason)]
        out += ["", SECTION_CONDITIONS, *_bullets([_polish(c) for c in conditions])]
        out += ["", SECTION_FINDINGS, *_bullets(finding_lines)]
        out += ["", SECTION_MEASUREMENTS, *_bullets(measurements)]
        out += ["", SECTION_CONCLUSIONS, *_bullets(conclusions)]
        out += ["", SECTION_RECOMMENDATIONS, *_bullets(recommendations)]
        out += ["", SECTION_RED_FLAGS, *_bullets(list(analysis.red_flags))]

        out.append("")
        if self._config.include_quality_notice:
            notice = quality_notice(quality, self._config.quality_notice_threshold)
            if notice:
                out.append(notice)
        out.extend(FOOTER)

        log.debug(
            "Report rendered: %d finding line(s), %d measurement(s)",
            len(finding_lines),
            len(measurements),
        )
        return "\n".join(out)

    @staticmethod
    def _reason_line(reason: str | None) -> str:
        r = (reason or "").strip()
        if not r or r.lower().rstrip(".") in _GENERIC_REASONS:
            return MISSING_REASON
        return f"- {_polish(r)}"
