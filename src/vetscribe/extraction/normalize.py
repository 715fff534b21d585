"""Coerce parsed model output into ``Facts`` / ``Impression``.

Models return nulls where lists belong, dashes where nulls belong, numbers as
``"8,2"`` strings and duplicated bullet points; everything is cleaned here so
downstream stages see one shape.
"""

from __future__ import annotations

import math
import re
from typing import Any

from vetscribe.models import ExamInfo, Facts, Impression, Measurement

EMPTY_SENTINELS = frozenset(
    {"", "—", "–", "-", "brak", "brak danych", "nie dotyczy", "nie podano", "n/a", "na", "none", "null"}
)

_WS_RE = re.compile(r"\s+")
_SINGLE_NUMBER_RE = re.compile(r"^-?\d+(?:[.,]\d+)?$")
_NUMBER_RE = re.compile(r"-?\d+(?:[.,]\d+)?")
_FINDING_COLON_RE = re.compile(r"^([^:]{1,60}?)\s*:\s*(.+)$", re.DOTALL)


def clean_str(value: Any) -> str | None:
    """Trimmed string, or None for non-strings and empty-ish sentinels."""
    if not isinstance(value, str):
        return None
    s = _WS_RE.sub(" ", value).strip()
    if s.lower().rstrip(".") in EMPTY_SENTINELS:
        return None
    return s


def dedupe_key(value: str) -> str:
    return _WS_RE.sub(" ", value).strip().casefold().rstrip(".")


def clean_list(value: Any) -> list[str]:
    """List of trimmed, non-empty, case-insensitively unique strings; order kept."""
    if value is None:
        return []
    items = [value] if isinstance(value, str) else value
    if not isinstance(items, (list, tuple)):
        return []
    out: list[str] = []
    seen: set[str] = set()
    for item in items:
        s = clean_str(item)
        if s is None:
            continue
        key = dedupe_key(s)
        if key in seen:
            continue
        seen.add(key)
        out.append(s)
    return out


def to_number(value: Any) -> float | None:
    """Finite float from a number or a ``"8,2"``-style string."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        s = value.strip()
        if _SINGLE_NUMBER_RE.match(s):
            return float(s.replace(",", "."))
    return None


def to_number_list(value: Any) -> list[float]:
    """Finite numbers from a list, a scalar, or a ``"3,2 x 2,1"`` string."""
    if isinstance(value, (list, tuple)):
        numbers = [to_number(v) for v in value]
        return [n for n in numbers if n is not None]
    single = to_number(value)
    if single is not None:
        return [single]
    if isinstance(value, str):
        return [float(m.replace(",", ".")) for m in _NUMBER_RE.findall(value)]
    return []


def normalize_measurements(raw: Any) -> list[Measurement]:
    """Drop any measurement without a structure or without a finite number."""
    if not isinstance(raw, list):
        return []
    out: list[Measurement] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        structure = clean_str(item.get("structure"))
        values = to_number_list(item.get("value", item.get("values")))
        if not structure or not values:
            continue
        out.append(
            Measurement(
                structure=structure,
                value=values,
                unit=clean_str(item.get("unit")) or "",
                location=clean_str(item.get("location")),
            )
        )
    return out


def normalize_finding(line: str) -> str:
    """``"Wątroba :jednorodna"`` -> ``"Wątroba: jednorodna"``; colon-less lines pass through."""
    match = _FINDING_COLON_RE.match(line)
    if not match:
        return line
    return f"{match.group(1).strip()}: {match.group(2).strip()}"


def _pick(raw: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def normalize_facts(raw: Any) -> Facts:
    raw = raw if isinstance(raw, dict) else {}
    exam_raw = raw.get("exam") if isinstance(raw.get("exam"), dict) else {}
    findings = clean_list([normalize_finding(f) for f in clean_list(raw.get("findings"))])
    return Facts(
        exam=ExamInfo(
            body_region=clean_str(_pick(exam_raw, "bodyRegion", "body_region")),
            reason=clean_str(_pick(exam_raw, "reason")),
            patient_name=clean_str(_pick(exam_raw, "patientName", "patient_name")),
        ),
        conditions=clean_list(raw.get("conditions")),
        findings=findings,
        measurements=normalize_measurements(raw.get("measurements")),
    )


def _consent(value: Any) -> str | None:
    if value is True:
        return "yes"
    if value is False:
        return "no"
    s = clean_str(value)
    if s is None:
        return None
    s = s.lower()
    if s in ("yes", "tak", "y"):
        return "yes"
    if s in ("no", "nie", "n"):
        return "no"
    return None


def normalize_impression(raw: Any, *, max_quotes: int = 2) -> Impression:
    raw = raw if isinstance(raw, dict) else {}
    return Impression(
        doctor_overall=clean_str(_pick(raw, "doctorOverall", "doctor_overall")),
        doctor_key_concerns=clean_list(_pick(raw, "doctorKeyConcerns", "doctor_key_concerns")),
        doctor_plan=clean_list(_pick(raw, "doctorPlan", "doctor_plan")),
        doctor_red_flags=clean_list(_pick(raw, "doctorRedFlags", "doctor_red_flags")),
        quotes=clean_list(raw.get("quotes"))[:max_quotes],
        consent_recording=_consent(_pick(raw, "consentRecording", "consent_recording")),
    )
