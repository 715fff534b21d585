"""Human-readable measurement lines shared by the synthesizer and the report."""

from __future__ import annotations

import re

from vetscribe.models import Measurement

_RANGE_UNIT_RE = re.compile(r"cm/s|m/s|mm/s", re.IGNORECASE)

# Known STT misspellings inside structure names (no interpretation).
_STRUCTURE_FIXES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"wroternej", re.IGNORECASE), "wrotnej"),
)


def format_number(value: float) -> str:
    """``8.0`` -> ``"8"``, ``8.25`` -> ``"8.25"``."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def clean_structure(structure: str) -> str:
    for pattern, replacement in _STRUCTURE_FIXES:
        structure = pattern.sub(replacement, structure)
    return structure


def format_values(m: Measurement, *, dimension_sep: str = " x ") -> str:
    """One value as-is; two as a range for velocities, else as dimensions."""
    nums = [format_number(v) for v in m.value]
    if len(nums) == 1:
        return nums[0]
    if len(nums) == 2 and _RANGE_UNIT_RE.search(m.unit or ""):
        return f"{nums[0]}–{nums[1]}"
    return dimension_sep.join(nums)


def summarize_measurements(measurements: list[Measurement]) -> list[str]:
    """``"structure: value unit"`` lines for the analysis payload."""
    out: list[str] = []
    for m in measurements:
        unit = f" {m.unit}" if m.unit else ""
        out.append(f"{clean_structure(m.structure)}: {format_values(m)}{unit}")
    return out
