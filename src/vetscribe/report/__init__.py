"""Deterministic plain-text report assembly."""

from __future__ import annotations

from vetscribe.report.assembler import (
    REPORT_VERSION,
    ReportAssembler,
    aggregate_findings,
    filter_conditions,
    format_measurement,
)
from vetscribe.report.recommendations import DEFAULT_RECOMMENDATION, recommend

__all__ = [
    "DEFAULT_RECOMMENDATION",
    "REPORT_VERSION",
    "ReportAssembler",
    "aggregate_findings",
    "filter_conditions",
    "format_measurement",
    "recommend",
]
