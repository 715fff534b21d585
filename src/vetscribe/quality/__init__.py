"""Transcript quality scoring."""

from __future__ import annotations

from vetscribe.quality.scorer import (
    alert_level,
    compute_transcript_quality,
    quality_band,
)

__all__ = ["compute_transcript_quality", "quality_band", "alert_level"]
