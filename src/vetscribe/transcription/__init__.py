"""Speech-to-text orchestration over an external whisper binary."""

from __future__ import annotations

from vetscribe.transcription.orchestrator import (
    DECISION_KEPT_FIRST,
    DECISION_KEPT_SECOND,
    DECISION_SINGLE_PASS,
    TranscriptionOrchestrator,
    TranscriptionOutcome,
)
from vetscribe.transcription.postprocess import postprocess_transcript
from vetscribe.transcription.runner import ISttRunner, SttOutput, WhisperRunner

__all__ = [
    "DECISION_KEPT_FIRST",
    "DECISION_KEPT_SECOND",
    "DECISION_SINGLE_PASS",
    "ISttRunner",
    "SttOutput",
    "TranscriptionOrchestrator",
    "TranscriptionOutcome",
    "WhisperRunner",
    "postprocess_transcript",
]
