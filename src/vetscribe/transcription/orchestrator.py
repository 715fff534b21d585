"""Two-pass transcription: a fast low-beam run, then at most one high-beam retry.

The better-scoring run wins (ties keep the first).  Runs are never merged.
Every run, kept or discarded, is appended to the exam's history.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from vetscribe.models import SttMeta, TranscriptionHistory, TranscriptionRun
from vetscribe.normalization.dictionary import apply_dictionary
from vetscribe.quality.scorer import compute_transcript_quality
from vetscribe.transcription.postprocess import postprocess_transcript

if TYPE_CHECKING:
    from vetscribe.core.config import TranscriptionConfig
    from vetscribe.transcription.runner import ISttRunner, SttOutput

log = logging.getLogger(__name__)

DECISION_SINGLE_PASS = "single_pass"
DECISION_KEPT_FIRST = "retry_kept_first"
DECISION_KEPT_SECOND = "retry_kept_second"


@dataclass
class TranscriptionOutcome:
    active: TranscriptionRun
    history: TranscriptionHistory


class TranscriptionOrchestrator:
    """Drives an :class:`ISttRunner` and scores each pass."""

    def __init__(
        self,
        runner: ISttRunner,
        config: TranscriptionConfig,
        *,
        use_dictionary: bool = True,
    ) -> None:
        self._runner = runner
        self._config = config
        self._use_dictionary = use_dictionary

    def _build_run(self, out: SttOutput) -> TranscriptionRun:
        cleaned = postprocess_transcript(out.text)
        fired: list[str] = []
        if self._use_dictionary:
            result = apply_dictionary(cleaned)
            cleaned, fired = result.text, result.fired
        return TranscriptionRun(
            run_id=uuid.uuid4().hex[:12],
            raw_text=out.text,
            text=cleaned,
            quality=compute_transcript_quality(cleaned, out.text),
            stt=SttMeta(
                model=self._config.model,
                language=self._config.language,
                beam_size=out.beam_size,
                duration_ms=out.duration_ms,
                exit_code=out.exit_code,
                timed_out=out.timed_out,
            ),
            dictionary_rules_fired=fired,
        )

    def _needs_retry(self, run: TranscriptionRun) -> bool:
        return not run.text or run.quality.score < self._config.retry_threshold

    async def transcribe(
        self, audio_path: Path, history: TranscriptionHistory | None = None
    ) -> TranscriptionOutcome:
        """Raises:
            UpstreamError: the STT binary is missing or failed without output.
        """
        history = history.model_copy(deep=True) if history is not None else TranscriptionHistory()

        first = self._build_run(
            await self._runner.run(audio_path, beam_size=self._config.beam_size_low)
        )
        history.runs.append(first)
        active, decision = first, DECISION_SINGLE_PASS

        if self._needs_retry(first):
            log.info(
                "Transcript score %d below %d; retrying with beam=%d",
                first.quality.score, self._config.retry_threshold, self._config.beam_size_high,
            )
            second = self._build_run(
                await self._runner.run(audio_path, beam_size=self._config.beam_size_high)
            )
            history.runs.append(second)
            if second.quality.score > first.quality.score:
                active, decision = second, DECISION_KEPT_SECOND
            else:
                decision = DECISION_KEPT_FIRST

        history.decision = decision
        history.active_run_id = active.run_id
        log.info(
            "Transcription decision=%s score=%d runs=%d", decision, active.quality.score, len(history.runs)
        )
        return TranscriptionOutcome(active=active, history=history)
