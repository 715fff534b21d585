"""Startup validation: fail-fast on critical misconfigurations."""

from __future__ import annotations

import logging
import os
import shutil
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vetscribe.core.config import AppSettings

log = logging.getLogger(__name__)

# Providers that run locally and do not require an API key
_NO_KEY_PROVIDERS = frozenset({"ollama", "litellm"})


def validate_settings(settings: AppSettings) -> None:
    """Validate application settings at startup. Raises ValueError on fatal misconfig."""
    _check_api_key(settings)
    _check_transcription(settings)
    _check_retry_windows(settings)
    _check_persistence(settings)


def _check_api_key(settings: AppSettings) -> None:
    """Reject placeholder API keys for providers that need real ones."""
    if settings.llm.provider not in _NO_KEY_PROVIDERS:
        if settings.llm.api_key in ("no-key", ""):
            raise ValueError(
                f"VETSCRIBE_LLM_API_KEY is required for provider '{settings.llm.provider}'. "
                f"Set it via environment variable or secrets manager."
            )


def _check_transcription(settings: AppSettings) -> None:
    """The retry pass must search wider than the first pass."""
    stt = settings.transcription
    if stt.beam_size_high <= stt.beam_size_low:
        raise ValueError(
            f"VETSCRIBE_TRANSCRIPTION_BEAM_SIZE_HIGH ({stt.beam_size_high}) must exceed "
            f"BEAM_SIZE_LOW ({stt.beam_size_low})."
        )
    if shutil.which(stt.binary) is None:
        log.warning("STT binary %r not found on PATH; /transcribe will fail", stt.binary)


def _check_retry_windows(settings: AppSettings) -> None:
    """Retry budgets shrink; a retry larger than the first call is a config error."""
    facts = settings.facts
    if facts.retry_tail_chars > facts.tail_chars or facts.retry_max_tokens > facts.max_tokens:
        raise ValueError("Facts retry window/budget must not exceed the primary window/budget.")
    imp = settings.impression
    if imp.retry_max_input_chars > imp.max_input_chars or imp.retry_max_tokens > imp.max_tokens:
        raise ValueError("Impression retry window/budget must not exceed the primary window/budget.")


def _check_persistence(settings: AppSettings) -> None:
    """Warn about memory persistence outside tests."""
    is_container = bool(os.environ.get("KUBERNETES_SERVICE_HOST"))
    if settings.persistence.backend == "memory":
        log.warning(
            "VETSCRIBE_PERSISTENCE_BACKEND=memory: exam records are lost on restart%s.",
            " (container environment)" if is_container else "",
        )
