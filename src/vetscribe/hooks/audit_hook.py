"""Audit hook: logs every LLM call for traceability."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vetscribe.inference.protocols import InferenceResult

log = logging.getLogger(__name__)


class AuditHook:
    """Logs model, stop reason, token usage and latency of each completion.

    Parameters
    ----------
    service_name:
        Service dimension attached to every audit line.
    """

    def __init__(self, service_name: str = "vetscribe") -> None:
        self._service_name = service_name
        self.calls = 0

    def on_model_call(self, *, stage: str, result: InferenceResult, max_tokens: int) -> None:
        self.calls += 1
        usage = result.usage or {}
        log.info(
            "llm_call | stage=%s model=%s finish_reason=%s prompt_tokens=%s "
            "completion_tokens=%s max_tokens=%s latency_ms=%.0f service=%s",
            stage or "?",
            result.model or "unknown",
            result.finish_reason,
            usage.get("prompt_tokens", "?"),
            usage.get("completion_tokens", "?"),
            max_tokens,
            result.latency_ms,
            self._service_name,
        )
        if result.truncated:
            log.warning(
                "llm_call truncated | stage=%s finish_reason=%s", stage or "?", result.finish_reason
            )
