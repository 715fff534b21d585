"""Real-time inference backend — wraps litellm.acompletion()."""

from __future__ import annotations

import logging
import time
from typing import Any

from litellm import acompletion

from vetscribe.inference.protocols import InferenceResult

log = logging.getLogger(__name__)


class RealTimeBackend:
    """Chat completion via litellm.acompletion().

    ``api_base`` / ``api_key`` are forwarded on every call so one process can
    talk to a local OpenAI-compatible server (LM Studio, Ollama) or a hosted
    provider without global litellm state.
    """

    def __init__(self, *, api_base: str | None = None, api_key: str | None = None) -> None:
        self._api_base = api_base
        self._api_key = api_key

    async def infer(
        self,
        messages: list[dict[str, Any]],
        model: str,
        **params: Any,
    ) -> InferenceResult:
        """Single inference call via litellm.acompletion()."""
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": messages,
            **params,
        }
        if self._api_base:
            kwargs.setdefault("api_base", self._api_base)
        if self._api_key:
            kwargs.setdefault("api_key", self._api_key)

        started = time.perf_counter()
        response = await acompletion(**kwargs)
        latency_ms = (time.perf_counter() - started) * 1000

        choice = response.choices[0]
        content = choice.message.content or ""
        reason = choice.finish_reason or ""

        usage: dict[str, int] = {}
        if hasattr(response, "usage") and response.usage:
            usage = {
                "prompt_tokens": getattr(response.usage, "prompt_tokens", 0) or 0,
                "completion_tokens": getattr(response.usage, "completion_tokens", 0) or 0,
                "total_tokens": getattr(response.usage, "total_tokens", 0) or 0,
            }

        return InferenceResult(
            content=content,
            finish_reason=reason,
            usage=usage,
            model=getattr(response, "model", model) or model,
            latency_ms=latency_ms,
        )
