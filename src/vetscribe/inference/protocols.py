"""Inference backend protocol — defines the contract all backends implement."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

NORMAL_STOP = "stop"


@dataclass
class InferenceResult:
    """Result from a single chat-completion call.

    ``finish_reason`` is the provider's raw stop reason (``"stop"``,
    ``"length"``, ``"content_filter"``, ...).
    """

    content: str
    finish_reason: str = NORMAL_STOP
    usage: dict[str, int] = field(default_factory=dict)
    model: str = ""
    latency_ms: float = 0.0

    @property
    def truncated(self) -> bool:
        """Anything but a normal stop counts as a truncation signal."""
        return (self.finish_reason or "") != NORMAL_STOP


@runtime_checkable
class IInferenceBackend(Protocol):
    """Protocol for pluggable chat-completion backends."""

    async def infer(
        self,
        messages: list[dict[str, Any]],
        model: str,
        **params: Any,
    ) -> InferenceResult:
        """Run a single inference call.

        Args:
            messages: Chat messages in OpenAI format.
            model: Model identifier (supports LiteLLM prefixes).
            **params: temperature, max_tokens, response_format, stop, timeout.

        Returns:
            InferenceResult with content and metadata.
        """
        ...
