"""Fake inference backend for testing."""

from __future__ import annotations

from collections import deque
from typing import Any

from vetscribe.inference.protocols import InferenceResult


class FakeInferenceBackend:
    """Scripted-response backend: pops one queued result per call.

    Queue entries may be an ``InferenceResult``, a plain string (returned with
    ``finish_reason="stop"``) or an exception instance to raise.  When the
    queue is empty ``default_content`` is returned.
    """

    def __init__(
        self,
        responses: list[InferenceResult | str | Exception] | None = None,
        *,
        default_content: str = "{}",
    ) -> None:
        self._queue: deque[InferenceResult | str | Exception] = deque(responses or [])
        self._default_content = default_content
        self.calls: list[dict[str, Any]] = []

    def push(self, *responses: InferenceResult | str | Exception) -> None:
        self._queue.extend(responses)

    async def infer(
        self,
        messages: list[dict[str, Any]],
        model: str,
        **params: Any,
    ) -> InferenceResult:
        self.calls.append({"messages": messages, "model": model, "params": params})
        item = self._queue.popleft() if self._queue else self._default_content
        if isinstance(item, Exception):
            raise item
        if isinstance(item, str):
            return InferenceResult(content=item, model=model)
        return item

    def user_message(self, index: int = -1) -> str:
        return self.calls[index]["messages"][-1]["content"]


class SettingsAwareBackend(FakeInferenceBackend):
    """Constructed the way the factory builds dotted-path backends: ``cls(settings)``."""

    def __init__(self, settings: Any) -> None:
        super().__init__()
        self.settings = settings


NOT_A_BACKEND = 42
