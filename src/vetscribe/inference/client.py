"""Async LLM client: message assembly, timeouts, transport retries, audit logging.

Explicitly constructed and passed through :class:`~vetscribe.context.PipelineContext`;
there is no module-level client instance.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING, Any

from litellm.exceptions import AuthenticationError, BadRequestError, NotFoundError

from vetscribe.exceptions import NonRetryableError, RetryableError, UpstreamError
from vetscribe.inference.protocols import IInferenceBackend, InferenceResult

if TYPE_CHECKING:
    from vetscribe.core.config import LLMConfig
    from vetscribe.hooks.audit_hook import AuditHook

log = logging.getLogger(__name__)

_NON_RETRYABLE = (AuthenticationError, BadRequestError, NotFoundError)


class LLMClient:
    """Thin policy layer over an :class:`IInferenceBackend`."""

    def __init__(
        self,
        backend: IInferenceBackend,
        config: LLMConfig,
        *,
        audit: AuditHook | None = None,
    ) -> None:
        self._backend = backend
        self._config = config
        self._audit = audit

    @property
    def model(self) -> str:
        return self._config.model

    @staticmethod
    def _is_retryable(exc: Exception) -> bool:
        """Auth errors and bad requests fail immediately; everything else may be retried."""
        return not isinstance(exc, _NON_RETRYABLE)

    async def chat(
        self,
        *,
        system: str,
        user: str,
        max_tokens: int,
        timeout: float | None = None,
        response_format: dict[str, Any] | None = None,
        stop: list[str] | None = None,
        stage: str = "",
    ) -> InferenceResult:
        """One system+user completion at temperature from config (0 by default).

        Raises:
            UpstreamError: the call failed, timed out, or exhausted transport retries.
        """
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ]
        params: dict[str, Any] = {
            "temperature": self._config.temperature,
            "max_tokens": max_tokens,
        }
        effective_timeout = timeout or self._config.timeout
        params["timeout"] = effective_timeout
        if response_format is not None:
            params["response_format"] = response_format
        if stop:
            params["stop"] = stop

        max_retries = self._config.max_retries
        last_error: Exception | None = None
        for attempt in range(max_retries):
            try:
                result = await asyncio.wait_for(
                    self._backend.infer(messages, self._config.model, **params),
                    timeout=effective_timeout,
                )
            except asyncio.TimeoutError as e:
                last_error = e
                log.warning(
                    "LLM call timed out after %.1fs (stage=%s, attempt %d/%d)",
                    effective_timeout, stage, attempt + 1, max_retries,
                )
            except UpstreamError:
                raise
            except Exception as e:
                last_error = e
                if not self._is_retryable(e):
                    raise NonRetryableError(f"Non-retryable LLM error: {e}") from e
                log.warning(
                    "LLM retry %d/%d (stage=%s): %s", attempt + 1, max_retries, stage, e
                )
            else:
                if self._audit is not None:
                    self._audit.on_model_call(stage=stage, result=result, max_tokens=max_tokens)
                return result

            if attempt < max_retries - 1:
                base_wait = min(2**attempt, self._config.retry_max_delay)
                await asyncio.sleep(base_wait + random.uniform(0, base_wait * 0.5))

        if isinstance(last_error, asyncio.TimeoutError):
            raise RetryableError(
                f"LLM call timed out after {effective_timeout:.0f}s ({max_retries} attempt(s))"
            ) from last_error
        raise RetryableError(
            f"LLM API failed after {max_retries} attempt(s): {last_error}"
        ) from last_error
