"""Schema-constrained Facts and Impression extraction with one bounded retry.

Each call runs at temperature 0 with a literal-extraction system prompt.
A parse failure or any non-``stop`` finish reason triggers exactly one
retry on a smaller, tail-biased input window with a smaller output budget.
If the retry cannot be parsed either, the outcome carries a
``MalformedOutputError``; nothing is raised for malformed output.
Transport failures and timeouts still raise ``UpstreamError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

from vetscribe.common.json_parser import extract_json_object, extract_tagged
from vetscribe.exceptions import (
    InsufficientDataError,
    JSONParseError,
    MalformedOutputError,
    VetScribeError,
)
from vetscribe.extraction.normalize import normalize_facts, normalize_impression
from vetscribe.extraction.schemas import FACTS_JSON_SCHEMA, response_format
from vetscribe.models import Facts, Impression
from vetscribe.normalization.dictionary import apply_dictionary
from vetscribe.prompts import get_prompt, prompt_version, render_prompt

if TYPE_CHECKING:
    from vetscribe.core.config import AppSettings
    from vetscribe.inference.client import LLMClient
    from vetscribe.inference.protocols import InferenceResult

log = logging.getLogger(__name__)

T = TypeVar("T")

RAW_PREVIEW_CHARS = 800
HEAD_TAIL_SEPARATOR = "\n\n---\n\n"

_EN_MARKERS = (" the ", " and ", " with ", " without ", " patient ", " liver ", " spleen ", " kidney ")
_PL_MARKERS = ("ą", "ę", "ł", "ń", "ś", "ż", "ź", " wątro", " śledz", " ner")


# ── Input windows ────────────────────────────────────────────────────


def head(text: str, max_chars: int) -> str:
    return text[:max_chars]


def tail(text: str, max_chars: int) -> str:
    return text[-max_chars:] if len(text) > max_chars else text


def head_tail(text: str, head_chars: int, tail_chars: int) -> str:
    """Start and end of a long transcript; short transcripts pass through whole."""
    if len(text) <= head_chars + tail_chars:
        return text
    return f"{head(text, head_chars)}{HEAD_TAIL_SEPARATOR}{tail(text, tail_chars)}".strip()


def looks_english(text: str) -> bool:
    """Clearly English answer with no Polish markers at all."""
    s = f" {(text or '').lower()} "
    en_hits = sum(1 for w in _EN_MARKERS if w in s)
    pl_hits = sum(1 for w in _PL_MARKERS if w in s)
    return en_hits >= 2 and pl_hits == 0


# ── Outcome types ────────────────────────────────────────────────────


@dataclass
class ExtractionOutcome(Generic[T]):
    """Result of one extraction call (including its possible retry)."""

    ok: bool
    value: T | None = None
    error: VetScribeError | None = None
    telemetry: dict[str, Any] = field(default_factory=dict)
    raw_previews: list[str] = field(default_factory=list)
    version: str = ""


@dataclass
class _Attempt:
    user: str
    max_tokens: int
    timeout: float
    input_chars: int


@dataclass
class _ParsedCall:
    data: dict[str, Any] | None
    result: InferenceResult
    parse_error: str | None = None


class ExtractionEngine:
    """Runs the Facts and Impression extraction calls."""

    def __init__(self, client: LLMClient, settings: AppSettings) -> None:
        self._client = client
        self._settings = settings

    # ── Public API ──────────────────────────────────────────────────

    async def extract_facts(self, transcript: str) -> ExtractionOutcome[Facts]:
        cfg = self._settings.facts
        text = (transcript or "").strip()

        first_input = apply_dictionary(head_tail(text, cfg.head_chars, cfg.tail_chars))
        retry_input = apply_dictionary(tail(text, cfg.retry_tail_chars))
        schema = response_format("facts", FACTS_JSON_SCHEMA) if cfg.use_response_schema else None

        first = _Attempt(
            user=render_prompt("facts", "FACTS_PROMPT", transcript=first_input.text),
            max_tokens=cfg.max_tokens,
            timeout=cfg.timeout,
            input_chars=len(first_input.text),
        )
        retry = _Attempt(
            user=get_prompt("facts", "FACTS_RETRY_PREFIX")
            + render_prompt("facts", "FACTS_PROMPT", transcript=retry_input.text),
            max_tokens=cfg.retry_max_tokens,
            timeout=cfg.retry_timeout,
            input_chars=len(retry_input.text),
        )

        outcome: ExtractionOutcome[Facts] = await self._run(
            stage="facts",
            system=get_prompt("facts", "FACTS_SYSTEM_PROMPT"),
            first=first,
            retry=retry,
            parse=extract_json_object,
            response_format=schema,
            stop=None,
            build=normalize_facts,
        )
        outcome.version = prompt_version("facts")
        outcome.telemetry["dictionaryAppliedCount"] = first_input.applied_count
        outcome.telemetry["headChars"] = cfg.head_chars
        outcome.telemetry["tailChars"] = cfg.tail_chars

        if outcome.ok and outcome.value is not None and outcome.value.is_empty():
            outcome.ok = False
            outcome.error = InsufficientDataError(
                "Facts extraction returned no findings, measurements, conditions or exam data"
            )
        return outcome

    async def extract_impression(self, transcript: str) -> ExtractionOutcome[Impression]:
        cfg = self._settings.impression
        text = (transcript or "").strip()
        first_input = tail(text, cfg.max_input_chars)
        retry_input = tail(text, min(cfg.retry_max_input_chars, cfg.max_input_chars))

        first = _Attempt(
            user=render_prompt(
                "impression", "IMPRESSION_PROMPT", transcript=first_input, max_quotes=cfg.max_quotes
            ),
            max_tokens=cfg.max_tokens,
            timeout=cfg.timeout,
            input_chars=len(first_input),
        )
        retry = _Attempt(
            user=render_prompt("impression", "IMPRESSION_RETRY_PROMPT", transcript=retry_input),
            max_tokens=cfg.retry_max_tokens,
            timeout=cfg.retry_timeout,
            input_chars=len(retry_input),
        )

        outcome: ExtractionOutcome[Impression] = await self._run(
            stage="impression",
            system=get_prompt("impression", "IMPRESSION_SYSTEM_PROMPT"),
            first=first,
            retry=retry,
            parse=_parse_tagged_json,
            response_format=None,
            stop=["</json>"],
            build=lambda raw: normalize_impression(raw, max_quotes=cfg.max_quotes),
            wrong_language=looks_english,
        )
        outcome.version = prompt_version("impression")
        if outcome.ok and outcome.value is not None:
            outcome.telemetry["empty"] = outcome.value.is_empty()
        return outcome

    # ── Call + retry ────────────────────────────────────────────────

    async def _call(
        self,
        *,
        stage: str,
        system: str,
        attempt: _Attempt,
        parse: Callable[[str], dict[str, Any]],
        response_format: dict[str, Any] | None,
        stop: list[str] | None,
    ) -> _ParsedCall:
        result = await self._client.chat(
            system=system,
            user=attempt.user,
            max_tokens=attempt.max_tokens,
            timeout=attempt.timeout,
            response_format=response_format,
            stop=stop,
            stage=stage,
        )
        try:
            return _ParsedCall(data=parse(result.content), result=result)
        except JSONParseError as exc:
            return _ParsedCall(data=None, result=result, parse_error=str(exc))

    async def _run(
        self,
        *,
        stage: str,
        system: str,
        first: _Attempt,
        retry: _Attempt,
        parse: Callable[[str], dict[str, Any]],
        response_format: dict[str, Any] | None,
        stop: list[str] | None,
        build: Callable[[Any], T],
        wrong_language: Callable[[str], bool] | None = None,
    ) -> ExtractionOutcome[T]:
        call_kwargs = {
            "stage": stage,
            "system": system,
            "parse": parse,
            "response_format": response_format,
            "stop": stop,
        }
        call1 = await self._call(attempt=first, **call_kwargs)
        telemetry: dict[str, Any] = {
            "usedRetry": False,
            "retryReason": None,
            "finishReason1": call1.result.finish_reason,
            "finishReason2": None,
            "inputChars1": first.input_chars,
            "usage1": dict(call1.result.usage),
        }
        previews = [call1.result.content[:RAW_PREVIEW_CHARS]]

        retry_reason = _retry_reason(call1, wrong_language)
        if retry_reason is None:
            return ExtractionOutcome(
                ok=True, value=build(call1.data), telemetry=telemetry, raw_previews=previews
            )

        log.info("%s extraction retry (reason=%s)", stage, retry_reason)
        call2 = await self._call(attempt=retry, **call_kwargs)
        telemetry.update(
            {
                "usedRetry": True,
                "retryReason": retry_reason,
                "finishReason2": call2.result.finish_reason,
                "inputChars2": retry.input_chars,
                "usage2": dict(call2.result.usage),
            }
        )
        previews.append(call2.result.content[:RAW_PREVIEW_CHARS])

        if call2.data is not None:
            telemetry["truncatedAfterRetry"] = call2.result.truncated
            return ExtractionOutcome(
                ok=True, value=build(call2.data), telemetry=telemetry, raw_previews=previews
            )
        # A truncated or wrong-language first answer is never returned; it only
        # survives in the previews.
        log.warning(
            "%s extraction produced no parseable JSON after retry (finish=%s/%s)",
            stage,
            telemetry["finishReason1"],
            telemetry["finishReason2"],
        )
        return ExtractionOutcome(
            ok=False,
            error=MalformedOutputError(
                f"{stage}: model returned truncated/invalid JSON after retry "
                f"({call2.parse_error or call1.parse_error})",
                raw_previews=previews,
            ),
            telemetry=telemetry,
            raw_previews=previews,
        )


def _retry_reason(call: _ParsedCall, wrong_language: Callable[[str], bool] | None) -> str | None:
    if call.data is None:
        return "parse_failed"
    if call.result.truncated:
        return "truncated"
    if wrong_language is not None and wrong_language(call.result.content):
        return "wrong_language"
    return None


def _parse_tagged_json(content: str) -> dict[str, Any]:
    """Prefer the ``<json>`` body; fall back to the whole answer."""
    tagged = extract_tagged(content, "json")
    if tagged is not None:
        try:
            return extract_json_object(tagged)
        except JSONParseError:
            pass
    return extract_json_object(content)
