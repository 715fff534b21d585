"""Exception hierarchy for vetscribe."""

from __future__ import annotations


class VetScribeError(Exception):
    """Base exception for all vetscribe errors."""


class ValidationError(VetScribeError):
    """Raised when a request is missing required identifiers or input."""


class NotFoundError(VetScribeError):
    """Raised when an exam record (or a required upstream field) is absent."""


class UpstreamError(VetScribeError):
    """Raised when the STT process or the LLM call failed or timed out."""


class RetryableError(UpstreamError):
    """Rate limits, timeouts, 5xx — should be retried."""


class NonRetryableError(UpstreamError):
    """Auth errors, bad requests, 4xx (non-429) — fail immediately."""


class JSONParseError(VetScribeError):
    """LLM response could not be parsed as JSON."""

    def __init__(self, message: str, raw_response: str = "") -> None:
        super().__init__(message)
        self.raw_response = raw_response


class MalformedOutputError(VetScribeError):
    """Model output stayed unparseable (or truncated) after the single retry."""

    def __init__(self, message: str, raw_previews: list[str] | None = None) -> None:
        super().__init__(message)
        self.raw_previews = raw_previews or []


class InsufficientDataError(VetScribeError):
    """Extraction parsed cleanly but produced no usable content."""


class PersistenceError(VetScribeError):
    """Raised when a persistence backend operation fails."""


__all__ = [
    "VetScribeError",
    "ValidationError",
    "NotFoundError",
    "UpstreamError",
    "RetryableError",
    "NonRetryableError",
    "JSONParseError",
    "MalformedOutputError",
    "InsufficientDataError",
    "PersistenceError",
]
