"""JSON schemas passed as ``response_format`` to constrain extraction output.

Strict mode: every key is required, leaves are nullable, no additional
properties at any level.
"""

from __future__ import annotations

from typing import Any

_NULLABLE_STRING: dict[str, Any] = {"type": ["string", "null"]}
_STRING_LIST: dict[str, Any] = {"type": "array", "items": {"type": "string"}}

FACTS_JSON_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "required": ["exam", "conditions", "findings", "measurements"],
    "properties": {
        "exam": {
            "type": "object",
            "additionalProperties": False,
            "required": ["bodyRegion", "reason", "patientName"],
            "properties": {
                "bodyRegion": _NULLABLE_STRING,
                "reason": _NULLABLE_STRING,
                "patientName": _NULLABLE_STRING,
            },
        },
        "conditions": _STRING_LIST,
        "findings": _STRING_LIST,
        "measurements": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["structure", "value", "unit", "location"],
                "properties": {
                    "structure": {"type": "string"},
                    "value": {"type": "array", "items": {"type": "number"}},
                    "unit": _NULLABLE_STRING,
                    "location": _NULLABLE_STRING,
                },
            },
        },
    },
}

IMPRESSION_JSON_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "required": [
        "doctorOverall",
        "doctorKeyConcerns",
        "doctorPlan",
        "doctorRedFlags",
        "quotes",
        "consentRecording",
    ],
    "properties": {
        "doctorOverall": _NULLABLE_STRING,
        "doctorKeyConcerns": _STRING_LIST,
        "doctorPlan": _STRING_LIST,
        "doctorRedFlags": _STRING_LIST,
        "quotes": _STRING_LIST,
        "consentRecording": {"type": ["string", "null"], "enum": ["yes", "no", None]},
    },
}

ANALYSIS_JSON_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "required": ["summary", "confidence"],
    "properties": {
        "summary": _NULLABLE_STRING,
        "confidence": {"type": ["number", "null"]},
    },
}


def response_format(name: str, schema: dict[str, Any]) -> dict[str, Any]:
    """OpenAI-style ``json_schema`` response format."""
    return {
        "type": "json_schema",
        "json_schema": {"name": name, "strict": True, "schema": schema},
    }
