"""Shared helpers used across pipeline stages."""

from __future__ import annotations

from vetscribe.common.json_parser import (
    extract_json,
    extract_json_object,
    extract_tagged,
    find_balanced_object,
)

__all__ = ["extract_json", "extract_json_object", "extract_tagged", "find_balanced_object"]
