"""Tests for JSON recovery from model output."""

from __future__ import annotations

import pytest

from vetscribe.common.json_parser import (
    escape_newlines_in_strings,
    extract_json,
    extract_json_object,
    extract_tagged,
    find_balanced_object,
)
from vetscribe.exceptions import JSONParseError


class TestExtractJson:
    def test_direct(self) -> None:
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_prose_and_fence(self) -> None:
        assert extract_json('Here you go:\n```json\n{"a":1}\n```') == {"a": 1}

    def test_unterminated_fence(self) -> None:
        assert extract_json('```json\n{"a": 2}') == {"a": 2}

    def test_object_inside_prose(self) -> None:
        assert extract_json('Wynik: {"b": "x}y"} koniec') == {"b": "x}y"}

    def test_trailing_comma(self) -> None:
        assert extract_json('{"a": [1, 2,],}') == {"a": [1, 2]}

    def test_raw_newline_in_string(self) -> None:
        assert extract_json('{"text": "line one\nline two"}') == {"text": "line one\nline two"}

    def test_failure_carries_raw(self) -> None:
        with pytest.raises(JSONParseError) as exc_info:
            extract_json("no json here")
        assert exc_info.value.raw_response == "no json here"

    def test_object_required(self) -> None:
        with pytest.raises(JSONParseError):
            extract_json_object("[1, 2]")


class TestHelpers:
    def test_balanced_ignores_braces_in_strings(self) -> None:
        assert find_balanced_object('x {"a": "{"} y') == '{"a": "{"}'

    def test_balanced_unclosed(self) -> None:
        assert find_balanced_object('{"a": 1') is None

    def test_escape_newlines_only_inside_strings(self) -> None:
        assert escape_newlines_in_strings('{\n"a": "b\nc"}') == '{\n"a": "b\\nc"}'

    def test_extract_tagged(self) -> None:
        assert extract_tagged("pre <json>{}</json> post", "json") == "{}"
        assert extract_tagged("<json>{\"a\": 1}", "json") == '{"a": 1}'
        assert extract_tagged("nothing", "json") is None
