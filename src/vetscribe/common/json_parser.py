"""Defensive JSON recovery for LLM responses.

One string-literal-aware scanner backs every extraction call.  Strategies run
in order: direct parse, code-fence strip, first balanced ``{...}`` slice,
then escaping bare newlines inside string literals.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from vetscribe.exceptions import JSONParseError

log = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)```", re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def _try_parse(s: str) -> Any | None:
    """Attempt a JSON parse, then once more with trailing commas removed."""
    s = s.strip()
    if not s:
        return None
    try:
        return json.loads(s)
    except json.JSONDecodeError:
        pass
    try:
        return json.loads(_TRAILING_COMMA_RE.sub(r"\1", s))
    except json.JSONDecodeError:
        return None


def strip_code_fences(content: str) -> str:
    """Return the body of the first fenced block, or ``content`` unchanged."""
    match = _FENCE_RE.search(content)
    if match:
        return match.group(1)
    # Unterminated fence: drop the opening marker
    if content.lstrip().startswith("```"):
        body = content.lstrip()[3:]
        if body[:4].lower() == "json":
            body = body[4:]
        return body
    return content


def find_balanced_object(content: str, open_ch: str = "{", close_ch: str = "}") -> str | None:
    """Slice of the first balanced ``open_ch ... close_ch`` span.

    Tracks quote state and backslash escapes so braces inside string
    literals do not move the depth counter.  Returns None when the span
    never closes.
    """
    start = content.find(open_ch)
    if start == -1:
        return None
    depth = 0
    in_string = False
    escape = False
    for i in range(start, len(content)):
        ch = content[i]
        if escape:
            escape = False
            continue
        if ch == "\\":
            if in_string:
                escape = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                return content[start : i + 1]
    return None


def escape_newlines_in_strings(content: str) -> str:
    """Replace raw CR/LF/TAB inside string literals with their JSON escapes."""
    out: list[str] = []
    in_string = False
    escape = False
    for ch in content:
        if escape:
            out.append(ch)
            escape = False
            continue
        if ch == "\\" and in_string:
            out.append(ch)
            escape = True
            continue
        if ch == '"':
            in_string = not in_string
            out.append(ch)
            continue
        if in_string and ch == "\n":
            out.append("\\n")
        elif in_string and ch == "\r":
            out.append("\\r")
        elif in_string and ch == "\t":
            out.append("\\t")
        else:
            out.append(ch)
    return "".join(out)


def extract_tagged(content: str, tag: str) -> str | None:
    """Body of ``<tag>...</tag>``; an unclosed tag yields everything after it."""
    open_tag, close_tag = f"<{tag}>", f"</{tag}>"
    start = content.find(open_tag)
    if start == -1:
        return None
    body = content[start + len(open_tag) :]
    end = body.find(close_tag)
    return body if end == -1 else body[:end]


def extract_json(content: str) -> Any:
    """Parse JSON from an LLM response, tolerating prose, fences and raw newlines.

    Raises:
        JSONParseError: when every strategy fails. ``raw_response`` carries
            the input for diagnosis.
    """
    content = content or ""

    # (a) direct
    result = _try_parse(content)
    if result is not None:
        return result

    # (b) fences
    unfenced = strip_code_fences(content)
    if unfenced is not content:
        result = _try_parse(unfenced)
        if result is not None:
            return result

    # (c) balanced object
    candidate = find_balanced_object(unfenced) or find_balanced_object(content)
    if candidate is not None:
        result = _try_parse(candidate)
        if result is not None:
            return result

    # (d) bare newlines inside strings
    repaired = escape_newlines_in_strings(candidate or unfenced)
    result = _try_parse(repaired)
    if result is None:
        inner = find_balanced_object(repaired)
        if inner is not None:
            result = _try_parse(inner)
    if result is not None:
        return result

    log.warning(
        "Failed to parse JSON from LLM response (length=%d, preview=%r)",
        len(content),
        content[:200],
    )
    raise JSONParseError("Could not recover a JSON object from model output", raw_response=content)


def extract_json_object(content: str) -> dict[str, Any]:
    """Like :func:`extract_json` but insists on a JSON object."""
    result = extract_json(content)
    if not isinstance(result, dict):
        raise JSONParseError(
            f"Expected a JSON object, got {type(result).__name__}", raw_response=content
        )
    return result
