"""Output formatters for exporting exam reports.

Usage::

    from vetscribe.formatters import get_formatter
    body = get_formatter("json").format(record)
"""

from __future__ import annotations

from vetscribe.formatters.json_formatter import JSONFormatter
from vetscribe.formatters.protocols import IOutputFormatter
from vetscribe.formatters.text_formatter import TextFormatter

_FORMATTERS: dict[str, type] = {"text": TextFormatter, "json": JSONFormatter}


def get_formatter(name: str) -> IOutputFormatter:
    """Raises KeyError for an unknown format name."""
    try:
        return _FORMATTERS[name]()
    except KeyError:
        raise KeyError(f"Unknown output format {name!r}; expected one of {sorted(_FORMATTERS)}") from None


__all__ = ["IOutputFormatter", "JSONFormatter", "TextFormatter", "get_formatter"]
