"""File-backed prompt registry.

Each module under ``vetscribe.prompts.templates`` stores its prompts in a
``_PROMPT_DATA`` dict.  Templates are read directly from that dict; module
objects are cached after the first import.
"""

from __future__ import annotations

import importlib
from functools import lru_cache
from typing import Any


@lru_cache(maxsize=None)
def _load(category: str) -> dict[str, str]:
    module_path = f"vetscribe.prompts.templates.{category}"
    try:
        module = importlib.import_module(module_path)
    except ModuleNotFoundError as exc:
        raise KeyError(f"Prompt module not found: {module_path}") from exc
    data: dict[str, str] | None = getattr(module, "_PROMPT_DATA", None)
    if data is None:
        raise KeyError(f"{module_path} defines no _PROMPT_DATA")
    return data


def get_prompt(category: str, name: str) -> str:
    """Return the raw template ``name`` from ``templates/{category}.py``.

    Raises:
        KeyError: unknown category or prompt name.
    """
    data = _load(category)
    if name not in data:
        raise KeyError(f"Prompt {name!r} not found in {category}")
    return data[name]


def render_prompt(category: str, name: str, **values: Any) -> str:
    """``str.format`` the template with ``values``."""
    return get_prompt(category, name).format(**values)


def prompt_version(category: str) -> str:
    return get_prompt(category, "VERSION")
