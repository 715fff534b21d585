"""Prompt templates and the registry that resolves them."""

from __future__ import annotations

from vetscribe.prompts.registry import get_prompt, prompt_version, render_prompt

__all__ = ["get_prompt", "prompt_version", "render_prompt"]
