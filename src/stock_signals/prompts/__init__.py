"""Prompt templates."""

from stock_signals.prompts.templates import (
    COMPARE_SYSTEM_PROMPT,
    build_comparison_messages,
    build_comparison_prompt,
    get_prompt,
    list_prompts,
    render_messages,
)

__all__ = [
    "COMPARE_SYSTEM_PROMPT",
    "build_comparison_messages",
    "build_comparison_prompt",
    "get_prompt",
    "list_prompts",
    "render_messages",
]
