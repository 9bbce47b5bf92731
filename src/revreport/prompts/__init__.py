"""Prompt templates for revreport review calls."""

from revreport.prompts.templates import (
    SYSTEM_PROMPT_BASE,
    SYSTEM_PROMPT_SECURITY,
    SYSTEM_PROMPT_PERFORMANCE,
    format_review_prompt,
    format_security_review_prompt,
    format_pr_summary_prompt,
    truncate_diff,
    detect_language,
)

__all__ = [
    "SYSTEM_PROMPT_BASE",
    "SYSTEM_PROMPT_SECURITY",
    "SYSTEM_PROMPT_PERFORMANCE",
    "format_review_prompt",
    "format_security_review_prompt",
    "format_pr_summary_prompt",
    "truncate_diff",
    "detect_language",
]
