"""Text helpers shared across the pipeline."""

from text2sql.utils.completion_text import (
    CONTROL_TOKENS,
    clean_completion,
    strip_code_fences,
    strip_control_tokens,
    strip_stray_backticks,
)

__all__ = [
    "CONTROL_TOKENS",
    "clean_completion",
    "strip_code_fences",
    "strip_control_tokens",
    "strip_stray_backticks",
]
