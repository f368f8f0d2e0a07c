"""
Completion text cleanup shared by the model client and the SQL sanitizer.

Models wrap SQL in markdown fences and leak chat-template control tokens,
sometimes mid-stream when a completion is truncated. Every helper here is
idempotent.
"""

import re

CONTROL_TOKENS: tuple[str, ...] = (
    "<|endoftext|>",
    "<|stop|>",
    "<|im_end|>",
    "<|eot_id|>",
    "[INST]",
    "[/INST]",
    "[/s]",
    "</s>",
)

_CONTROL_TOKEN_RE = re.compile("|".join(re.escape(token) for token in CONTROL_TOKENS))
_LEADING_FENCE_RE = re.compile(r"^```[\w+-]*[ \t]*\n?")
_TRAILING_FENCE_RE = re.compile(r"\n?```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove a leading ```lang fence and a trailing ``` fence, then trim."""
    text = text.strip()
    text = _LEADING_FENCE_RE.sub("", text)
    text = _TRAILING_FENCE_RE.sub("", text)
    return text.strip()


def strip_stray_backticks(text: str) -> str:
    """Remove inline-code backticks left at either edge."""
    return text.strip().strip("`").strip()


def strip_control_tokens(text: str) -> str:
    """Remove model control tokens wherever they appear."""
    return _CONTROL_TOKEN_RE.sub("", text).strip()


def clean_completion(text: str) -> str:
    """
    Fences, then stray backticks, then control tokens.

    Repeats until stable: a token trailing a closing fence hides the fence
    from the first pass.
    """
    previous = None
    while text != previous:
        previous = text
        text = strip_code_fences(text)
        text = strip_stray_backticks(text)
        text = strip_control_tokens(text)
    return text
