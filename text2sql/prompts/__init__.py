"""Prompt construction: schema formatting, scope policy and the SQL prompt."""

from text2sql.prompts.builder import build_prompt, build_system_prompt, build_user_prompt
from text2sql.prompts.messages import OUT_OF_SCOPE_MARKER, OUT_OF_SCOPE_MESSAGE
from text2sql.prompts.schema_formatter import format_schema_for_prompt
from text2sql.prompts.scope import ScopePolicy, load_scope_policy

__all__ = [
    "OUT_OF_SCOPE_MARKER",
    "OUT_OF_SCOPE_MESSAGE",
    "ScopePolicy",
    "build_prompt",
    "build_system_prompt",
    "build_user_prompt",
    "format_schema_for_prompt",
    "load_scope_policy",
]
