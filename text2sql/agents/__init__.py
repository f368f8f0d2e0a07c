"""
Pipeline agents.

- SQLGenerator: question + schema -> raw SQL text (or an out-of-scope refusal)
- SQLSanitizer: raw SQL -> safe single SELECT with a row cap
- QueryExecutor: sanitized SQL -> rows
- InsightGenerator: rows -> best-effort narrative summary
"""

from text2sql.agents.executor import QueryExecutor
from text2sql.agents.insights import InsightGenerator, build_fallback_insights
from text2sql.agents.sanitizer import BLOCKED_KEYWORDS, SQLSanitizer, sanitize_sql
from text2sql.agents.sql_generator import SQLGenerator, is_refusal

__all__ = [
    "BLOCKED_KEYWORDS",
    "InsightGenerator",
    "QueryExecutor",
    "SQLGenerator",
    "SQLSanitizer",
    "build_fallback_insights",
    "is_refusal",
    "sanitize_sql",
]
