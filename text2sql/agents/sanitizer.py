"""
SQL Sanitizer: the safety gate between model output and the database.

Model completions are untrusted and often malformed. The sanitizer runs a
fixed sequence of stages over the text, each consuming the previous stage's
output:

    1. trim and strip markdown fences
    2. strip model control tokens
    3. drop full-line ``--`` comments
    4. strip trailing ``;`` terminators until none remain at the tail
    5. require a SELECT prefix                      -> NotSelectError
    6. reject a second statement (literal-aware)    -> MultipleStatementsError
    7. reject blocked keywords anywhere             -> BlockedKeywordError
    8. append ``LIMIT <n>`` unless already limited or aggregated

Stages 5-7 are terminal. Structural regex checks, not a SQL grammar: a
blocked word inside a quoted identifier or literal is a false rejection,
which is accepted; inline trailing comments are left alone because
stripping them risks corrupting string literals. A quote character inside
an inline comment can open a false literal span and hide a real ``;`` from
stage 6; such text still fails at execution, where the driver refuses to
prepare more than one command.
"""

import logging
import re

from text2sql.models.errors import (
    BlockedKeywordError,
    BlockedStatementError,
    MultipleStatementsError,
    NotSelectError,
    StackedStatementError,
)
from text2sql.models.query import SanitizedSQL
from text2sql.utils.completion_text import strip_code_fences, strip_control_tokens

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50

BLOCKED_KEYWORDS = (
    "INSERT",
    "UPDATE",
    "DELETE",
    "DROP",
    "ALTER",
    "TRUNCATE",
    "GRANT",
    "REVOKE",
)


class SQLSanitizer:
    """
    Stateless sanitizer; one shared instance is safe across requests.

    Usage:
        sanitized = SQLSanitizer().sanitize("select * from sale.orders")
        sanitized.sql       # "select * from sale.orders\\nLIMIT 50"
        sanitized.warnings  # ["LIMIT 50 appended automatically."]
    """

    SELECT_PREFIX = re.compile(r"^SELECT\b", re.IGNORECASE)
    BLOCKED_KEYWORD = re.compile(r"\b(" + "|".join(BLOCKED_KEYWORDS) + r")\b", re.IGNORECASE)
    LIMIT_CLAUSE = re.compile(r"\bLIMIT\s+\d+", re.IGNORECASE)
    AGGREGATE_CALL = re.compile(r"\b(?:COUNT|AVG|SUM|MIN|MAX)\s*\(", re.IGNORECASE)
    GROUP_BY = re.compile(r"\bGROUP\s+BY\b", re.IGNORECASE)
    TRAILING_TERMINATORS = re.compile(r";[\s;]*$")
    # single-, double- and backtick-quoted spans, honouring backslash escapes;
    # doubled quotes ('it''s') fall out as two adjacent spans
    QUOTED_SPAN = re.compile(
        r"'(?:[^'\\]|\\.)*'" r'|"(?:[^"\\]|\\.)*"' r"|`(?:[^`\\]|\\.)*`",
        re.DOTALL,
    )

    def sanitize(self, raw_sql: str, default_limit: int = DEFAULT_LIMIT) -> SanitizedSQL:
        """
        Make a model completion safe to execute, or reject it.

        Args:
            raw_sql: Completion text (may carry fences, tokens, comments)
            default_limit: Row cap appended to unbounded queries

        Returns:
            SanitizedSQL with the final statement and any warnings

        Raises:
            NotSelectError: Statement does not start with SELECT
            MultipleStatementsError: A second statement follows a ``;``
            BlockedKeywordError: A blocked keyword appears anywhere
            ValueError: default_limit is not a positive integer
        """
        if isinstance(default_limit, bool) or not isinstance(default_limit, int) or default_limit <= 0:
            raise ValueError(f"default_limit must be a positive integer, got {default_limit!r}")

        sql = self._strip_formatting(raw_sql or "")
        sql = self._strip_comment_lines(sql)
        sql = self._strip_trailing_terminators(sql)

        logger.debug(
            f"SQL after cleanup ({len(sql)} chars): {sql[:200]}",
            extra={"sql_length": len(sql)},
        )

        try:
            self._require_select(sql)
            self._reject_multiple_statements(sql)
            self._reject_blocked_keywords(sql)
        except (NotSelectError, MultipleStatementsError, BlockedKeywordError) as e:
            logger.warning(
                f"SQL rejected ({e.rule}): {e.message}",
                extra={"rule": e.rule, "keyword": e.keyword, "sql_preview": sql[:200]},
            )
            raise

        return self._enforce_row_cap(sql, default_limit)

    # ------------------------------------------------------------------
    # Cleanup stages
    # ------------------------------------------------------------------

    def _strip_formatting(self, sql: str) -> str:
        # a token after the closing fence hides the fence until the token goes
        previous = None
        while sql != previous:
            previous = sql
            sql = strip_code_fences(sql)
            sql = strip_control_tokens(sql)
        return sql

    def _strip_comment_lines(self, sql: str) -> str:
        lines = [line for line in sql.split("\n") if not line.strip().startswith("--")]
        return "\n".join(lines).strip()

    def _strip_trailing_terminators(self, sql: str) -> str:
        previous = None
        while sql != previous:
            previous = sql
            sql = self.TRAILING_TERMINATORS.sub("", sql).strip()
        return sql

    # ------------------------------------------------------------------
    # Validation stages
    # ------------------------------------------------------------------

    def _find_blocked_keyword(self, sql: str) -> str | None:
        match = self.BLOCKED_KEYWORD.search(sql)
        return match.group(1).upper() if match else None

    def _require_select(self, sql: str) -> None:
        if self.SELECT_PREFIX.match(sql):
            return
        keyword = self._find_blocked_keyword(sql)
        if keyword:
            raise BlockedStatementError(
                f"Disallowed keyword detected: {keyword} (only SELECT statements are allowed)",
                keyword=keyword,
            )
        raise NotSelectError("Only SELECT statements are allowed")

    def _reject_multiple_statements(self, sql: str) -> None:
        cleaned = self.QUOTED_SPAN.sub("", sql)
        # literal removal can expose a terminator that was followed only by
        # a quoted token or whitespace; strip the tail again before looking
        cleaned = strip_control_tokens(cleaned)
        cleaned = self._strip_trailing_terminators(cleaned)

        index = cleaned.find(";")
        if index == -1 or not cleaned[index + 1:].strip():
            return

        logger.debug(f"Content after statement separator: {cleaned[index + 1:index + 101]!r}")
        keyword = self._find_blocked_keyword(sql)
        if keyword:
            raise StackedStatementError(
                f"Multiple SQL statements detected; disallowed keyword detected: {keyword}",
                keyword=keyword,
            )
        raise MultipleStatementsError("Multiple SQL statements detected")

    def _reject_blocked_keywords(self, sql: str) -> None:
        keyword = self._find_blocked_keyword(sql)
        if keyword:
            raise BlockedKeywordError(f"Disallowed keyword detected: {keyword}", keyword=keyword)

    # ------------------------------------------------------------------
    # Row cap
    # ------------------------------------------------------------------

    def has_limit_clause(self, sql: str) -> bool:
        return bool(self.LIMIT_CLAUSE.search(sql))

    def is_aggregate_query(self, sql: str) -> bool:
        return bool(self.AGGREGATE_CALL.search(sql) or self.GROUP_BY.search(sql))

    def _enforce_row_cap(self, sql: str, default_limit: int) -> SanitizedSQL:
        if self.has_limit_clause(sql) or self.is_aggregate_query(sql):
            return SanitizedSQL(sql=sql, warnings=[])

        # own line, so a trailing inline comment cannot swallow it
        return SanitizedSQL(
            sql=f"{sql}\nLIMIT {default_limit}",
            warnings=[f"LIMIT {default_limit} appended automatically."],
        )


_sanitizer = SQLSanitizer()


def sanitize_sql(raw_sql: str, default_limit: int = DEFAULT_LIMIT) -> SanitizedSQL:
    """Module-level shortcut for ``SQLSanitizer().sanitize``."""
    return _sanitizer.sanitize(raw_sql, default_limit)
