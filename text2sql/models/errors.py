"""
Pipeline error taxonomy.

Every failure the request pipeline can surface is a Text2SQLError subclass
carrying the stage that raised it and an ``error_type`` tag the HTTP layer
uses to pick a response shape:

    schema_error      catalog/schema fetch failed
    api_error         model provider failed (transport, payload, empty completion)
    out_of_scope      model declined the question (not a system error)
    sql_rejected      sanitizer refused the generated SQL
    execution_error   database rejected the sanitized SQL

Insight generation failures never surface; they are recovered locally.
"""

from typing import Any


class Text2SQLError(Exception):
    """
    Base exception for pipeline errors.

    Attributes:
        stage: Component that raised the error
        message: Human-readable, single-line description
        context: Additional context for debugging
    """

    error_type = "internal_error"

    def __init__(
        self,
        stage: str,
        message: str,
        context: dict[str, Any] | None = None,
    ):
        self.stage = stage
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/API responses."""
        return {
            "stage": self.stage,
            "message": self.message,
            "type": self.error_type,
            "context": self.context,
        }


class SchemaFetchError(Text2SQLError):
    """Catalog introspection failed or the database is unreachable."""

    error_type = "schema_error"

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__("catalog", message, context=context)


class LLMProviderError(Text2SQLError):
    """Transport failure or provider-reported error from the completion API."""

    error_type = "api_error"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.status_code = status_code
        super().__init__("llm", message, context=context)


class EmptyCompletionError(LLMProviderError):
    """The provider answered but carried no usable completion text."""


class OutOfScopeError(Text2SQLError):
    """The model judged the question unanswerable from the schema."""

    error_type = "out_of_scope"

    def __init__(self, message: str, raw_text: str = ""):
        self.raw_text = raw_text
        super().__init__("sql_generator", message)


class SQLRejectedError(Text2SQLError):
    """
    The sanitizer refused the SQL.

    Attributes:
        rule: Violated rule (not_select, multiple_statements, blocked_keyword)
        keyword: Offending keyword for blocked_keyword rejections
    """

    error_type = "sql_rejected"
    rule = "rejected"

    def __init__(self, message: str, keyword: str | None = None):
        self.keyword = keyword
        super().__init__("sanitizer", message, context={"rule": self.rule, "keyword": keyword})


class NotSelectError(SQLRejectedError):
    rule = "not_select"


class MultipleStatementsError(SQLRejectedError):
    rule = "multiple_statements"


class BlockedKeywordError(SQLRejectedError):
    rule = "blocked_keyword"


class BlockedStatementError(NotSelectError, BlockedKeywordError):
    """Not a SELECT, and the statement carries a blocked keyword (e.g. ``DELETE FROM t``)."""

    rule = "blocked_keyword"


class StackedStatementError(MultipleStatementsError, BlockedKeywordError):
    """Several statements, at least one of them carrying a blocked keyword."""

    rule = "blocked_keyword"


class QueryExecutionError(Text2SQLError):
    """The database rejected or failed to run the statement."""

    error_type = "execution_error"

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__("executor", message, context=context)
