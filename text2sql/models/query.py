"""
Query Pipeline Models

Request-scoped value objects passed between prompt builder, model client,
sanitizer and executor.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from text2sql.models.insight import InsightSummary


class PromptInput(BaseModel):
    """Everything the prompt builder needs for one question."""

    question: str = Field(..., description="User's natural language question")
    schema_text: str = Field(..., description="Formatted schema block")
    conversation: list[str] | None = Field(
        default=None,
        description="Prior turns, oldest first, rendered as 'Turn N: <text>'",
    )


class PromptOutput(BaseModel):
    """System and user prompt pair sent to the model."""

    system_prompt: str
    user_prompt: str


class ModelCompletion(BaseModel):
    """Cleaned completion text and whether it is the out-of-scope refusal."""

    raw_text: str = Field(..., description="Completion after fence/token cleanup")
    is_refusal: bool = Field(default=False)


class SanitizedSQL(BaseModel):
    """
    SQL that passed the sanitizer.

    ``sql`` starts with SELECT, holds one statement, carries no blocked
    keyword, and either had a LIMIT/aggregate already or got exactly one
    ``LIMIT <n>`` appended (recorded in ``warnings``).
    """

    sql: str
    warnings: list[str] = Field(default_factory=list)


class QueryExecutionResult(BaseModel):
    """Rows returned by a single SELECT."""

    row_count: int = Field(..., alias="rowCount", ge=0)
    rows: list[dict[str, Any]] = Field(default_factory=list)
    fields: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class NLQueryResult(BaseModel):
    """Outcome of one question: sanitized SQL, warnings, rows, optional insights."""

    sql: str
    warnings: list[str] = Field(default_factory=list)
    result: QueryExecutionResult
    insights: InsightSummary | None = None
