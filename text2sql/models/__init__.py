"""
Text2SQL Models Module

Pydantic models and exceptions shared across the pipeline.

Available Models:
    Schema Models:
        - TableColumn, TableSample, SchemaMetadata

    Query Models:
        - PromptInput, PromptOutput: Prompt builder input/output
        - ModelCompletion: Cleaned model output with refusal flag
        - SanitizedSQL: Sanitizer output
        - QueryExecutionResult: Rows, fields and row count
        - NLQueryResult: Pipeline outcome for one question

    Insight Models:
        - InsightSummary, KeyMetric

    API Models:
        - NLQueryRequest, NLQueryResponse, OutOfScopeResponse
        - ErrorResponse, HealthResponse, InsightsResponse

    Errors:
        - Text2SQLError and its subclasses (see text2sql.models.errors)
"""

from text2sql.models.api import (
    ErrorResponse,
    HealthResponse,
    InsightsResponse,
    NLQueryRequest,
    NLQueryResponse,
    OutOfScopeResponse,
)
from text2sql.models.errors import (
    BlockedKeywordError,
    BlockedStatementError,
    EmptyCompletionError,
    LLMProviderError,
    MultipleStatementsError,
    NotSelectError,
    OutOfScopeError,
    QueryExecutionError,
    SchemaFetchError,
    SQLRejectedError,
    StackedStatementError,
    Text2SQLError,
)
from text2sql.models.insight import InsightSummary, KeyMetric
from text2sql.models.query import (
    ModelCompletion,
    NLQueryResult,
    PromptInput,
    PromptOutput,
    QueryExecutionResult,
    SanitizedSQL,
)
from text2sql.models.schema import SchemaMetadata, TableColumn, TableSample

__all__ = [
    # Schema
    "TableColumn",
    "TableSample",
    "SchemaMetadata",
    # Query
    "PromptInput",
    "PromptOutput",
    "ModelCompletion",
    "SanitizedSQL",
    "QueryExecutionResult",
    "NLQueryResult",
    # Insight
    "InsightSummary",
    "KeyMetric",
    # API
    "NLQueryRequest",
    "NLQueryResponse",
    "OutOfScopeResponse",
    "ErrorResponse",
    "HealthResponse",
    "InsightsResponse",
    # Errors
    "Text2SQLError",
    "SchemaFetchError",
    "LLMProviderError",
    "EmptyCompletionError",
    "OutOfScopeError",
    "SQLRejectedError",
    "NotSelectError",
    "MultipleStatementsError",
    "BlockedKeywordError",
    "BlockedStatementError",
    "StackedStatementError",
    "QueryExecutionError",
]
