"""
API Request/Response Models

Pydantic models for FastAPI endpoints.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from text2sql.models.query import NLQueryResult


class NLQueryRequest(BaseModel):
    """Request model for the natural language query endpoint."""

    question: str = Field(
        ...,
        min_length=3,
        description="Question about the analytics data",
    )
    conversation: list[str] | None = Field(
        default=None,
        description="Optional prior turns, oldest first",
    )
    include_insights: bool = Field(
        default=True,
        alias="includeInsights",
        description="Ask the model for a narrative summary of the result",
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "question": "What was revenue by channel last month?",
                "conversation": [],
                "includeInsights": True,
            }
        },
    )


class NLQueryResponse(NLQueryResult):
    """Successful answer: sanitized SQL, warnings, rows and optional insights."""


class OutOfScopeResponse(BaseModel):
    """The model declined the question; render as guidance, not as an error."""

    type: Literal["out_of_scope"] = "out_of_scope"
    message: str


class ErrorResponse(BaseModel):
    """Failure shape shared by every error handler."""

    message: str
    error: str
    type: str
    rule: str | None = None
    keyword: str | None = None


class HealthResponse(BaseModel):
    status: str = Field(..., description="Service status")
    timestamp: str = Field(..., description="ISO timestamp")


class InsightsResponse(BaseModel):
    """Precomputed reporting views for the dashboard."""

    revenue_by_channel: list[dict[str, Any]] = Field(alias="revenueByChannel")
    category_performance: list[dict[str, Any]] = Field(alias="categoryPerformance")
    monthly_revenue: list[dict[str, Any]] = Field(alias="monthlyRevenue")
    top_stores: list[dict[str, Any]] = Field(alias="topStores")

    model_config = ConfigDict(populate_by_name=True)
