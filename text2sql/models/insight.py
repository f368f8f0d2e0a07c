"""Insight summary models (best-effort narrative over a result set)."""

from pydantic import BaseModel, ConfigDict, Field


class KeyMetric(BaseModel):
    label: str
    value: str
    trend: str | None = None


class InsightSummary(BaseModel):
    """Executive summary, headline metrics and a few bullet insights."""

    summary: str = Field(..., min_length=1)
    key_metrics: list[KeyMetric] = Field(default_factory=list, alias="keyMetrics")
    insights: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)
