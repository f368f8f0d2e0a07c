"""
InsightGenerator: best-effort narrative summary of a result set.

Asks the model for a short executive summary, a handful of key metrics and a
few bullet insights. Any failure (timeout, provider error, unparseable
output) degrades to a deterministic summary computed from the numeric
columns; ``generate`` never raises.
"""

import json
import logging
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from text2sql.llm.base import BaseLLMProvider
from text2sql.llm.models import LLMMessage, LLMRequest
from text2sql.models.insight import InsightSummary, KeyMetric
from text2sql.models.query import QueryExecutionResult

logger = logging.getLogger(__name__)

PREVIEW_ROWS = 20
MAX_KEY_METRICS = 5
MAX_INSIGHTS = 3
FALLBACK_METRIC_FIELDS = 3
DEFAULT_SUMMARY = "Data retrieved successfully."

_JSON_FENCE = re.compile(r"```(?:json)?\s*(\{.*\})\s*```", re.DOTALL)
_CURRENCY_FIELD = re.compile(r"revenue|price|cost|amount|value", re.IGNORECASE)

SYSTEM_PROMPT = """You are a data analyst assistant that explains query results in plain, business-friendly language.

Scope and Boundaries:
Only analyze the query results provided to you. If asked about anything outside those results, politely decline and ask for a question about the available data.

Your task is to:
1. Write a 2-3 sentence executive summary of the data
2. Extract 3-5 key metrics with formatted values
3. Identify 2-3 actionable insights or trends

Be concise and format numbers for people (e.g. "£2.1M" instead of "2085313.65").
Highlight trends, comparisons and notable patterns."""

RESPONSE_FORMAT = """Format your response as JSON:
{
  "summary": "Brief explanation...",
  "keyMetrics": [
    {"label": "Metric name", "value": "Formatted value", "trend": "optional trend indicator"}
  ],
  "insights": ["Insight 1", "Insight 2"]
}"""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def format_compact_number(value: float) -> str:
    """Compact large numbers for the model: 2085313.65 -> £2.09M, 4520 -> £4.5K."""
    if abs(value) >= 1_000_000:
        return f"£{value / 1_000_000:.2f}M"
    if abs(value) >= 1_000:
        return f"£{value / 1_000:.1f}K"
    return f"{value:g}" if isinstance(value, float) else str(value)


def format_number(value: float, is_currency: bool = True) -> str:
    if is_currency:
        if abs(value) >= 1_000_000:
            return f"£{value / 1_000_000:.2f}M"
        if abs(value) >= 1_000:
            return f"£{value / 1_000:.1f}K"
        return f"£{value:.2f}"
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def format_field_name(field: str) -> str:
    """``revenue_gbp`` -> ``Revenue GBP``, ``store_id`` -> ``Store ID``."""
    label = re.sub(r"\b\w", lambda m: m.group(0).upper(), field.replace("_", " "))
    label = re.sub(r"\bgbp\b", "GBP", label, flags=re.IGNORECASE)
    return re.sub(r"\bid\b", "ID", label, flags=re.IGNORECASE)


def _preview_value(value: Any) -> str:
    if value is None:
        return "null"
    if _is_number(value):
        return format_compact_number(value if isinstance(value, int) else float(value))
    if isinstance(value, (date, datetime)):
        return value.strftime("%B %Y")
    return str(value)


def build_data_preview(result: QueryExecutionResult) -> list[dict[str, str]]:
    """First rows of the result with every value rendered as display text."""
    return [
        {field: _preview_value(row.get(field)) for field in result.fields}
        for row in result.rows[:PREVIEW_ROWS]
    ]


def build_user_prompt(question: str, result: QueryExecutionResult) -> str:
    preview = json.dumps(build_data_preview(result), indent=2, ensure_ascii=False)
    return "\n".join(
        [
            f'Original question: "{question}"',
            "",
            f"Query Results ({result.row_count} rows):",
            preview,
            "",
            "Please provide:",
            "1. A brief summary (2-3 sentences)",
            "2. Key metrics (3-5 items with labels and formatted values)",
            "3. Insights (2-3 bullet points about trends or patterns)",
            "",
            RESPONSE_FORMAT,
        ]
    )


def _coerce_metrics(items: Any) -> list[KeyMetric]:
    if not isinstance(items, list):
        return []
    metrics = []
    for item in items:
        if not isinstance(item, dict) or not item.get("label") or item.get("value") is None:
            continue
        trend = item.get("trend")
        metrics.append(
            KeyMetric(
                label=str(item["label"]),
                value=str(item["value"]),
                trend=str(trend) if trend else None,
            )
        )
    return metrics[:MAX_KEY_METRICS]


def parse_insight_response(content: str) -> InsightSummary:
    """
    Parse the model's reply.

    JSON (bare or inside a fenced block) is preferred; otherwise the first
    non-empty line becomes the summary and the next three the insights.
    """
    match = _JSON_FENCE.search(content)
    payload_text = match.group(1) if match else content

    try:
        payload = json.loads(payload_text)
    except json.JSONDecodeError:
        payload = None

    if isinstance(payload, dict):
        insights = payload.get("insights")
        return InsightSummary(
            summary=str(payload.get("summary") or "").strip() or DEFAULT_SUMMARY,
            key_metrics=_coerce_metrics(payload.get("keyMetrics")),
            insights=[str(i) for i in insights if str(i).strip()][:MAX_INSIGHTS]
            if isinstance(insights, list)
            else [],
        )

    logger.warning("Insight response was not JSON, falling back to line parsing")
    lines = [line.strip() for line in content.split("\n") if line.strip()]
    return InsightSummary(
        summary=lines[0] if lines else DEFAULT_SUMMARY,
        insights=lines[1 : 1 + MAX_INSIGHTS],
    )


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def build_fallback_insights(result: QueryExecutionResult) -> InsightSummary:
    """Deterministic summary from the numeric columns of the result."""
    numeric_fields = [
        field for field in result.fields if any(_is_number(row.get(field)) for row in result.rows)
    ]

    metrics = []
    for field in numeric_fields[:FALLBACK_METRIC_FIELDS]:
        values = [float(row[field]) for row in result.rows if _is_number(row.get(field))]
        if not values:
            continue
        is_currency = bool(_CURRENCY_FIELD.search(field))
        low, high = min(values), max(values)
        metrics.append(
            KeyMetric(
                label=format_field_name(field),
                value=format_number(sum(values), is_currency),
                trend=(
                    f"Range: {format_number(low, is_currency)} - {format_number(high, is_currency)}"
                    if low != high
                    else None
                ),
            )
        )

    return InsightSummary(
        summary=(
            f"Retrieved {_plural(result.row_count, 'row')} of data "
            f"across {_plural(len(result.fields), 'field')}."
        ),
        key_metrics=metrics,
        insights=[
            f"Data contains {len(numeric_fields)} numeric {'field' if len(numeric_fields) == 1 else 'fields'}",
            f"Total of {result.row_count} records available for analysis",
        ],
    )


class InsightGenerator:
    """
    Generates an InsightSummary for a question and its result set.

    The provider should be created with the insight settings (warmer
    temperature, larger token budget, short timeout).
    """

    def __init__(self, llm_provider: BaseLLMProvider):
        self.llm = llm_provider

    async def generate(self, question: str, result: QueryExecutionResult) -> InsightSummary:
        """Return model insights, or the deterministic fallback on any failure."""
        try:
            response = await self.llm.generate(
                LLMRequest(
                    messages=[
                        LLMMessage(role="system", content=SYSTEM_PROMPT),
                        LLMMessage(role="user", content=build_user_prompt(question, result)),
                    ]
                )
            )
            return parse_insight_response(response.content.strip())
        except Exception as e:
            logger.error(f"Failed to generate insights: {e}", extra={"error_type": type(e).__name__})
            return build_fallback_insights(result)
