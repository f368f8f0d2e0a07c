"""
Unit Tests for the Natural Language Query Endpoint

Tests POST /nl-query with a mocked pipeline, including the mapping from
pipeline errors to HTTP responses.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from text2sql.api.main import app
from text2sql.models.errors import (
    BlockedKeywordError,
    EmptyCompletionError,
    LLMProviderError,
    MultipleStatementsError,
    OutOfScopeError,
    QueryExecutionError,
    SchemaFetchError,
)
from text2sql.models.insight import InsightSummary, KeyMetric
from text2sql.models.query import NLQueryResult, QueryExecutionResult
from text2sql.prompts.messages import OUT_OF_SCOPE_MESSAGE


class TestNLQueryEndpoint:
    """Test suite for /nl-query."""

    @pytest.fixture
    def client(self):
        """Create test client."""
        return TestClient(app)

    @pytest.fixture
    def pipeline(self):
        pipeline = MagicMock()
        pipeline.run = AsyncMock(
            return_value=NLQueryResult(
                sql="SELECT month, revenue, note FROM sale.monthly\nLIMIT 50",
                warnings=["LIMIT 50 appended automatically."],
                result=QueryExecutionResult(
                    row_count=1,
                    fields=["month", "revenue", "note"],
                    rows=[{"month": date(2024, 3, 1), "revenue": Decimal("1200.50"), "note": None}],
                ),
                insights=InsightSummary(
                    summary="March revenue was £1.2K.",
                    key_metrics=[KeyMetric(label="Revenue", value="£1.2K")],
                    insights=["Single month returned"],
                ),
            )
        )
        return pipeline

    @pytest.fixture
    def patched_pipeline(self, pipeline):
        with patch("text2sql.api.main.get_pipeline", return_value=pipeline):
            yield pipeline

    def test_success(self, client, patched_pipeline):
        """Test a successful answer with rows and insights."""
        response = client.post(
            "/nl-query",
            json={"question": "Revenue by month?", "conversation": ["Show March"]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["sql"] == "SELECT month, revenue, note FROM sale.monthly\nLIMIT 50"
        assert data["warnings"] == ["LIMIT 50 appended automatically."]
        assert data["result"]["rowCount"] == 1
        assert data["result"]["fields"] == ["month", "revenue", "note"]
        assert data["result"]["rows"][0] == {"month": "2024-03-01", "revenue": "1200.50", "note": None}
        assert data["insights"]["keyMetrics"][0] == {"label": "Revenue", "value": "£1.2K", "trend": None}

        patched_pipeline.run.assert_awaited_once_with(
            "Revenue by month?", conversation=["Show March"], include_insights=True
        )

    def test_include_insights_false(self, client, patched_pipeline):
        client.post("/nl-query", json={"question": "Revenue by month?", "includeInsights": False})

        assert patched_pipeline.run.call_args.kwargs["include_insights"] is False

    def test_out_of_scope_is_not_an_error(self, client, patched_pipeline):
        """Test that a declined question returns 200 with type out_of_scope."""
        patched_pipeline.run.side_effect = OutOfScopeError(OUT_OF_SCOPE_MESSAGE)

        response = client.post("/nl-query", json={"question": "What's the weather in Leeds?"})

        assert response.status_code == 200
        assert response.json() == {"type": "out_of_scope", "message": OUT_OF_SCOPE_MESSAGE}

    def test_blocked_keyword_rejection(self, client, patched_pipeline):
        patched_pipeline.run.side_effect = BlockedKeywordError(
            "Disallowed keyword detected: DROP", keyword="DROP"
        )

        response = client.post("/nl-query", json={"question": "Drop the orders table"})

        assert response.status_code == 422
        assert response.json() == {
            "message": "Generated SQL was rejected",
            "error": "Disallowed keyword detected: DROP",
            "type": "sql_rejected",
            "rule": "blocked_keyword",
            "keyword": "DROP",
        }

    def test_multiple_statement_rejection(self, client, patched_pipeline):
        patched_pipeline.run.side_effect = MultipleStatementsError("Multiple SQL statements detected")

        response = client.post("/nl-query", json={"question": "Two queries please"})

        assert response.status_code == 422
        data = response.json()
        assert data["rule"] == "multiple_statements"
        assert "keyword" not in data

    @pytest.mark.parametrize(
        "error",
        [
            LLMProviderError("OpenRouter request failed (401): Invalid key", status_code=401),
            EmptyCompletionError("OpenRouter returned an empty completion."),
        ],
    )
    def test_provider_failure(self, client, patched_pipeline, error):
        patched_pipeline.run.side_effect = error

        response = client.post("/nl-query", json={"question": "Revenue by month?"})

        assert response.status_code == 502
        assert response.json() == {
            "message": "Failed to generate SQL",
            "error": error.message,
            "type": "api_error",
        }

    def test_execution_failure(self, client, patched_pipeline):
        patched_pipeline.run.side_effect = QueryExecutionError('column "revenue" does not exist')

        response = client.post("/nl-query", json={"question": "Revenue by month?"})

        assert response.status_code == 500
        assert response.json() == {
            "message": "Failed to generate or execute SQL",
            "error": 'column "revenue" does not exist',
            "type": "execution_error",
        }

    def test_schema_failure(self, client, patched_pipeline):
        patched_pipeline.run.side_effect = SchemaFetchError("Database unavailable: refused")

        response = client.post("/nl-query", json={"question": "Revenue by month?"})

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to load schema"
        assert response.json()["type"] == "schema_error"

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"question": "hi"},
            {"question": 42},
            {"question": "Revenue?", "conversation": "not a list"},
        ],
    )
    def test_invalid_request(self, client, patched_pipeline, body):
        """Test that malformed bodies are 400 and never reach the pipeline."""
        response = client.post("/nl-query", json=body)

        assert response.status_code == 400
        data = response.json()
        assert data["message"] == "Invalid request"
        assert data["issues"]
        patched_pipeline.run.assert_not_called()

    def test_pipeline_not_configured(self, client):
        with patch("text2sql.api.main.get_pipeline", return_value=None):
            response = client.post("/nl-query", json={"question": "Revenue by month?"})

        assert response.status_code == 503
        assert "not configured" in response.json()["message"]

    def test_unknown_route(self, client):
        response = client.get("/nope")

        assert response.status_code == 404
        assert response.json() == {"message": "Not found"}
