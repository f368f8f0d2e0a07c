"""
Unit Tests for Dashboard Insights Endpoint
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from text2sql.api.main import app
from text2sql.models.api import InsightsResponse
from text2sql.models.errors import QueryExecutionError


class TestInsightsEndpoint:
    """Test suite for /insights."""

    @pytest.fixture
    def client(self):
        return TestClient(app)

    def test_returns_reports(self, client):
        reports = InsightsResponse(
            revenue_by_channel=[{"channel": "Delivery", "revenue_gbp": Decimal("2085313.65")}],
            category_performance=[],
            monthly_revenue=[],
            top_stores=[{"store_name": "Leeds", "revenue_gbp": Decimal("500.00")}],
        )

        with (
            patch("text2sql.api.main.get_pool", return_value=MagicMock()),
            patch(
                "text2sql.api.routes.insights.get_dashboard_insights",
                new=AsyncMock(return_value=reports),
            ),
        ):
            response = client.get("/insights")

        assert response.status_code == 200
        data = response.json()
        assert data["revenueByChannel"] == [{"channel": "Delivery", "revenue_gbp": "2085313.65"}]
        assert data["topStores"][0]["store_name"] == "Leeds"
        assert data["categoryPerformance"] == []

    def test_report_failure(self, client):
        with (
            patch("text2sql.api.main.get_pool", return_value=MagicMock()),
            patch(
                "text2sql.api.routes.insights.get_dashboard_insights",
                new=AsyncMock(side_effect=QueryExecutionError("Failed to load insights: boom")),
            ),
        ):
            response = client.get("/insights")

        assert response.status_code == 500
        assert response.json() == {
            "message": "Failed to load insights",
            "error": "Failed to load insights: boom",
            "type": "execution_error",
        }

    def test_database_not_configured(self, client):
        with patch("text2sql.api.main.get_pool", return_value=None):
            response = client.get("/insights")

        assert response.status_code == 503
        assert response.json()["message"] == "Database is not configured. Set DATABASE_URL."
