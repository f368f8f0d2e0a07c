"""
Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from text2sql.llm.models import LLMResponse
from text2sql.models.query import QueryExecutionResult
from text2sql.models.schema import SchemaMetadata, TableColumn, TableSample

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests (requires a live PostgreSQL database)",
    )


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (may require external services)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless explicitly enabled."""
    if config.getoption("--run-integration"):
        return
    skip_integration = pytest.mark.skip(
        reason="Integration tests disabled (use --run-integration to enable)."
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def configure_test_logging(caplog):
    """Capture everything down to DEBUG for every test."""
    caplog.set_level(logging.DEBUG)
    yield


# ============================================================================
# Environment and Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def mock_openrouter_api_key(monkeypatch):
    """
    Provide a fake OpenRouter key and a clean settings cache.

    Runs automatically for all tests so no test can reach the real API
    with a developer's key.
    """
    from text2sql.config import clear_settings_cache

    clear_settings_cache()
    test_key = "sk-or-test-key-1234567890"
    monkeypatch.setenv("LLM_OPENROUTER_API_KEY", test_key)
    monkeypatch.setenv("TEXT2SQL_ENV_SOURCE", "none")
    yield test_key
    clear_settings_cache()


# ============================================================================
# Common Test Data
# ============================================================================


@pytest.fixture
def sample_schema() -> SchemaMetadata:
    """Two tables in the ``sale`` schema, one with sample rows."""
    return SchemaMetadata(
        columns=[
            TableColumn(
                table_schema="sale", table_name="orders", column_name="order_id", data_type="integer"
            ),
            TableColumn(
                table_schema="sale",
                table_name="orders",
                column_name="net_total_gbp",
                data_type="numeric",
            ),
            TableColumn(
                table_schema="sale", table_name="stores", column_name="store_name", data_type="text"
            ),
        ],
        samples=[
            TableSample(
                table_schema="sale",
                table_name="orders",
                rows=[{"order_id": 1, "net_total_gbp": 12.5}],
            )
        ],
    )


@pytest.fixture
def sample_result() -> QueryExecutionResult:
    """Revenue by channel, the shape most questions produce."""
    return QueryExecutionResult(
        row_count=3,
        fields=["channel", "revenue_gbp", "orders"],
        rows=[
            {"channel": "Delivery", "revenue_gbp": 2085313.65, "orders": 1200},
            {"channel": "In-store", "revenue_gbp": 45210.0, "orders": 800},
            {"channel": "Collection", "revenue_gbp": 950.25, "orders": 40},
        ],
    )


@pytest.fixture
def mock_llm_provider():
    """
    Create a mock LLM provider.

    Set ``provider.generate.return_value`` (or ``side_effect``) per test.
    """
    provider = MagicMock()
    provider.generate = AsyncMock(
        return_value=LLMResponse(
            content="SELECT 1",
            model="openai/gpt-4o-mini",
            provider="openrouter",
        )
    )
    provider.close = AsyncMock()
    return provider


def make_llm_response(content: str) -> LLMResponse:
    """Build an LLMResponse with the given content."""
    return LLMResponse(content=content, model="openai/gpt-4o-mini", provider="openrouter")


@pytest.fixture
def llm_response():
    """Factory fixture for LLM responses."""
    return make_llm_response
