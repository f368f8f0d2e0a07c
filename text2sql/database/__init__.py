"""Database access: connection pool, schema catalog and dashboard reports."""

from text2sql.database.catalog import get_schema_metadata
from text2sql.database.pool import DatabasePool, resolve_ssl
from text2sql.database.reports import get_dashboard_insights

__all__ = [
    "DatabasePool",
    "get_dashboard_insights",
    "get_schema_metadata",
    "resolve_ssl",
]
