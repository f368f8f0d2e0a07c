"""
QueryExecutor: run one sanitized SELECT against the analytics database.

Executes exactly the text it is given, in a read-only transaction on one
pooled connection, with no retries. Results are returned in native Python
types (``Decimal``, ``datetime``, ``None``) and serialized by the API layer.
"""

import logging
import time

import asyncpg

from text2sql.database.pool import DatabasePool
from text2sql.models.errors import NotSelectError, QueryExecutionError
from text2sql.models.query import QueryExecutionResult

logger = logging.getLogger(__name__)


class QueryExecutor:
    """Executes sanitized SQL on a shared connection pool."""

    def __init__(self, pool: DatabasePool):
        self.pool = pool

    async def execute(self, sql: str) -> QueryExecutionResult:
        """
        Execute a single SELECT statement.

        Args:
            sql: Sanitized SQL

        Returns:
            QueryExecutionResult with rows, row count and ordered field names

        Raises:
            NotSelectError: Text does not start with SELECT
            QueryExecutionError: The database rejected or failed the statement
        """
        if not sql.strip().upper().startswith("SELECT"):
            raise NotSelectError("Only SELECT statements are allowed")

        start_time = time.perf_counter()

        try:
            async with self.pool.acquire() as conn:
                # the server rejects writes (SELECT INTO, nextval, ...) in a read-only transaction
                async with conn.transaction(readonly=True):
                    # prepared so column names are known even for zero rows
                    statement = await conn.prepare(sql)
                    fields = [attribute.name for attribute in statement.get_attributes()]
                    records = await statement.fetch()
        except asyncpg.QueryCanceledError as e:
            logger.error(f"Query cancelled by statement timeout: {sql[:100]}...")
            raise QueryExecutionError(f"Query timed out: {e}", context={"sql": sql}) from e
        except asyncpg.PostgresError as e:
            logger.error(f"Query failed: {e}\nQuery: {sql[:200]}...")
            raise QueryExecutionError(str(e), context={"sql": sql}) from e
        except (OSError, asyncpg.InterfaceError) as e:
            logger.error(f"Database connection error during query: {e}")
            raise QueryExecutionError(f"Database connection error: {e}", context={"sql": sql}) from e

        rows = [dict(record) for record in records]
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            f"Query executed in {execution_time_ms:.2f}ms, returned {len(rows)} rows",
            extra={"row_count": len(rows), "execution_time_ms": execution_time_ms},
        )

        return QueryExecutionResult(row_count=len(rows), rows=rows, fields=fields)
