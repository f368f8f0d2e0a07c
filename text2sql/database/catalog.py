"""
Schema catalog introspection.

Reads column metadata and a few sample rows for every base table in the
allow-listed schemas. The result feeds both ``GET /schema`` and the prompt's
schema block.
"""

import logging

import asyncpg

from text2sql.database.pool import DatabasePool
from text2sql.models.errors import SchemaFetchError
from text2sql.models.schema import SchemaMetadata, TableColumn, TableSample

logger = logging.getLogger(__name__)

DEFAULT_ALLOWLIST = ("sale",)
DEFAULT_SAMPLE_ROW_LIMIT = 5

COLUMNS_QUERY = """
    SELECT
        table_schema,
        table_name,
        column_name,
        data_type
    FROM information_schema.columns
    WHERE table_schema = ANY($1::text[])
    ORDER BY table_schema, table_name, ordinal_position
"""

TABLES_QUERY = """
    SELECT table_schema, table_name
    FROM information_schema.tables
    WHERE table_schema = ANY($1::text[])
      AND table_type = 'BASE TABLE'
    ORDER BY table_schema, table_name
"""


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


async def get_schema_metadata(
    pool: DatabasePool,
    allowlist: list[str] | tuple[str, ...] = DEFAULT_ALLOWLIST,
    sample_row_limit: int = DEFAULT_SAMPLE_ROW_LIMIT,
) -> SchemaMetadata:
    """
    Introspect the allow-listed schemas.

    Args:
        pool: Shared connection pool
        allowlist: Schemas to expose
        sample_row_limit: Rows sampled per table (0 disables sampling)

    Returns:
        SchemaMetadata with columns ordered by schema, table, ordinal position
        and one sample entry per base table

    Raises:
        SchemaFetchError: Database unreachable or introspection failed
    """
    schemas = list(allowlist)

    try:
        async with pool.acquire() as conn:
            search_path = ", ".join(quote_identifier(schema) for schema in schemas)
            await conn.execute(f"SET search_path TO {search_path}")

            column_records = await conn.fetch(COLUMNS_QUERY, schemas)
            columns = [
                TableColumn(
                    table_schema=record["table_schema"],
                    table_name=record["table_name"],
                    column_name=record["column_name"],
                    data_type=record["data_type"],
                )
                for record in column_records
            ]

            samples = []
            if sample_row_limit > 0:
                for table in await conn.fetch(TABLES_QUERY, schemas):
                    schema_name, table_name = table["table_schema"], table["table_name"]
                    sample_records = await conn.fetch(
                        f"SELECT * FROM {quote_identifier(schema_name)}.{quote_identifier(table_name)} "
                        f"LIMIT {int(sample_row_limit)}"
                    )
                    samples.append(
                        TableSample(
                            table_schema=schema_name,
                            table_name=table_name,
                            rows=[dict(record) for record in sample_records],
                        )
                    )
    except asyncpg.PostgresError as e:
        logger.error(f"Schema introspection failed: {e}")
        raise SchemaFetchError(f"Failed to load schema metadata: {e}") from e
    except (OSError, asyncpg.InterfaceError) as e:
        logger.error(f"Database unavailable during schema introspection: {e}")
        raise SchemaFetchError(f"Database unavailable: {e}") from e

    logger.info(
        f"Loaded schema metadata: {len(columns)} columns, {len(samples)} sampled tables",
        extra={"schemas": schemas, "columns": len(columns), "tables": len(samples)},
    )
    return SchemaMetadata(columns=columns, samples=samples)
