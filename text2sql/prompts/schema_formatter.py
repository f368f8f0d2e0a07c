"""Render catalog metadata into the compact schema block used in prompts."""

import json

from text2sql.models.schema import SchemaMetadata


def format_schema_for_prompt(schema: SchemaMetadata) -> str:
    """
    Format columns and sample rows as plain text.

    Tables appear in the order their first column was seen; columns keep
    catalog order. Sample rows are rendered as compact JSON objects, one line
    per table.

    Example output:
        Table sale.orders
          Columns: order_id (integer), order_dt (date)

        Sample rows:
          sale.orders: {"order_id":1,"order_dt":"2024-01-05"}
    """
    tables: dict[str, list[str]] = {}
    for column in schema.columns:
        tables.setdefault(column.qualified_table, []).append(
            f"{column.column_name} ({column.data_type})"
        )

    lines: list[str] = []
    for table, columns in tables.items():
        lines.append(f"Table {table}")
        lines.append(f"  Columns: {', '.join(columns)}")

    if schema.samples:
        lines.extend(["", "Sample rows:"])
        for sample in schema.samples:
            rows = "; ".join(_compact_json(row) for row in sample.rows)
            lines.append(f"  {sample.table_schema}.{sample.table_name}: {rows}")

    return "\n".join(lines)


def _compact_json(row: dict) -> str:
    # dates, decimals and UUIDs come back from asyncpg as native objects
    return json.dumps(row, default=str, ensure_ascii=False, separators=(",", ":"))
