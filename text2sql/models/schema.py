"""
Schema Metadata Models

Catalog metadata fetched per request from information_schema and consumed by
the schema formatter. JSON field names are camelCase on the wire.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TableColumn(BaseModel):
    """One column of an allow-listed table, in catalog order."""

    table_schema: str = Field(..., alias="tableSchema", description="Schema name")
    table_name: str = Field(..., alias="tableName", description="Table name")
    column_name: str = Field(..., alias="columnName", description="Column name")
    data_type: str = Field(..., alias="dataType", description="information_schema data type")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def qualified_table(self) -> str:
        return f"{self.table_schema}.{self.table_name}"


class TableSample(BaseModel):
    """A bounded set of sample rows for one table."""

    table_schema: str = Field(..., alias="tableSchema")
    table_name: str = Field(..., alias="tableName")
    rows: list[dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class SchemaMetadata(BaseModel):
    """Columns and sample rows for every allow-listed table."""

    columns: list[TableColumn] = Field(default_factory=list)
    samples: list[TableSample] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, frozen=True)
