"""
Schema Routes

Exposes the allow-listed catalog (columns and sample rows) that the model
sees when generating SQL.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from text2sql.config import get_settings
from text2sql.database.catalog import get_schema_metadata
from text2sql.models.schema import SchemaMetadata

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/schema", response_model=SchemaMetadata, response_model_by_alias=True)
async def schema() -> SchemaMetadata:
    """
    Return column metadata and sample rows for the allow-listed schemas.

    Raises:
        HTTPException: 503 if the database pool is not configured
        SchemaFetchError: Introspection failed (handled as 500)
    """
    from text2sql.api.main import get_pool

    pool = get_pool()
    if pool is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database is not configured. Set DATABASE_URL.",
        )

    settings = get_settings()
    return await get_schema_metadata(
        pool,
        allowlist=settings.database.schema_allowlist,
        sample_row_limit=settings.database.sample_row_limit,
    )
