"""
Dashboard Insight Routes

Fixed reporting queries for the dashboard; no model involvement.
"""

import logging

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse

from text2sql.database.reports import get_dashboard_insights
from text2sql.models.api import ErrorResponse, InsightsResponse
from text2sql.models.errors import QueryExecutionError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/insights", response_model=InsightsResponse, response_model_by_alias=True)
async def insights() -> InsightsResponse | JSONResponse:
    """Revenue by channel, category performance, monthly revenue and top stores."""
    from text2sql.api.main import get_pool

    pool = get_pool()
    if pool is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database is not configured. Set DATABASE_URL.",
        )

    try:
        return await get_dashboard_insights(pool)
    except QueryExecutionError as e:
        body = ErrorResponse(message="Failed to load insights", error=e.message, type=e.error_type)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=body.model_dump(exclude_none=True),
        )
