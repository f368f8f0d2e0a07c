"""
Health Check Routes

Liveness endpoint; does not touch the database or the model provider.
"""

from datetime import UTC, datetime

from fastapi import APIRouter, status

from text2sql.models.api import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health() -> HealthResponse:
    """Return 200 OK while the process is alive."""
    return HealthResponse(status="ok", timestamp=datetime.now(UTC).isoformat())
