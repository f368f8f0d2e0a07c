"""
Natural Language Query Routes

``POST /nl-query``: question in, sanitized SQL + rows (+ insights) out.
Pipeline errors propagate to the handlers registered in ``text2sql.api.main``.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from text2sql.models.api import NLQueryRequest, NLQueryResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/nl-query", response_model=NLQueryResponse)
async def nl_query(request: NLQueryRequest) -> NLQueryResponse:
    """
    Answer a question about the analytics data.

    Args:
        request: Question, optional conversation turns, insight toggle

    Returns:
        NLQueryResponse with sql, warnings, result and optional insights

    Raises:
        HTTPException: 503 if the pipeline is not configured
    """
    from text2sql.api.main import get_pipeline

    pipeline = get_pipeline()
    if pipeline is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Query pipeline is not configured. Set DATABASE_URL and LLM_OPENROUTER_API_KEY.",
        )

    logger.info(f"NL query received: {request.question[:100]}...")
    result = await pipeline.run(
        request.question,
        conversation=request.conversation,
        include_insights=request.include_insights,
    )
    return NLQueryResponse.model_validate(result.model_dump())
