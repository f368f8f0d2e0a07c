"""
FastAPI Application

Main FastAPI application for Text2SQL with:
- Lifespan management for the connection pool and model providers
- CORS middleware for the dashboard frontend
- Exception handlers mapping pipeline errors to JSON responses
- Health, schema, natural-language query and dashboard insight endpoints

Usage:
    uvicorn text2sql.api.main:app --reload --port 4000
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from text2sql import __version__
from text2sql.api.routes import health, insights, nl_query, schema
from text2sql.config import get_settings
from text2sql.database.pool import DatabasePool
from text2sql.models.api import ErrorResponse, OutOfScopeResponse
from text2sql.models.errors import (
    LLMProviderError,
    OutOfScopeError,
    QueryExecutionError,
    SchemaFetchError,
    SQLRejectedError,
    Text2SQLError,
)
from text2sql.pipeline.orchestrator import NLQueryPipeline

logger = logging.getLogger(__name__)

# Global state for the pool and pipeline
app_state = {
    "pool": None,
    "pipeline": None,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Lifespan context manager for startup and shutdown.

    Initializes:
    - PostgreSQL connection pool (asyncpg)
    - Pipeline with OpenRouter providers for SQL and insights
    """
    config = get_settings()
    logger.info(f"Starting {config.app_name} API server...")

    try:
        if config.database.url:
            pool = DatabasePool.from_settings(config.database)
            await pool.connect()
            app_state["pool"] = pool
        else:
            logger.warning("DATABASE_URL not set; connection pool not initialized.")
            app_state["pool"] = None

        if app_state["pool"] is not None:
            try:
                app_state["pipeline"] = NLQueryPipeline.from_settings(config, app_state["pool"])
            except ValueError as e:
                logger.warning(f"Pipeline not initialized: {e}")
                app_state["pipeline"] = None
        else:
            logger.warning("Pipeline not initialized; target database is missing.")
            app_state["pipeline"] = None

        logger.info(f"{config.app_name} API server started successfully")

        yield  # Application runs here

    finally:
        logger.info(f"Shutting down {config.app_name} API server...")

        if app_state["pipeline"]:
            try:
                await app_state["pipeline"].close()
            except Exception as e:
                logger.error(f"Error closing model providers: {e}")
            app_state["pipeline"] = None

        if app_state["pool"]:
            try:
                await app_state["pool"].close()
            except Exception as e:
                logger.error(f"Error closing connection pool: {e}")
            app_state["pool"] = None

        logger.info(f"{config.app_name} API server shut down complete")


app = FastAPI(
    title="Text2SQL Analytics API",
    description="Natural language questions answered with read-only SQL",
    version=__version__,
    lifespan=lifespan,
)

config = get_settings()
cors_origins = config.cors_origin_list or ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials="*" not in cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, message: str, exc: Text2SQLError) -> JSONResponse:
    body = ErrorResponse(message=message, error=exc.message, type=exc.error_type)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


# Exception handlers
@app.exception_handler(OutOfScopeError)
async def out_of_scope_handler(request: Request, exc: OutOfScopeError) -> JSONResponse:
    """A declined question is a normal answer, not a failure."""
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=OutOfScopeResponse(message=exc.message).model_dump(),
    )


@app.exception_handler(SQLRejectedError)
async def sql_rejected_handler(request: Request, exc: SQLRejectedError) -> JSONResponse:
    """Handle sanitizer rejections of generated SQL."""
    body = ErrorResponse(
        message="Generated SQL was rejected",
        error=exc.message,
        type=exc.error_type,
        rule=exc.rule,
        keyword=exc.keyword,
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=body.model_dump(exclude_none=True),
    )


@app.exception_handler(LLMProviderError)
async def provider_error_handler(request: Request, exc: LLMProviderError) -> JSONResponse:
    """Handle model provider failures."""
    logger.error(f"Model provider error: {exc}", extra={"status": exc.status_code})
    return _error_response(status.HTTP_502_BAD_GATEWAY, "Failed to generate SQL", exc)


@app.exception_handler(QueryExecutionError)
async def execution_error_handler(request: Request, exc: QueryExecutionError) -> JSONResponse:
    """Handle query execution errors."""
    logger.error(f"Query execution error: {exc}")
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to generate or execute SQL", exc
    )


@app.exception_handler(SchemaFetchError)
async def schema_error_handler(request: Request, exc: SchemaFetchError) -> JSONResponse:
    """Handle catalog introspection errors."""
    logger.error(f"Schema fetch error: {exc}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to load schema", exc)


@app.exception_handler(Text2SQLError)
async def pipeline_error_handler(request: Request, exc: Text2SQLError) -> JSONResponse:
    """Handle any other pipeline error."""
    logger.error(f"Pipeline error: {exc}", extra=exc.to_dict())
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Request failed", exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid request", "issues": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors (unknown routes included) as ``{message}``."""
    message = "Not found" if exc.status_code == status.HTTP_404_NOT_FOUND else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"message": message})


# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(schema.router, tags=["schema"])
app.include_router(nl_query.router, tags=["query"])
app.include_router(insights.router, tags=["insights"])


def get_pool() -> DatabasePool | None:
    """Get the initialized connection pool, if any."""
    return app_state["pool"]


def get_pipeline() -> NLQueryPipeline | None:
    """Get the initialized pipeline, if any."""
    return app_state["pipeline"]
