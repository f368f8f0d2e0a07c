"""
Text2SQL Pipeline Orchestrator

Runs one question through every stage, sequentially:

    catalog -> schema formatter -> SQLGenerator -> SQLSanitizer
            -> QueryExecutor -> InsightGenerator (optional, best effort)

Each stage raises its own Text2SQLError subclass; the pipeline does not
catch them, so callers (API handlers, CLI) decide how to present failures.
"""

import logging
import time

from text2sql.agents.executor import QueryExecutor
from text2sql.agents.insights import InsightGenerator
from text2sql.agents.sanitizer import SQLSanitizer
from text2sql.agents.sql_generator import SQLGenerator
from text2sql.config import Settings
from text2sql.database.catalog import get_schema_metadata
from text2sql.database.pool import DatabasePool
from text2sql.llm.factory import LLMProviderFactory
from text2sql.models.query import NLQueryResult, PromptInput
from text2sql.models.schema import SchemaMetadata
from text2sql.prompts.builder import DEFAULT_ROW_LIMIT
from text2sql.prompts.schema_formatter import format_schema_for_prompt
from text2sql.prompts.scope import load_scope_policy

logger = logging.getLogger(__name__)


class NLQueryPipeline:
    """
    Question-to-answer pipeline.

    Usage:
        pipeline = NLQueryPipeline.from_settings(settings, pool)
        result = await pipeline.run("Which channel made the most revenue?")
        print(result.sql, result.result.row_count)
    """

    def __init__(
        self,
        pool: DatabasePool,
        sql_generator: SQLGenerator,
        insight_generator: InsightGenerator | None = None,
        schema_allowlist: list[str] | None = None,
        sample_row_limit: int = 5,
        row_limit: int = DEFAULT_ROW_LIMIT,
    ):
        """
        Initialize pipeline with dependencies.

        Args:
            pool: Shared connection pool
            sql_generator: Question -> SQL stage
            insight_generator: Optional narrative stage; None disables insights
            schema_allowlist: Schemas exposed to the model
            sample_row_limit: Sample rows per table in the schema block
            row_limit: Row cap appended to unbounded queries
        """
        self.pool = pool
        self.sql_generator = sql_generator
        self.insight_generator = insight_generator
        self.sanitizer = SQLSanitizer()
        self.executor = QueryExecutor(pool)
        self.schema_allowlist = schema_allowlist or ["sale"]
        self.sample_row_limit = sample_row_limit
        self.row_limit = row_limit

        logger.info("NLQueryPipeline initialized")

    @classmethod
    def from_settings(cls, settings: Settings, pool: DatabasePool) -> "NLQueryPipeline":
        """
        Wire providers and stages from application settings.

        Raises:
            ValueError: If the OpenRouter API key is not configured
        """
        scope = load_scope_policy(settings.prompt.scope_path)
        sql_provider = LLMProviderFactory.create_provider(settings.llm, purpose="sql")
        insight_provider = LLMProviderFactory.create_provider(settings.llm, purpose="insight")

        return cls(
            pool=pool,
            sql_generator=SQLGenerator(
                sql_provider, scope=scope, row_limit=settings.prompt.default_row_limit
            ),
            insight_generator=InsightGenerator(insight_provider),
            schema_allowlist=settings.database.schema_allowlist,
            sample_row_limit=settings.database.sample_row_limit,
            row_limit=settings.prompt.default_row_limit,
        )

    async def fetch_schema(self) -> SchemaMetadata:
        """Introspect the allow-listed schemas (connection released on return)."""
        return await get_schema_metadata(
            self.pool,
            allowlist=self.schema_allowlist,
            sample_row_limit=self.sample_row_limit,
        )

    async def schema_text(self) -> str:
        """The schema block exactly as the model sees it."""
        return format_schema_for_prompt(await self.fetch_schema())

    async def run(
        self,
        question: str,
        conversation: list[str] | None = None,
        include_insights: bool = True,
    ) -> NLQueryResult:
        """
        Answer one question.

        Args:
            question: Natural language question
            conversation: Optional prior turns, oldest first
            include_insights: Attach a narrative summary when a generator is configured

        Returns:
            NLQueryResult with sanitized SQL, warnings, rows and optional insights

        Raises:
            SchemaFetchError: Catalog introspection failed
            LLMProviderError: Model call failed or returned nothing
            OutOfScopeError: The model declined the question
            SQLRejectedError: The generated SQL failed sanitization
            QueryExecutionError: The database rejected the statement
        """
        start_time = time.perf_counter()
        logger.info(f"Processing question: {question[:100]}", extra={"question": question[:200]})

        schema_text = await self.schema_text()

        raw_sql = await self.sql_generator.generate_sql(
            PromptInput(question=question, schema_text=schema_text, conversation=conversation)
        )

        sanitized = self.sanitizer.sanitize(raw_sql, default_limit=self.row_limit)
        for warning in sanitized.warnings:
            logger.info(warning)

        result = await self.executor.execute(sanitized.sql)

        insights = None
        if include_insights and self.insight_generator is not None:
            insights = await self.insight_generator.generate(question, result)

        total_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Question answered in {total_ms:.0f}ms ({result.row_count} rows)",
            extra={"latency_ms": total_ms, "row_count": result.row_count},
        )

        return NLQueryResult(
            sql=sanitized.sql,
            warnings=sanitized.warnings,
            result=result,
            insights=insights,
        )

    async def close(self) -> None:
        """Release provider transports. The pool is owned by the caller."""
        await self.sql_generator.llm.close()
        if self.insight_generator is not None:
            await self.insight_generator.llm.close()
