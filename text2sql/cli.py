"""
Text2SQL CLI

Command-line interface for the analytics assistant.

Usage:
    text2sql ask "Which channel made the most revenue?"   # Run the full pipeline
    text2sql ask "Top 5 stores" --no-insights             # Skip the narrative summary
    text2sql sanitize "select * from sale.orders;"        # Run the sanitizer offline
    text2sql schema                                       # Show the schema block the model sees
    text2sql serve --port 4000                            # Start the HTTP API
"""

import asyncio
import logging
import sys
from typing import Any

import click
import sqlparse
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from text2sql import __version__
from text2sql.agents.sanitizer import sanitize_sql
from text2sql.config import get_settings
from text2sql.database.catalog import get_schema_metadata
from text2sql.database.pool import DatabasePool
from text2sql.models.errors import OutOfScopeError, SQLRejectedError, Text2SQLError
from text2sql.models.insight import InsightSummary
from text2sql.models.query import QueryExecutionResult
from text2sql.pipeline.orchestrator import NLQueryPipeline
from text2sql.prompts.schema_formatter import format_schema_for_prompt

console = Console()

MAX_TABLE_ROWS = 50


def configure_cli_logging() -> None:
    """Keep library logging out of the rich output."""
    for logger_name in ("text2sql", "httpx", "asyncpg", "asyncio"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def format_sql(sql: str) -> str:
    return sqlparse.format(sql, reindent=True, keyword_case="upper")


def print_result_table(result: QueryExecutionResult) -> None:
    """Render up to MAX_TABLE_ROWS rows as a rich table."""
    table = Table(show_header=True, header_style="bold cyan")
    for field in result.fields:
        table.add_column(field)

    for row in result.rows[:MAX_TABLE_ROWS]:
        table.add_row(*[_cell(row.get(field)) for field in result.fields])

    console.print(table)
    if result.row_count > MAX_TABLE_ROWS:
        console.print(f"[dim]Showing {MAX_TABLE_ROWS} of {result.row_count} rows[/dim]")


def _cell(value: Any) -> str:
    return "NULL" if value is None else str(value)


def print_insights(insights: InsightSummary) -> None:
    console.print(Panel(insights.summary, title="[bold green]Summary[/bold green]"))

    if insights.key_metrics:
        metrics = Table(show_header=False, box=None)
        for metric in insights.key_metrics:
            metrics.add_row(f"[bold]{metric.label}[/bold]", metric.value, metric.trend or "")
        console.print(metrics)

    for insight in insights.insights:
        console.print(f"- {insight}")


# ============================================================================
# CLI Commands
# ============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="Text2SQL")
def cli():
    """Text2SQL - Ask questions about your analytics database in plain English."""


@cli.command()
@click.argument("question")
@click.option("--no-insights", is_flag=True, help="Skip the narrative insight summary")
def ask(question: str, no_insights: bool):
    """Ask a single question and exit."""
    configure_cli_logging()

    async def run_query() -> int:
        settings = get_settings()
        pool = DatabasePool.from_settings(settings.database)
        pipeline = None
        try:
            await pool.connect()
            pipeline = NLQueryPipeline.from_settings(settings, pool)
            with console.status("[cyan]Processing query...[/cyan]", spinner="dots"):
                result = await pipeline.run(question, include_insights=not no_insights)
        except OutOfScopeError as e:
            console.print(f"[yellow]{e.message}[/yellow]")
            return 0
        except SQLRejectedError as e:
            console.print(f"[red]SQL rejected ({e.rule}): {e.message}[/red]")
            return 1
        finally:
            if pipeline is not None:
                await pipeline.close()
            await pool.close()

        console.print(Panel(format_sql(result.sql), title="SQL", border_style="cyan"))
        for warning in result.warnings:
            console.print(f"[yellow]{warning}[/yellow]")
        print_result_table(result.result)
        if result.insights is not None:
            print_insights(result.insights)
        return 0

    try:
        exit_code = asyncio.run(run_query())
    except (Text2SQLError, ValueError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    if exit_code:
        sys.exit(exit_code)


@cli.command()
@click.argument("sql")
@click.option("--limit", default=50, show_default=True, type=click.IntRange(min=1), help="Row cap")
def sanitize(sql: str, limit: int):
    """Run the SQL sanitizer on SQL text without touching the database."""
    try:
        sanitized = sanitize_sql(sql, default_limit=limit)
    except SQLRejectedError as e:
        console.print(f"[red]Rejected ({e.rule}): {e.message}[/red]")
        sys.exit(1)

    console.print(Panel(format_sql(sanitized.sql), title="Sanitized SQL", border_style="green"))
    for warning in sanitized.warnings:
        console.print(f"[yellow]{warning}[/yellow]")


@cli.command()
def schema():
    """Print the schema block sent to the model."""
    configure_cli_logging()

    async def load_schema_text() -> str:
        settings = get_settings()
        pool = DatabasePool.from_settings(settings.database)
        try:
            await pool.connect()
            metadata = await get_schema_metadata(
                pool,
                allowlist=settings.database.schema_allowlist,
                sample_row_limit=settings.database.sample_row_limit,
            )
            return format_schema_for_prompt(metadata)
        finally:
            await pool.close()

    try:
        text = asyncio.run(load_schema_text())
    except (Text2SQLError, ValueError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    console.print(text, markup=False, highlight=False)


@cli.command()
@click.option("--host", default=None, help="Bind address (default: API_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: API_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the HTTP API with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "text2sql.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
    )


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
