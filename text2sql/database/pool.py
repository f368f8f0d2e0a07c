"""
PostgreSQL connection pool.

One asyncpg pool per process, opened in the API lifespan (or by the CLI) and
shared by the catalog, reports and query executor. Connections are borrowed
per operation with ``async with pool.acquire() as conn`` and never held
across model calls.

Usage:
    pool = DatabasePool.from_settings(get_settings().database)
    await pool.connect()

    async with pool.acquire() as conn:
        rows = await conn.fetch("SELECT 1")

    await pool.close()
"""

import logging
import ssl
from urllib.parse import urlparse

import asyncpg

from text2sql.config import DatabaseSettings

logger = logging.getLogger(__name__)

_LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}


def resolve_ssl(mode: str, host: str | None) -> ssl.SSLContext | bool:
    """
    Map the configured SSL mode to an asyncpg ``ssl`` argument.

    ``auto`` disables TLS for local hosts and otherwise encrypts without
    certificate verification (managed Postgres hosts with self-signed chains).
    """
    if mode == "disable":
        return False
    if mode == "auto" and (host or "").lower() in _LOCAL_HOSTS:
        return False

    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def normalize_dsn(url: str) -> str:
    """Drop a driver suffix (``postgresql+asyncpg://``) asyncpg does not understand."""
    scheme, sep, rest = url.partition("://")
    if not sep:
        return url
    return f"{scheme.split('+')[0]}://{rest}"


class DatabasePool:
    """Thin lifecycle wrapper around an asyncpg pool."""

    def __init__(
        self,
        dsn: str,
        pool_size: int = 10,
        pool_timeout: float = 30,
        statement_timeout: float = 30,
        ssl_mode: str = "auto",
    ):
        self.dsn = normalize_dsn(dsn)
        self.pool_size = pool_size
        self.pool_timeout = pool_timeout
        self.statement_timeout = statement_timeout
        self.ssl_mode = ssl_mode
        self.host = urlparse(self.dsn).hostname
        self._pool: asyncpg.Pool | None = None

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> "DatabasePool":
        """
        Build a pool from database settings.

        Raises:
            ValueError: If DATABASE_URL is not configured
        """
        if settings.url is None:
            raise ValueError("Database URL is required but not configured. Set DATABASE_URL")
        return cls(
            dsn=str(settings.url),
            pool_size=settings.pool_size,
            pool_timeout=settings.pool_timeout,
            statement_timeout=settings.statement_timeout,
            ssl_mode=settings.ssl,
        )

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        """Create the pool. Safe to call twice."""
        if self._pool is not None:
            logger.debug("Pool already created, skipping connection")
            return

        logger.info(
            f"Creating PostgreSQL pool for {self.host} (max {self.pool_size} connections)",
            extra={"host": self.host, "pool_size": self.pool_size, "ssl_mode": self.ssl_mode},
        )
        self._pool = await asyncpg.create_pool(
            dsn=self.dsn,
            min_size=1,
            max_size=self.pool_size,
            command_timeout=self.statement_timeout,
            ssl=resolve_ssl(self.ssl_mode, self.host),
            server_settings={"statement_timeout": str(int(self.statement_timeout * 1000))},
        )

    async def close(self) -> None:
        """Close the pool and all of its connections."""
        if self._pool is None:
            return
        await self._pool.close()
        self._pool = None
        logger.info("PostgreSQL pool closed")

    def acquire(self):
        """
        Borrow a connection: ``async with pool.acquire() as conn``.

        Raises:
            ConnectionError: If the pool has not been created
        """
        if self._pool is None:
            raise ConnectionError("Database pool is not connected. Call connect() first.")
        return self._pool.acquire(timeout=self.pool_timeout)
