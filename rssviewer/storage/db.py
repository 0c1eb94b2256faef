# rssviewer/storage/db.py
"""Connection pools for the news, price-series and sentiment databases.

Each logical database gets its own lazily created async engine. The three of
them are bundled in a ``PoolSet`` that the app builds once and hands to the
routers through a dependency, so tests can swap a single pool.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple

from sqlalchemy import Table, inspect, text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.schema import CreateTable
from sqlalchemy.sql.elements import TextClause

from ..core.config import DatabaseSettings, Settings
from .models import Sentiment

logger = logging.getLogger(__name__)


class DatabasePool:
    def __init__(self, name: str, config: DatabaseSettings, engine_options: Optional[Dict[str, Any]] = None):
        self.name = name
        self.config = config
        self._engine_options = engine_options or {}
        self._engine: Optional[AsyncEngine] = None

    @property
    def created(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        # Creating the engine opens no connection; the first query does.
        if self._engine is None:
            options: Dict[str, Any] = {"pool_pre_ping": True}
            if not self.config.is_sqlite:
                options.update(self._engine_options)
            self._engine = create_async_engine(self.config.async_url, **options)
            logger.info("[DB] %s pool created: %s", self.name, self.config.masked_url)
        return self._engine

    async def fetch_all(self, statement: TextClause):
        """Run one read statement; the connection goes back to the pool on exit."""
        async with self.engine.connect() as conn:
            result = await conn.execute(statement)
            return result.mappings().all()

    async def probe(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("[DB] ❌ Failed to connect to %s DB (%s): %s", self.name, self.config.masked_url, e)
            return False
        logger.info("[DB] ✅ Connected to %s DB at %s", self.name, self.config.masked_url)
        return True

    async def has_table(self, table_name: str) -> bool:
        async with self.engine.connect() as conn:
            return await conn.run_sync(lambda sync_conn: inspect(sync_conn).has_table(table_name))

    async def count_rows(self, table_name: str) -> int:
        async with self.engine.connect() as conn:
            result = await conn.execute(text(f"SELECT COUNT(*) FROM {table_name}"))
            return int(result.scalar() or 0)

    async def ensure_table(self, table: Table) -> None:
        """``CREATE TABLE IF NOT EXISTS``; safe to call any number of times."""
        async with self.engine.begin() as conn:
            await conn.execute(CreateTable(table, if_not_exists=True))

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None


@dataclass
class PoolSet:
    news: DatabasePool
    prices: DatabasePool
    sentiment: DatabasePool

    @classmethod
    def from_settings(cls, settings: Settings) -> "PoolSet":
        engine_options = {
            "pool_size": settings.pool_size,
            "max_overflow": settings.max_overflow,
            "pool_timeout": settings.pool_timeout,
            "pool_recycle": settings.pool_recycle,
            "connect_args": {"timeout": settings.connect_timeout},
        }
        return cls(
            news=DatabasePool("news", settings.news_db, engine_options),
            prices=DatabasePool("price-series", settings.price_db, engine_options),
            sentiment=DatabasePool("sentiment", settings.sentiment_db, engine_options),
        )

    def __iter__(self) -> Iterator[Tuple[str, DatabasePool]]:
        yield "news", self.news
        yield "prices", self.prices
        yield "sentiment", self.sentiment

    async def probe_all(self) -> Dict[str, bool]:
        return {key: await pool.probe() for key, pool in self}

    async def close(self) -> None:
        for _, pool in self:
            await pool.dispose()
        logger.info("[DB] pools disposed")


async def log_table_rows(pool: DatabasePool, table_name: str) -> Optional[int]:
    """Row-count diagnostic; returns None when the table is missing or unreadable."""
    try:
        if not await pool.has_table(table_name):
            logger.warning("[DB] ⚠️ %s table is missing in %s DB", table_name, pool.name)
            return None
        count = await pool.count_rows(table_name)
    except Exception as e:
        logger.error("[DB] ❌ Error checking %s table in %s DB: %s", table_name, pool.name, e)
        return None
    logger.info("[DB] ✅ %s table exists in %s DB with %d rows", table_name, pool.name, count)
    return count


async def ensure_sentiment_table(pool: DatabasePool) -> Optional[int]:
    try:
        await pool.ensure_table(Sentiment.__table__)
        count = await pool.count_rows(Sentiment.__tablename__)
    except Exception as e:
        logger.error("[DB] ❌ Error ensuring sentiment table in %s DB: %s", pool.name, e)
        return None
    logger.info("[DB] ✅ sentiment table ensured in %s DB with %d rows", pool.name, count)
    return count


async def run_diagnostics(pools: PoolSet) -> Dict[str, Any]:
    """Probe every pool and log the news/securities row counts.

    Nothing here is a precondition for serving; failures are logged and the
    affected endpoints report their own errors when queried.
    """
    report: Dict[str, Any] = {"connected": await pools.probe_all()}
    report["news_rows"] = await log_table_rows(pools.news, "news")
    report["securities_rows"] = await log_table_rows(pools.prices, "securities")
    return report


async def run_startup_checks(pools: PoolSet) -> Dict[str, Any]:
    """Ensure the sentiment table, then run the diagnostics to completion."""
    sentiment_rows = await ensure_sentiment_table(pools.sentiment)
    report = await run_diagnostics(pools)
    report["sentiment_rows"] = sentiment_rows
    return report
