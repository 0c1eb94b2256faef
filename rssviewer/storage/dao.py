# rssviewer/storage/dao.py
"""Read-only data access, one coroutine per dashboard resource.

Each function targets exactly one pool. Store results always go through
``as_records`` and store failures always come out as ``QueryError``.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import DateTime

from .db import DatabasePool
from .query import BuiltQuery, Page, QueryBuilder, grouped_count

logger = logging.getLogger(__name__)

SENTIMENT_ROW_CAP = 500

NEWS_SELECT = "SELECT id, source, title, description, link, fetched_at FROM news"
SENTIMENT_SELECT = (
    "SELECT security_name, source, date, predict_short_term, predict_mid_term, predict_long_term "
    "FROM sentiment"
)
SECURITIES_SELECT = "SELECT security_name, date, open, high, low, close, volume FROM securities"


class QueryError(Exception):
    """A store call failed; carries the driver message for the error envelope."""

    def __init__(self, resource: str, message: str):
        super().__init__(message)
        self.resource = resource
        self.message = message


def as_records(rows: Any) -> List[Dict[str, Any]]:
    if not isinstance(rows, (list, tuple)):
        logger.warning("Expected a list of rows, got %s; using an empty result", type(rows).__name__)
        return []
    return [dict(r) for r in rows if isinstance(r, Mapping)]


async def _fetch(pool: DatabasePool, built: BuiltQuery, resource: str) -> List[Dict[str, Any]]:
    try:
        rows = await pool.fetch_all(built.statement())
    except Exception as e:
        logger.exception("[API] ❌ Error fetching %s from %s DB: %s", resource, pool.name, e)
        raise QueryError(resource, str(e)) from e
    return as_records(rows)


async def list_news(
    pool: DatabasePool,
    sources: Sequence[str],
    page: Page,
    order: str = "DESC",
) -> Tuple[int, List[Dict[str, Any]]]:
    qb = QueryBuilder().where_in("source", sources)
    counted = await _fetch(pool, qb.count("news"), "news")
    total = int(counted[0]["total"]) if counted else 0
    items = await _fetch(pool, qb.select(NEWS_SELECT, "fetched_at", order, page=page), "news")
    return total, items


async def list_sources(pool: DatabasePool) -> List[Dict[str, Any]]:
    return await _fetch(pool, grouped_count("news", "source", "source", "ASC"), "sources")


async def list_sentiment(
    pool: DatabasePool,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    sources: Sequence[str] = (),
    securities: Sequence[str] = (),
) -> List[Dict[str, Any]]:
    ts = DateTime(timezone=True)
    qb = (
        QueryBuilder()
        .where_gte("date", start, ts)
        .where_lte("date", end, ts)
        .where_in("source", sources)
        .where_in("security_name", securities)
    )
    built = qb.select(SENTIMENT_SELECT, "date", "DESC", row_cap=SENTIMENT_ROW_CAP)
    return await _fetch(pool, built, "sentiment")


async def sentiment_sources(pool: DatabasePool) -> List[Dict[str, Any]]:
    return await _fetch(pool, grouped_count("sentiment", "source", "count", "DESC"), "sentiment/sources")


async def sentiment_securities(pool: DatabasePool) -> List[Dict[str, Any]]:
    built = grouped_count("sentiment", "security_name", "count", "DESC")
    return await _fetch(pool, built, "sentiment/securities")


async def security_series(pool: DatabasePool, name: str) -> List[Dict[str, Any]]:
    built = QueryBuilder().where_equals("security_name", name).select(SECURITIES_SELECT, "date", "ASC")
    return await _fetch(pool, built, "securities")
