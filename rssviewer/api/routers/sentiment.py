# rssviewer/api/routers/sentiment.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from rssviewer.api.deps import get_pools
from rssviewer.api.schemas.sentiment import SecurityCount, SentimentRecord, SentimentSourceCount
from rssviewer.storage import dao
from rssviewer.storage.dao import QueryError
from rssviewer.storage.db import PoolSet
from rssviewer.storage.query import split_csv

router = APIRouter(prefix="/api/sentiment", tags=["sentiment"])


def parse_bound(raw: Optional[str], name: str) -> Optional[datetime]:
    """'2024-01-02' or a full ISO datetime -> aware UTC datetime; naive input is taken as UTC."""
    if raw is None or not raw.strip():
        return None
    try:
        dt = datetime.fromisoformat(raw.strip())
    except ValueError:
        raise QueryError("sentiment", f"{name} must be an ISO date or datetime, got {raw!r}")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@router.get("", response_model=List[SentimentRecord])
async def list_sentiment(
    start: Optional[str] = Query(None, description="inclusive lower bound on date"),
    end: Optional[str] = Query(None, description="inclusive upper bound on date"),
    sources: Optional[str] = Query(None, description="comma separated"),
    securities: Optional[str] = Query(None, description="comma separated, e.g. BTC,ETH"),
    pools: PoolSet = Depends(get_pools),
):
    rows = await dao.list_sentiment(
        pools.sentiment,
        start=parse_bound(start, "start"),
        end=parse_bound(end, "end"),
        sources=split_csv(sources),
        securities=split_csv(securities),
    )
    return [SentimentRecord(**r) for r in rows]


@router.get("/sources", response_model=List[SentimentSourceCount])
async def sentiment_sources(pools: PoolSet = Depends(get_pools)):
    rows = await dao.sentiment_sources(pools.sentiment)
    return [SentimentSourceCount(source=r["source"], count=int(r["count"])) for r in rows]


@router.get("/securities", response_model=List[SecurityCount])
async def sentiment_securities(pools: PoolSet = Depends(get_pools)):
    rows = await dao.sentiment_securities(pools.sentiment)
    return [SecurityCount(security_name=r["security_name"], count=int(r["count"])) for r in rows]
