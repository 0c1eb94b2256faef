# rssviewer/api/routers/news.py
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from rssviewer.api.deps import get_app_settings, get_pools
from rssviewer.api.schemas.common import iso_timestamp
from rssviewer.api.schemas.news import NewsItem, NewsPage, SourceCount
from rssviewer.core.config import Settings
from rssviewer.storage import dao
from rssviewer.storage.db import PoolSet
from rssviewer.storage.query import parse_order, parse_page, split_csv

router = APIRouter(prefix="/api", tags=["news"])


def to_news_item(row: Dict[str, Any]) -> NewsItem:
    fetched = iso_timestamp(row.get("fetched_at"))
    return NewsItem(
        id=row["id"],
        source=row["source"],
        title=row["title"],
        description=row.get("description"),
        link=row.get("link"),
        fetched_at=fetched,
        published=fetched,
    )


@router.get("/news", response_model=NewsPage)
async def list_news(
    # page/limit stay strings so junk falls back to the defaults instead of a 422
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sources: Optional[str] = Query(None, description="comma separated, e.g. Reuters,CoinDesk"),
    order: str = Query("desc"),
    pools: PoolSet = Depends(get_pools),
    settings: Settings = Depends(get_app_settings),
):
    paging = parse_page(page, limit, max_limit=settings.max_page_size)
    total, rows = await dao.list_news(pools.news, split_csv(sources), paging, parse_order(order))
    return NewsPage(total=total, items=[to_news_item(r) for r in rows])


@router.get("/sources", response_model=List[SourceCount])
async def list_sources(pools: PoolSet = Depends(get_pools)):
    rows = await dao.list_sources(pools.news)
    return [SourceCount(source=r["source"], count=int(r["count"])) for r in rows]
