# rssviewer/api/schemas/news.py
from typing import List, Optional

from pydantic import BaseModel


class NewsItem(BaseModel):
    id: int
    source: str
    title: str
    description: Optional[str] = None
    link: Optional[str] = None
    fetched_at: Optional[str] = None
    published: Optional[str] = None  # same instant as fetched_at


class NewsPage(BaseModel):
    total: int
    items: List[NewsItem]


class SourceCount(BaseModel):
    source: str
    count: int
