# rssviewer/tests/conftest.py
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from rssviewer.app import create_app
from rssviewer.core.config import (
    NewsDatabaseSettings,
    PriceDatabaseSettings,
    SentimentDatabaseSettings,
    Settings,
)
from rssviewer.storage.db import PoolSet
from rssviewer.storage.models import News, NewsBase, PriceBase, SecurityBar, Sentiment, SentimentBase

BASE_TIME = datetime(2024, 1, 1, 8, 0, 0)
NEWS_SOURCES = ["Reuters", "CoinDesk", "Bloomberg"]


def news_rows(n=25):
    return [
        News(
            source=NEWS_SOURCES[i % 3],
            title=f"Headline {i}",
            description=f"Body {i}",
            link=f"http://example.com/{i}",
            fetched_at=BASE_TIME + timedelta(hours=i),
        )
        for i in range(n)
    ]


def price_rows():
    rows = []
    # inserted newest first so the API has to sort
    for i in reversed(range(5)):
        rows.append(SecurityBar(security_name="BTC", date=BASE_TIME + timedelta(days=i),
                                open=100.0 + i, high=110.0 + i, low=90.0 + i, close=105.0 + i, volume=1000 + i))
    for i in range(3):
        rows.append(SecurityBar(security_name="ETH", date=BASE_TIME + timedelta(days=i),
                                open=10.0, high=11.0, low=9.0, close=10.5, volume=50))
    return rows


def sentiment_rows():
    """reddit: BTC+ETH every day for 6 days (12); twitter: BTC first 3 days (3)."""
    rows = []
    for day in range(6):
        for sec in ("BTC", "ETH"):
            rows.append(Sentiment(security_name=sec, source="reddit", date=BASE_TIME + timedelta(days=day),
                                  predict_short_term=0.1 * day, predict_mid_term=0.2, predict_long_term=None))
    for day in range(3):
        rows.append(Sentiment(security_name="BTC", source="twitter", date=BASE_TIME + timedelta(days=day),
                              predict_short_term=-0.5, predict_mid_term=0.0, predict_long_term=0.5))
    return rows


def seed_db(path, base, rows):
    engine = create_engine(f"sqlite:///{path}")
    base.metadata.create_all(engine)
    with Session(engine) as s:
        s.add_all(rows)
        s.commit()
    engine.dispose()
    return path


def sqlite_settings(news_path, price_path, sentiment_path) -> Settings:
    return Settings(
        news_db=NewsDatabaseSettings(url=f"sqlite+aiosqlite:///{news_path}"),
        price_db=PriceDatabaseSettings(url=f"sqlite+aiosqlite:///{price_path}"),
        sentiment_db=SentimentDatabaseSettings(url=f"sqlite+aiosqlite:///{sentiment_path}"),
    )


@pytest.fixture
def db_paths(tmp_path):
    return {
        "news": seed_db(tmp_path / "news.sqlite", NewsBase, news_rows()),
        "prices": seed_db(tmp_path / "stock.sqlite", PriceBase, price_rows()),
        "sentiment": seed_db(tmp_path / "analyze.sqlite", SentimentBase, sentiment_rows()),
    }


@pytest.fixture
def settings(db_paths):
    return sqlite_settings(db_paths["news"], db_paths["prices"], db_paths["sentiment"])


@pytest.fixture
def client(settings):
    """TestClient over real SQLite pools; entering it runs the startup checks."""
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


class FakePool:
    """Stand-in for one DatabasePool: canned rows or a raised error."""

    def __init__(self, name="fake", rows=None, error=None, responses=None):
        self.name = name
        self.rows = [] if rows is None else rows
        self.error = error
        self.responses = list(responses or [])
        self.statements = []

    async def fetch_all(self, statement):
        self.statements.append(statement)
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return self.rows

    async def probe(self):
        return self.error is None

    async def dispose(self):
        pass


@pytest.fixture
def fake_pools():
    return PoolSet(news=FakePool("news"), prices=FakePool("price-series"), sentiment=FakePool("sentiment"))


@pytest.fixture
def fake_client(fake_pools):
    # no `with`: lifespan (startup checks) stays off for the doubles.
    # Unhandled errors come back as the 500 envelope instead of being re-raised.
    return TestClient(create_app(Settings(), pools=fake_pools), raise_server_exceptions=False)


@pytest.fixture
def make_client(tmp_path):
    """Build a live client over freshly seeded SQLite files; rows default to the standard data set."""
    clients = []

    def _make(news=None, prices=None, sentiment=None):
        sub = tmp_path / f"set{len(clients)}"
        sub.mkdir()
        s = sqlite_settings(
            seed_db(sub / "news.sqlite", NewsBase, news_rows() if news is None else news),
            seed_db(sub / "stock.sqlite", PriceBase, price_rows() if prices is None else prices),
            seed_db(sub / "analyze.sqlite", SentimentBase, sentiment_rows() if sentiment is None else sentiment),
        )
        c = TestClient(create_app(s))
        c.__enter__()
        clients.append(c)
        return c

    yield _make
    for c in clients:
        c.__exit__(None, None, None)
