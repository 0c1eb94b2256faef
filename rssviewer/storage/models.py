# rssviewer/storage/models.py
"""Table models for the three dashboard databases.

The API only reads ``news`` and ``securities``; they are owned by the
ingestion jobs. ``sentiment`` is the one table this service is allowed to
create (see ``ensure_sentiment_table``).
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class NewsBase(DeclarativeBase):
    pass


class PriceBase(DeclarativeBase):
    pass


class SentimentBase(DeclarativeBase):
    pass


class News(NewsBase):
    __tablename__ = "news"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    source: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    link: Mapped[str | None] = mapped_column(Text)
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)


class SecurityBar(PriceBase):
    __tablename__ = "securities"

    security_name: Mapped[str] = mapped_column(String(50), primary_key=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), primary_key=True)
    open: Mapped[float | None] = mapped_column(Numeric(asdecimal=False))
    high: Mapped[float | None] = mapped_column(Numeric(asdecimal=False))
    low: Mapped[float | None] = mapped_column(Numeric(asdecimal=False))
    close: Mapped[float | None] = mapped_column(Numeric(asdecimal=False))
    volume: Mapped[int | None] = mapped_column(BigInteger)


class Sentiment(SentimentBase):
    __tablename__ = "sentiment"

    security_name: Mapped[str] = mapped_column(String(50), primary_key=True)
    source: Mapped[str] = mapped_column(Text, primary_key=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), primary_key=True)
    predict_short_term: Mapped[float | None] = mapped_column(Numeric(asdecimal=False))
    predict_mid_term: Mapped[float | None] = mapped_column(Numeric(asdecimal=False))
    predict_long_term: Mapped[float | None] = mapped_column(Numeric(asdecimal=False))
