# rssviewer/api/schemas/sentiment.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, field_validator

from .common import iso_timestamp


class SentimentRecord(BaseModel):
    security_name: str
    source: str
    date: Optional[str] = None
    predict_short_term: Optional[float] = None
    predict_mid_term: Optional[float] = None
    predict_long_term: Optional[float] = None

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, v):
        return iso_timestamp(v)


class SentimentSourceCount(BaseModel):
    source: str
    count: int


class SecurityCount(BaseModel):
    security_name: str
    count: int
