# rssviewer/api/schemas/price.py
from typing import Optional

from pydantic import BaseModel, field_validator

from .common import iso_timestamp


class SecurityBar(BaseModel):
    """One OHLC point; a list of these is what the candlestick chart takes."""
    security_name: str
    date: Optional[str] = None
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    close: Optional[float] = None
    volume: Optional[int] = None

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, v):
        return iso_timestamp(v)
