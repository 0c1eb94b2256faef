# rssviewer/api/schemas/common.py
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel

INTERNAL_ERROR = "Internal server error"


class ErrorResponse(BaseModel):
    error: str = INTERNAL_ERROR
    details: str


def iso_timestamp(value: Any) -> Optional[str]:
    """Render a store timestamp as ISO-8601 UTC with milliseconds ('...Z').

    Drivers hand back either native datetimes (asyncpg) or strings (SQLite);
    naive values are taken as UTC. Anything unparseable becomes None.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
