# rssviewer/client/api_client.py
"""HTTP client for the dashboard API.

Works with a ``requests.Session`` in production and with anything exposing
the same ``get(url, params=..., timeout=...)`` call, e.g. FastAPI's
``TestClient``.
"""
import os
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Union
from urllib.parse import quote

import requests

DEFAULT_BASE_URL = os.getenv("RSSVIEWER_API_URL", "http://localhost:4000")

DateLike = Union[date, str]


class DashboardError(RuntimeError):
    pass


def _csv(values: Optional[Iterable[str]]) -> Optional[str]:
    items = [v for v in (values or []) if v]
    return ",".join(items) if items else None


def _date_param(value: Optional[DateLike]) -> Optional[str]:
    if value is None or value == "":
        return None
    return value.isoformat() if isinstance(value, date) else str(value)


class DashboardClient:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, session: Any = None, timeout: float = 20):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        clean = {k: v for k, v in (params or {}).items() if v is not None}
        try:
            r = self.session.get(self.base_url + path, params=clean, timeout=self.timeout)
        except requests.RequestException as e:
            raise DashboardError(f"GET {path} failed: {e}") from e
        if r.status_code >= 400:
            raise DashboardError(f"GET {path} -> {r.status_code}: {r.text}")
        try:
            return r.json()
        except ValueError as e:
            raise DashboardError(f"GET {path} returned invalid JSON") from e

    def news(
        self,
        page: int = 1,
        limit: int = 10,
        sources: Optional[Iterable[str]] = None,
        order: str = "desc",
    ) -> Dict[str, Any]:
        return self._get("/api/news", {"page": page, "limit": limit, "sources": _csv(sources), "order": order})

    def sources(self) -> List[Dict[str, Any]]:
        return self._get("/api/sources")

    def sentiment(
        self,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
        sources: Optional[Iterable[str]] = None,
        securities: Optional[Iterable[str]] = None,
    ) -> List[Dict[str, Any]]:
        params = {
            "start": _date_param(start),
            "end": _date_param(end),
            "sources": _csv(sources),
            "securities": _csv(securities),
        }
        return self._get("/api/sentiment", params)

    def sentiment_sources(self) -> List[Dict[str, Any]]:
        return self._get("/api/sentiment/sources")

    def sentiment_securities(self) -> List[Dict[str, Any]]:
        return self._get("/api/sentiment/securities")

    def security(self, name: str) -> List[Dict[str, Any]]:
        return self._get(f"/api/securities/{quote(name, safe='')}")
