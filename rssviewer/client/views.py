# rssviewer/client/views.py
"""Page-level state for the Viewer, Analyze and Graph tabs.

Each view owns its filter selection, refetches when a filter changes and
keeps whatever it showed before when a request fails.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from .api_client import DashboardClient, DashboardError, DateLike

logger = logging.getLogger(__name__)


class _View:
    def __init__(self, client: DashboardClient):
        self.client = client
        self.last_error: Optional[str] = None

    def _fail(self, what: str, exc: Exception) -> bool:
        self.last_error = str(exc)
        logger.warning("Failed to load %s. Please check connection to backend. (%s)", what, exc)
        return False

    def _ok(self) -> bool:
        self.last_error = None
        return True


def _toggle(selected: List[str], value: str) -> List[str]:
    return [v for v in selected if v != value] if value in selected else [*selected, value]


class NewsFeed(_View):
    """Viewer tab: source filter, sort order and Load More accumulation."""

    def __init__(self, client: DashboardClient, page_size: int = 10, order: str = "desc"):
        super().__init__(client)
        self.page_size = page_size
        self.order = order
        self.sources: List[Dict[str, Any]] = []
        self.selected_sources: List[str] = []
        self.items: List[Dict[str, Any]] = []
        self.total = 0
        self.page = 0

    @property
    def has_more(self) -> bool:
        return self.page == 0 or len(self.items) < self.total

    def load_sources(self) -> bool:
        """Fetch the source list and select all of it, then reload page 1."""
        try:
            data = self.client.sources()
        except DashboardError as e:
            return self._fail("sources", e)
        self.sources = data if isinstance(data, list) else []
        self.selected_sources = [s["source"] for s in self.sources]
        return self.refresh()

    def set_sources(self, sources: Iterable[str]) -> bool:
        self.selected_sources = list(sources)
        return self.refresh()

    def toggle_source(self, source: str) -> bool:
        return self.set_sources(_toggle(self.selected_sources, source))

    def set_order(self, order: str) -> bool:
        self.order = order
        return self.refresh()

    def refresh(self) -> bool:
        return self._fetch(1, replace=True)

    def load_more(self) -> bool:
        if not self.has_more:
            return False
        return self._fetch(self.page + 1, replace=False)

    def _fetch(self, page: int, replace: bool) -> bool:
        try:
            data = self.client.news(
                page=page,
                limit=self.page_size,
                sources=self.selected_sources or None,
                order=self.order,
            )
        except DashboardError as e:
            return self._fail("news", e)
        items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(items, list):
            return self._fail("news", DashboardError("malformed news payload"))

        self.items = items if replace else self.items + items
        self.total = int(data.get("total") or 0)
        self.page = page
        return self._ok()


class SentimentView(_View):
    """Analyze tab: date range plus source/security selections."""

    def __init__(self, client: DashboardClient):
        super().__init__(client)
        self.start: Optional[DateLike] = None
        self.end: Optional[DateLike] = None
        self.sources: List[Dict[str, Any]] = []
        self.securities: List[Dict[str, Any]] = []
        self.selected_sources: List[str] = []
        self.selected_securities: List[str] = []
        self.records: List[Dict[str, Any]] = []

    def load_options(self) -> bool:
        try:
            sources = self.client.sentiment_sources()
            securities = self.client.sentiment_securities()
        except DashboardError as e:
            return self._fail("sentiment filters", e)
        self.sources = sources if isinstance(sources, list) else []
        self.securities = securities if isinstance(securities, list) else []
        return self._ok()

    def set_range(self, start: Optional[DateLike] = None, end: Optional[DateLike] = None) -> bool:
        self.start, self.end = start, end
        return self.refresh()

    def toggle_source(self, source: str) -> bool:
        self.selected_sources = _toggle(self.selected_sources, source)
        return self.refresh()

    def toggle_security(self, security: str) -> bool:
        self.selected_securities = _toggle(self.selected_securities, security)
        return self.refresh()

    def refresh(self) -> bool:
        try:
            data = self.client.sentiment(
                start=self.start,
                end=self.end,
                sources=self.selected_sources,
                securities=self.selected_securities,
            )
        except DashboardError as e:
            return self._fail("sentiment", e)
        self.records = data if isinstance(data, list) else []
        return self._ok()


class GraphView(_View):
    """Graph tab: one selected security and its OHLC series."""

    def __init__(self, client: DashboardClient, security: str = "BTC"):
        super().__init__(client)
        self.security = security
        self.series: List[Dict[str, Any]] = []

    def select(self, security: str) -> bool:
        self.security = security
        return self.refresh()

    def refresh(self) -> bool:
        try:
            data = self.client.security(self.security)
        except DashboardError as e:
            return self._fail(f"security {self.security}", e)
        if not isinstance(data, list):
            logger.error("Invalid data response: %r", data)
            data = []
        self.series = data
        return self._ok()

    def candles(self) -> List[Dict[str, Any]]:
        """Array of {date, open, high, low, close} points for a candlestick chart."""
        keys = ("date", "open", "high", "low", "close")
        return [{k: bar.get(k) for k in keys} for bar in self.series]
