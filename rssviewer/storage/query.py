# rssviewer/storage/query.py
"""Parameterized query assembly for the list endpoints.

Every filter gets a bind name computed from the current parameter count
(``:p1``, ``:p2``, ...), so optional filters can be switched on and off in
any combination without shifting a placeholder. LIMIT/OFFSET are always the
last two binds and are left out of the matching COUNT query.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

from sqlalchemy import bindparam, text
from sqlalchemy.sql.elements import TextClause
from sqlalchemy.types import TypeEngine

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
# keeps OFFSET (and LIMIT when no max_limit is given) inside a 32-bit integer
MAX_PAGE = 1_000_000
MAX_LIMIT = 1_000


@dataclass(frozen=True)
class BindValue:
    name: str
    value: Any
    type_: Optional[TypeEngine] = None
    expanding: bool = False


@dataclass(frozen=True)
class Page:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class BuiltQuery:
    sql: str
    params: Tuple[BindValue, ...] = ()

    @property
    def values(self) -> List[Any]:
        return [p.value for p in self.params]

    def statement(self) -> TextClause:
        stmt = text(self.sql)
        if not self.params:
            return stmt
        return stmt.bindparams(*[
            bindparam(p.name, value=p.value, type_=p.type_, expanding=p.expanding)
            for p in self.params
        ])


def _to_int(raw: Any) -> Optional[int]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def parse_page(raw_page: Any = None, raw_limit: Any = None, max_limit: Optional[int] = None) -> Page:
    """Turn raw query-string values into a valid page.

    Missing or non-numeric values fall back to page 1 / limit 10. Values
    below 1 are clamped to 1, ``page`` is capped at ``MAX_PAGE`` and
    ``limit`` at ``max_limit`` (``MAX_LIMIT`` when not given).
    """
    page = _to_int(raw_page)
    limit = _to_int(raw_limit)
    page = DEFAULT_PAGE if page is None else min(max(page, 1), MAX_PAGE)
    limit = DEFAULT_LIMIT if limit is None else max(limit, 1)
    limit = min(limit, MAX_LIMIT if max_limit is None else max_limit)
    return Page(page=page, limit=limit)


def split_csv(raw: Optional[str]) -> List[str]:
    """'a, b,,c' -> ['a', 'b', 'c']; None or blank -> []."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def parse_order(raw: Optional[str], default: str = "desc") -> str:
    value = (raw or default).strip().lower()
    return "ASC" if value == "asc" else "DESC"


class QueryBuilder:
    """Collects optional filters into one WHERE clause plus bind list."""

    def __init__(self) -> None:
        self._conditions: List[str] = []
        self._params: List[BindValue] = []

    def _bind(self, value: Any, type_: Optional[TypeEngine] = None, expanding: bool = False) -> str:
        name = f"p{len(self._params) + 1}"
        self._params.append(BindValue(name, value, type_, expanding))
        return f":{name}"

    def where_in(self, column: str, values: Optional[Iterable[Any]]) -> "QueryBuilder":
        items = list(values or [])
        if items:
            self._conditions.append(f"{column} IN {self._bind(items, expanding=True)}")
        return self

    def where_gte(self, column: str, value: Any, type_: Optional[TypeEngine] = None) -> "QueryBuilder":
        if value is not None:
            self._conditions.append(f"{column} >= {self._bind(value, type_)}")
        return self

    def where_lte(self, column: str, value: Any, type_: Optional[TypeEngine] = None) -> "QueryBuilder":
        if value is not None:
            self._conditions.append(f"{column} <= {self._bind(value, type_)}")
        return self

    def where_equals(self, column: str, value: Any, type_: Optional[TypeEngine] = None) -> "QueryBuilder":
        if value is not None:
            self._conditions.append(f"{column} = {self._bind(value, type_)}")
        return self

    @property
    def where_clause(self) -> str:
        if not self._conditions:
            return ""
        return "WHERE " + " AND ".join(self._conditions)

    @property
    def params(self) -> List[BindValue]:
        return list(self._params)

    def _compose(self, *parts: str) -> str:
        return " ".join(p for p in parts if p)

    def select(
        self,
        base_sql: str,
        order_by: Optional[str] = None,
        direction: str = "DESC",
        page: Optional[Page] = None,
        row_cap: Optional[int] = None,
    ) -> BuiltQuery:
        """Data query: filters, one sort key, then LIMIT/OFFSET binds.

        ``row_cap`` is a fixed LIMIT written into the SQL for endpoints that
        do not paginate.
        """
        params = list(self._params)
        order = f"ORDER BY {order_by} {direction}" if order_by else ""
        tail = ""
        if page is not None:
            limit_name = f"p{len(params) + 1}"
            offset_name = f"p{len(params) + 2}"
            params.append(BindValue(limit_name, page.limit))
            params.append(BindValue(offset_name, page.offset))
            tail = f"LIMIT :{limit_name} OFFSET :{offset_name}"
        elif row_cap is not None:
            tail = f"LIMIT {int(row_cap)}"
        return BuiltQuery(self._compose(base_sql, self.where_clause, order, tail), tuple(params))

    def count(self, table: str) -> BuiltQuery:
        """COUNT(*) over the same predicate; never carries pagination binds."""
        sql = self._compose(f"SELECT COUNT(*) AS total FROM {table}", self.where_clause)
        return BuiltQuery(sql, tuple(self._params))


def grouped_count(table: str, key: str, order_by: str, direction: str = "ASC") -> BuiltQuery:
    """``SELECT key, COUNT(*) AS count ... GROUP BY key`` for the summary lists."""
    sql = (
        f"SELECT {key}, COUNT(*) AS count FROM {table} "
        f"GROUP BY {key} ORDER BY {order_by} {direction}"
    )
    return BuiltQuery(sql)
