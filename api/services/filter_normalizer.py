"""
Lenient parsing of raw search query-string values.

Search never fails on a messy query string: bad numbers are dropped, bad
pagination falls back to the nearest valid value, unknown sort modes become
``newest``.
"""
import math
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from core.config import settings
from schemas.search import SortMode

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

ALL_VALUES = "all"

# OFFSET is bound as a Postgres bigint
MAX_OFFSET = 2**63 - 1


@dataclass(frozen=True)
class SearchCriteria:
    """Normalized, bounded search request"""
    query: str = ""
    category: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    brand: Optional[str] = None
    sort: SortMode = SortMode.relevance
    page: int = 1
    limit: int = 12

    @property
    def has_text(self) -> bool:
        return bool(self.query)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_text(value: Optional[str]) -> str:
    return (value or "").strip()


def parse_choice(value: Optional[str]) -> Optional[str]:
    """Category/brand value; empty and ``all`` mean no filter."""
    value = parse_text(value)
    if not value or value.lower() == ALL_VALUES:
        return None
    return value


def parse_price(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        price = float(value.strip())
    except ValueError:
        return None
    if math.isnan(price) or math.isinf(price):
        return None
    return price


def parse_int(value: Optional[str], default: int) -> int:
    """Leading integer of ``value`` (``"3.7"`` and ``"3abc"`` give 3), else ``default``."""
    if value is None:
        return default
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else default


def clamp(value: int, lower: int, upper: Optional[int] = None) -> int:
    value = max(lower, value)
    if upper is not None:
        value = min(upper, value)
    return value


def parse_sort(value: Optional[str]) -> SortMode:
    value = parse_text(value)
    if not value:
        return SortMode.relevance
    try:
        return SortMode(value)
    except ValueError:
        return SortMode.newest


def normalize_criteria(raw: Mapping[str, Optional[str]]) -> SearchCriteria:
    """Build ``SearchCriteria`` from query-string values keyed as in the URL."""
    limit = clamp(parse_int(raw.get("limit"), settings.search_default_limit), 1, settings.search_max_limit)
    page = clamp(parse_int(raw.get("page"), 1), 1, MAX_OFFSET // limit + 1)

    return SearchCriteria(
        query=parse_text(raw.get("q")),
        category=parse_choice(raw.get("category")),
        min_price=parse_price(raw.get("minPrice")),
        max_price=parse_price(raw.get("maxPrice")),
        brand=parse_choice(raw.get("brand")),
        sort=parse_sort(raw.get("sort")),
        page=page,
        limit=limit,
    )
