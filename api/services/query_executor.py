"""
Runs a composed search as a page read and a count read.

Both statements are built from the same ``ComposedFilter`` so the count always
describes the rows on the page. The two reads have no dependency on each other
and are started together; if either fails the whole search fails.
"""
import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from services.catalog_store import CatalogStore, placeholder
from services.predicate_composer import ComposedFilter
from services.ranking_selector import Ordering

logger = logging.getLogger(__name__)

CATALOG_FROM = """
        FROM products p
        JOIN categories c ON p.category_id = c.category_id
        JOIN sellers s ON p.seller_id = s.seller_id
        JOIN users u ON s.seller_id = u.user_id"""

PRODUCT_COLUMNS = """
            p.product_id,
            p.title,
            p.description,
            p.price,
            p.sale_price,
            p.stock,
            p.specs,
            p.rating,
            p.review_count,
            c.name AS category_name,
            c.category_id,
            u.name AS seller_name,
            p.created_at"""


def build_count_query(composed: ComposedFilter) -> Tuple[str, List[Any]]:
    sql = f"SELECT COUNT(*) AS total{CATALOG_FROM}\n        {composed.where}"
    return sql, list(composed.params)


def build_page_query(
    composed: ComposedFilter, ordering: Ordering, limit: int, offset: int
) -> Tuple[str, List[Any]]:
    """Filter params, then ordering params, then LIMIT/OFFSET."""
    order_by, order_params = ordering.render(composed.next_index)
    limit_index = composed.next_index + len(order_params)
    sql = (
        f"SELECT{PRODUCT_COLUMNS}{CATALOG_FROM}\n"
        f"        {composed.where}\n"
        f"        {order_by}\n"
        f"        LIMIT {placeholder(limit_index)} OFFSET {placeholder(limit_index + 1)}"
    )
    return sql, list(composed.params) + order_params + [limit, offset]


@dataclass(frozen=True)
class Pagination:
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_prev: bool


def build_pagination(total: int, page: int, limit: int) -> Pagination:
    total_pages = math.ceil(total / limit) if limit else 0
    return Pagination(
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


class QueryExecutor:
    """Issues the page and count reads for one composed search"""

    def __init__(self, store: CatalogStore):
        self.store = store

    async def execute(
        self, composed: ComposedFilter, ordering: Ordering, page: int, limit: int
    ) -> Tuple[List[Dict[str, Any]], int]:
        offset = (page - 1) * limit
        page_sql, page_params = build_page_query(composed, ordering, limit, offset)
        count_sql, count_params = build_count_query(composed)

        logger.debug(f"Search page query: {page_sql} params={page_params}")
        logger.debug(f"Search count query: {count_sql} params={count_params}")

        rows, total = await asyncio.gather(
            self.store.fetch_all(page_sql, page_params),
            self.store.fetch_scalar(count_sql, count_params),
        )
        return rows, int(total or 0)
