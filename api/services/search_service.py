"""
Product search: raw query-string values in, one ranked page out.

    raw values -> normalize_criteria -> compose_filter -> select_ordering
               -> QueryExecutor (page + count) -> ProductSearchResponse
"""
import time
from typing import Mapping, Optional

from middleware.logging_middleware import get_logger
from schemas.search import PaginationSchema, ProductRecord, ProductSearchResponse, SearchFilters
from services.catalog_store import CatalogStore
from services.filter_normalizer import SearchCriteria, normalize_criteria
from services.predicate_composer import compose_filter
from services.query_executor import QueryExecutor, build_pagination
from services.ranking_selector import select_ordering

logger = get_logger(__name__)


class SearchService:
    def __init__(self, store: CatalogStore):
        self.executor = QueryExecutor(store)

    async def search(self, raw: Mapping[str, Optional[str]]) -> ProductSearchResponse:
        criteria = normalize_criteria(raw)
        return await self.search_criteria(criteria)

    async def search_criteria(self, criteria: SearchCriteria) -> ProductSearchResponse:
        start_time = time.time()

        composed = compose_filter(criteria)
        ordering = select_ordering(criteria.has_text, criteria.sort, criteria.query)
        rows, total = await self.executor.execute(composed, ordering, criteria.page, criteria.limit)
        pagination = build_pagination(total, criteria.page, criteria.limit)

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Search q={criteria.query!r} filters={[p.name for p in composed.predicates]} "
            f"order={ordering.strategy} page={criteria.page}/{pagination.total_pages} "
            f"total={total} ({duration_ms:.0f}ms)",
            extra={"total": total, "strategy": ordering.strategy, "duration_ms": duration_ms},
        )

        return ProductSearchResponse(
            products=[ProductRecord(**row) for row in rows],
            pagination=PaginationSchema(
                total=pagination.total,
                page=pagination.page,
                limit=pagination.limit,
                total_pages=pagination.total_pages,
                has_next=pagination.has_next,
                has_prev=pagination.has_prev,
            ),
            query=criteria.query,
            filters=SearchFilters(
                category=criteria.category,
                min_price=criteria.min_price,
                max_price=criteria.max_price,
                brand=criteria.brand,
                sort=criteria.sort,
            ),
        )
