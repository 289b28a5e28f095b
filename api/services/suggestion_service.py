"""
Autocomplete lookups for the search box.

Independent of the full search pipeline: a product lookup and a category
lookup run side by side against the same fragment, and their results are
returned together without filtering one by the other.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.config import settings
from middleware.logging_middleware import get_logger
from services.catalog_store import CatalogStore, placeholder
from services.predicate_composer import BRAND, EFFECTIVE_PRICE, contains_pattern

logger = get_logger(__name__)

PRODUCT_SUGGESTIONS_SQL = f"""
        SELECT DISTINCT
            p.product_id,
            p.title,
            p.review_count,
            c.name AS category_name,
            {BRAND} AS brand,
            {EFFECTIVE_PRICE} AS display_price
        FROM products p
        JOIN categories c ON p.category_id = c.category_id
        WHERE p.title ILIKE {placeholder(1)}
            OR {BRAND} ILIKE {placeholder(1)}
        ORDER BY p.review_count DESC, p.product_id ASC
        LIMIT {placeholder(2)}"""

CATEGORY_SUGGESTIONS_SQL = f"""
        SELECT c.name AS category_name, COUNT(p.product_id) AS count
        FROM categories c
        JOIN products p ON p.category_id = c.category_id
        WHERE c.name ILIKE {placeholder(1)}
        GROUP BY c.name
        ORDER BY c.name
        LIMIT {placeholder(2)}"""


@dataclass
class Suggestions:
    products: List[Dict[str, Any]] = field(default_factory=list)
    categories: List[Dict[str, Any]] = field(default_factory=list)
    skipped: bool = False


class SuggestionService:
    def __init__(self, store: CatalogStore):
        self.store = store

    async def suggest(self, raw_query: Optional[str]) -> Suggestions:
        fragment = (raw_query or "").strip()
        if len(fragment) < settings.suggestion_min_length:
            # Too short to be worth a wildcard scan
            return Suggestions(skipped=True)

        pattern = contains_pattern(fragment)
        products, categories = await asyncio.gather(
            self.store.fetch_all(PRODUCT_SUGGESTIONS_SQL, [pattern, settings.suggestion_product_limit]),
            self.store.fetch_all(CATEGORY_SUGGESTIONS_SQL, [pattern, settings.suggestion_category_limit]),
        )
        logger.info(
            f"Suggestions for {fragment!r}: {len(products)} products, {len(categories)} categories",
            extra={"products": len(products), "categories": len(categories)},
        )
        return Suggestions(products=products, categories=categories)
