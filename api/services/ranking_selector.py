"""
Chooses the ORDER BY for a search.

Relevance ranking is used only while the caller is searching text and has not
asked for a specific sort. Any explicit sort wins, text or not. Every ordering
ends with the product id so equal keys never reorder between requests.
"""
from dataclasses import dataclass
from typing import Any, List, Tuple

from schemas.search import SortMode
from services.predicate_composer import (
    EFFECTIVE_PRICE,
    SqlFragment,
    render_fragments,
    search_document,
    search_query,
)

TIEBREAKER = SqlFragment(name="product_id", sql="p.product_id ASC")

PRICE_ASC = SqlFragment(name="price", sql=f"{EFFECTIVE_PRICE} ASC")
PRICE_DESC = SqlFragment(name="price", sql=f"{EFFECTIVE_PRICE} DESC")
RATING_DESC = SqlFragment(name="rating", sql="p.rating DESC")
REVIEWS_DESC = SqlFragment(name="review_count", sql="p.review_count DESC")
CREATED_DESC = SqlFragment(name="created_at", sql="p.created_at DESC")

SORT_KEYS = {
    SortMode.price_low: (PRICE_ASC,),
    SortMode.price_high: (PRICE_DESC,),
    SortMode.rating: (RATING_DESC, REVIEWS_DESC),
    SortMode.newest: (CREATED_DESC,),
    SortMode.popularity: (REVIEWS_DESC, RATING_DESC),
    SortMode.relevance: (CREATED_DESC,),  # no text to rank against
}


@dataclass(frozen=True)
class Ordering:
    strategy: str
    keys: Tuple[SqlFragment, ...]

    @property
    def params(self) -> Tuple[Any, ...]:
        return tuple(param for key in self.keys for param in key.params)

    def render(self, start: int) -> Tuple[str, List[Any]]:
        """``ORDER BY`` clause with placeholders numbered from ``start``."""
        rendered, params = render_fragments(self.keys, start)
        return f"ORDER BY {', '.join(rendered)}", params


def relevance_key(query: str) -> SqlFragment:
    # Binds the query like the text predicate does; never inlined
    return SqlFragment(
        name="relevance",
        sql=f"ts_rank({search_document()}, {search_query('{0}')}) DESC",
        params=(query,),
    )


def select_ordering(has_text: bool, sort: SortMode, query: str = "") -> Ordering:
    if has_text and sort == SortMode.relevance:
        return Ordering(strategy="relevance", keys=(relevance_key(query), REVIEWS_DESC, TIEBREAKER))

    keys = SORT_KEYS.get(sort, SORT_KEYS[SortMode.newest])
    strategy = sort.value if sort != SortMode.relevance else SortMode.newest.value
    return Ordering(strategy=strategy, keys=keys + (TIEBREAKER,))
