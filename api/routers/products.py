"""
Product search API routes
"""
import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query

from core.database import get_catalog_store
from schemas.search import (
    CategorySuggestion,
    EmptySuggestionResponse,
    ProductSearchResponse,
    ProductSuggestion,
    SuggestionResponse,
)
from services.catalog_store import CatalogStore
from services.search_service import SearchService
from services.suggestion_service import SuggestionService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/products", tags=["products"])

# Parameters are raw strings; the search service normalizes them, so no
# malformed value ever produces a 422.


@router.get("/search/suggestions", response_model=Union[SuggestionResponse, EmptySuggestionResponse])
async def get_search_suggestions(
    q: Optional[str] = Query(None),
    store: CatalogStore = Depends(get_catalog_store),
):
    """Autocomplete suggestions for a partial query"""
    try:
        suggestions = await SuggestionService(store).suggest(q)
        if suggestions.skipped:
            return EmptySuggestionResponse()

        return SuggestionResponse(
            products=[ProductSuggestion(**row) for row in suggestions.products],
            categories=[CategorySuggestion(**row) for row in suggestions.categories],
        )

    except Exception as e:
        logger.error(f"Error fetching search suggestions: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching search suggestions")


@router.get("/search", response_model=ProductSearchResponse)
async def search_products(
    q: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    brand: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    store: CatalogStore = Depends(get_catalog_store),
):
    """Full-text product search with category, price and brand filters"""
    raw = {
        "q": q,
        "category": category,
        "minPrice": min_price,
        "maxPrice": max_price,
        "brand": brand,
        "sort": sort,
        "page": page,
        "limit": limit,
    }
    try:
        return await SearchService(store).search(raw)

    except Exception as e:
        logger.error(f"Error searching products: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error searching products")
