"""
Pydantic schemas for product search and autocomplete endpoints
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field


class SortMode(str, Enum):
    """Available search orderings"""
    relevance = "relevance"
    price_low = "price-low"
    price_high = "price-high"
    rating = "rating"
    newest = "newest"
    popularity = "popularity"


class ProductRecord(BaseModel):
    """Product row as returned by search"""
    product_id: Union[int, UUID, str]
    title: str
    description: Optional[str] = None
    price: Optional[float] = None
    sale_price: Optional[float] = None
    stock: Optional[int] = None
    specs: Optional[Dict[str, Any]] = None
    rating: Optional[float] = None
    review_count: Optional[int] = 0
    category_name: Optional[str] = None
    category_id: Optional[Union[int, UUID, str]] = None
    seller_name: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PaginationSchema(BaseModel):
    """Pagination metadata"""
    total: int
    page: int
    limit: int
    total_pages: int = Field(alias="totalPages")
    has_next: bool = Field(alias="hasNext")
    has_prev: bool = Field(alias="hasPrev")

    class Config:
        populate_by_name = True


class SearchFilters(BaseModel):
    """Normalized filters echoed back to the caller"""
    category: Optional[str] = None
    min_price: Optional[float] = Field(None, alias="minPrice")
    max_price: Optional[float] = Field(None, alias="maxPrice")
    brand: Optional[str] = None
    sort: SortMode = SortMode.relevance

    class Config:
        populate_by_name = True


class ProductSearchResponse(BaseModel):
    """Product search response"""
    products: List[ProductRecord]
    pagination: PaginationSchema
    query: str = ""
    filters: SearchFilters


class ProductSuggestion(BaseModel):
    """Autocomplete product entry"""
    product_id: Union[int, UUID, str]
    title: str
    review_count: Optional[int] = 0
    category_name: Optional[str] = None
    brand: Optional[str] = None
    display_price: Optional[float] = None


class CategorySuggestion(BaseModel):
    """Autocomplete category entry with matching product count"""
    category_name: str
    count: int


class SuggestionResponse(BaseModel):
    """Autocomplete response"""
    products: List[ProductSuggestion]
    categories: List[CategorySuggestion]

    class Config:
        extra = "forbid"


class EmptySuggestionResponse(BaseModel):
    """Returned when the fragment is too short to look up"""
    suggestions: List[Any] = []

    class Config:
        extra = "forbid"
