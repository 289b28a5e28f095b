"""
Tests for the product search API endpoints.

The router is mounted on a bare FastAPI app and the catalog store dependency
is overridden with an in-memory fake, so no database is needed. Assertions are
made on the JSON contract and on the SQL/parameters that reach the store.
"""
import uuid

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.database import get_catalog_store
from fakes import FakeCatalogStore
from routers.products import router

SEARCH_URL = "/api/products/search"
SUGGEST_URL = "/api/products/search/suggestions"


def make_client(store):
    app = FastAPI()
    app.include_router(router, prefix="/api")
    app.dependency_overrides[get_catalog_store] = lambda: store
    return TestClient(app)


def page_call(store):
    return next(call for call in store.calls if call["kind"] == "all")


def count_call(store):
    return next(call for call in store.calls if call["kind"] == "scalar")


@pytest.fixture
def client(fake_store):
    return make_client(fake_store)


class TestSearchContract:
    def test_response_shape(self, client):
        response = client.get(SEARCH_URL, params={"q": "iphone"})

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"products", "pagination", "query", "filters"}
        assert data["pagination"] == {
            "total": 3,
            "page": 1,
            "limit": 12,
            "totalPages": 1,
            "hasNext": False,
            "hasPrev": False,
        }
        assert data["query"] == "iphone"
        assert data["products"][0]["product_id"] == 101
        assert data["products"][0]["specs"]["brand"] == "Apple"
        assert data["products"][0]["seller_name"] == "Gadget World"

    def test_scenario_text_search_ranks_by_relevance(self, client, fake_store):
        client.get(SEARCH_URL, params={"q": "iphone", "page": "1", "limit": "12"})

        page = page_call(fake_store)
        count = count_call(fake_store)
        assert "ORDER BY ts_rank(" in page["sql"]
        assert "p.review_count DESC" in page["sql"]
        assert page["params"] == ["iphone", "%iphone%", "iphone", 12, 0]
        assert "OR p.title ILIKE :p2" in count["sql"]
        assert count["params"] == ["iphone", "%iphone%"]

    def test_scenario_price_range_sorted_cheapest_first(self, client, fake_store):
        response = client.get(
            SEARCH_URL, params={"sort": "price-low", "minPrice": "5000", "maxPrice": "100000"}
        )

        page = page_call(fake_store)
        assert "COALESCE(p.sale_price, p.price) >= :p1" in page["sql"]
        assert "COALESCE(p.sale_price, p.price) <= :p2" in page["sql"]
        assert "ORDER BY COALESCE(p.sale_price, p.price) ASC" in page["sql"]
        assert page["params"] == [5000.0, 100000.0, 12, 0]
        filters = response.json()["filters"]
        assert filters["minPrice"] == 5000.0
        assert filters["maxPrice"] == 100000.0
        assert filters["sort"] == "price-low"

    def test_scenario_category_is_substring_match(self, client, fake_store):
        client.get(SEARCH_URL, params={"category": "Phone"})

        page = page_call(fake_store)
        assert "c.name ILIKE :p1" in page["sql"]
        assert page["params"][0] == "%Phone%"

    def test_scenario_pagination_is_clamped(self, client, fake_store):
        response = client.get(SEARCH_URL, params={"page": "0", "limit": "1000"})

        assert response.status_code == 200
        pagination = response.json()["pagination"]
        assert pagination["page"] == 1
        assert pagination["limit"] == 50
        assert page_call(fake_store)["params"][-2:] == [50, 0]

    def test_scenario_no_filters_lists_newest_first(self, client, fake_store):
        response = client.get(SEARCH_URL)

        page = page_call(fake_store)
        assert "WHERE" not in page["sql"]
        assert "ORDER BY p.created_at DESC" in page["sql"]
        data = response.json()
        assert data["query"] == ""
        assert data["filters"] == {
            "category": None,
            "minPrice": None,
            "maxPrice": None,
            "brand": None,
            "sort": "relevance",
        }

    def test_explicit_sort_overrides_relevance(self, client, fake_store):
        client.get(SEARCH_URL, params={"q": "iphone", "sort": "popularity"})

        page = page_call(fake_store)
        assert "ts_rank" not in page["sql"]
        assert "ORDER BY p.review_count DESC, p.rating DESC" in page["sql"]

    def test_all_category_and_brand_are_ignored(self, client, fake_store):
        response = client.get(SEARCH_URL, params={"category": "all", "brand": "all"})

        assert "WHERE" not in page_call(fake_store)["sql"]
        assert response.json()["filters"]["category"] is None


class TestLenientInput:
    @pytest.mark.parametrize(
        "params",
        [
            {"page": "abc", "limit": "-5"},
            {"minPrice": "cheap", "maxPrice": ""},
            {"sort": "whatever"},
            {"limit": "12.5", "page": "2.9"},
        ],
    )
    def test_malformed_input_never_errors(self, client, params):
        assert client.get(SEARCH_URL, params=params).status_code == 200

    def test_unknown_sort_orders_by_newest(self, client, fake_store):
        response = client.get(SEARCH_URL, params={"sort": "whatever"})

        assert "ORDER BY p.created_at DESC" in page_call(fake_store)["sql"]
        assert response.json()["filters"]["sort"] == "newest"


class TestResults:
    def test_zero_matches_is_not_an_error(self, empty_store):
        response = make_client(empty_store).get(SEARCH_URL, params={"q": "nothing-matches"})

        assert response.status_code == 200
        data = response.json()
        assert data["products"] == []
        assert data["pagination"]["total"] == 0
        assert data["pagination"]["totalPages"] == 0
        assert data["pagination"]["hasNext"] is False

    def test_uuid_keys_are_returned_as_strings(self, sample_rows):
        product_id, category_id = uuid.uuid4(), uuid.uuid4()
        row = dict(sample_rows[0], product_id=product_id, category_id=category_id)
        response = make_client(FakeCatalogStore(rows=[row], total=1)).get(SEARCH_URL, params={"q": "iphone"})

        assert response.status_code == 200
        product = response.json()["products"][0]
        assert product["product_id"] == str(product_id)
        assert product["category_id"] == str(category_id)

    def test_null_columns_do_not_fail_the_page(self, sample_rows):
        row = dict(sample_rows[1], price=None, review_count=None, rating=None, specs=None)
        store = FakeCatalogStore(rows=[row, sample_rows[0]], total=2)
        response = make_client(store).get(SEARCH_URL)

        assert response.status_code == 200
        products = response.json()["products"]
        assert products[0]["price"] is None
        assert products[0]["review_count"] is None
        assert products[1]["review_count"] == 320

    def test_huge_page_number_still_answers(self, client, fake_store):
        response = client.get(SEARCH_URL, params={"page": "99999999999999999999"})

        assert response.status_code == 200
        offset = page_call(fake_store)["params"][-1]
        assert offset <= 2**63 - 1

    def test_pagination_flags_on_middle_page(self, sample_rows):
        store = FakeCatalogStore(rows=sample_rows, total=40)
        response = make_client(store).get(SEARCH_URL, params={"page": "2", "limit": "10"})

        assert response.json()["pagination"] == {
            "total": 40,
            "page": 2,
            "limit": 10,
            "totalPages": 4,
            "hasNext": True,
            "hasPrev": True,
        }

    def test_identical_requests_produce_identical_queries(self, client, fake_store):
        params = {"q": "iphone", "brand": "Apple", "sort": "rating", "page": "2"}
        first = client.get(SEARCH_URL, params=params).json()
        second = client.get(SEARCH_URL, params=params).json()

        assert first == second
        assert fake_store.calls[0:2] == fake_store.calls[2:4]

    def test_store_failure_is_an_opaque_500(self, sample_rows):
        store = FakeCatalogStore(rows=sample_rows, error=ConnectionError("db down at 10.0.0.5"), fail_on="COUNT(*)")
        response = make_client(store).get(SEARCH_URL, params={"q": "iphone"})

        assert response.status_code == 500
        assert response.json() == {"detail": "Error searching products"}


class TestSuggestionsEndpoint:
    def test_short_query_returns_empty_suggestions(self, fake_store):
        response = make_client(fake_store).get(SUGGEST_URL, params={"q": "i"})

        assert response.status_code == 200
        assert response.json() == {"suggestions": []}
        assert fake_store.calls == []

    def test_missing_query_returns_empty_suggestions(self, fake_store):
        assert make_client(fake_store).get(SUGGEST_URL).json() == {"suggestions": []}

    def test_returns_products_and_categories(self, fake_store):
        response = make_client(fake_store).get(SUGGEST_URL, params={"q": "iph"})

        assert response.status_code == 200
        data = response.json()
        assert data["products"][0] == {
            "product_id": 101,
            "title": "Apple iPhone 15 Pro",
            "review_count": 320,
            "category_name": "Smartphones",
            "brand": "Apple",
            "display_price": 149999.0,
        }
        assert data["categories"][1] == {"category_name": "Phones", "count": 18}

    def test_uuid_ids_and_null_review_counts_are_accepted(self):
        product_id = uuid.uuid4()
        store = FakeCatalogStore(
            suggestions=[{"product_id": product_id, "title": "iPhone 15", "review_count": None}],
            categories=[],
        )
        response = make_client(store).get(SUGGEST_URL, params={"q": "iph"})

        assert response.status_code == 200
        assert response.json()["products"][0]["product_id"] == str(product_id)
        assert response.json()["products"][0]["review_count"] is None

    def test_store_failure_is_an_opaque_500(self):
        store = FakeCatalogStore(error=RuntimeError("boom"))
        response = make_client(store).get(SUGGEST_URL, params={"q": "iphone"})

        assert response.status_code == 500
        assert response.json() == {"detail": "Error fetching search suggestions"}
