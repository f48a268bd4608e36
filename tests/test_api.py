"""Tests for the recommendation HTTP endpoints."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

from conftest import NOW, FakeCatalog, FakeInteractions, make_product
from storefront_reco.api.deps import engine_dep
from storefront_reco.domain.services.engine import RecommendationEngine
from storefront_reco.main import app
from storefront_reco.utils.network import client_ip_address

client = TestClient(app)


@pytest.fixture
def stores():
    catalog = FakeCatalog([
        make_product(1, category_id=7, price=100.0),
        make_product(2, category_id=7, price=130.0),
        make_product(3, category_id=7, price=120.0),
        make_product(4, category_id=8, price=300.0, color="red"),
    ])
    interactions = FakeInteractions()
    for order_id in (1, 2, 3):
        interactions.order(order_id, 1, 2)
    interactions.review(1, 5)
    interactions.review(2, 4)
    interactions.view(1, ip_address="203.0.113.5")
    interactions.view(1, user_id=50, at=NOW - timedelta(days=1))
    interactions.view(4, user_id=50, at=NOW - timedelta(hours=1))
    return catalog, interactions


@pytest.fixture
def api(stores):
    catalog, interactions = stores
    app.dependency_overrides[engine_dep] = lambda: RecommendationEngine(catalog, interactions)
    yield client
    app.dependency_overrides.clear()


def _ids(response):
    return [item["product_id"] for item in response.json()["items"]]


def test_frequently_bought_together(api):
    response = api.get("/api/recommendations/frequently-bought-together/1")

    assert response.status_code == 200
    data = response.json()
    assert data["kind"] == "frequently-bought"
    assert data["source_product_id"] == 1
    assert data["count"] == 1
    assert _ids(response) == [2]


def test_similar_orders_by_price(api):
    response = api.get("/api/recommendations/similar/1?limit=2")

    assert response.status_code == 200
    assert _ids(response) == [3, 2]


def test_category_and_rating(api):
    assert _ids(api.get("/api/recommendations/category/1")) == [2, 3]
    assert _ids(api.get("/api/recommendations/rating/1?limit=1")) == [2]


def test_trending_returns_recently_viewed_products(api):
    response = api.get("/api/recommendations/trending?limit=5")

    assert response.status_code == 200
    assert response.json()["count"] <= 5


def test_browsing_history_uses_forwarded_address(api):
    response = api.get(
        "/api/recommendations/browsing-history",
        headers={"X-Forwarded-For": "203.0.113.5, 10.0.0.1"},
    )

    assert response.status_code == 200
    assert _ids(response) == [4]


def test_browsing_history_unknown_viewer_is_empty(api):
    response = api.get("/api/recommendations/browsing-history?user_id=777")

    assert response.status_code == 200
    assert response.json() == {
        "kind": "browsing-history",
        "source_product_id": None,
        "items": [],
        "count": 0,
        "scores": None,
    }


def test_mixed_with_scores(api):
    response = api.get("/api/recommendations/mixed/1?include_scores=true")

    assert response.status_code == 200
    data = response.json()
    assert data["items"][0]["product_id"] == 2
    scores = {s["product_id"]: s["score"] for s in data["scores"]}
    # co-purchase + rating affinity + similarity + category fallback
    assert scores[2] == 3.0 + 2.5 + 1.5 + 1.0
    assert 1 not in scores


def test_limit_is_validated(api):
    assert api.get("/api/recommendations/similar/1?limit=0").status_code == 422
    assert api.get("/api/recommendations/trending?limit=51").status_code == 422


def test_store_unavailable_returns_503():
    response = client.get("/api/recommendations/similar/1")

    assert response.status_code == 503
    data = response.json()
    assert data["error"] == "StoreUnavailableError"
    assert data["details"] == {"store": "mongodb"}


def _request(headers=None, peer=("192.0.2.10", 5000)):
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": peer,
    }
    return Request(scope)


def test_client_ip_prefers_first_forwarded_hop():
    request = _request({"X-Forwarded-For": "198.51.100.1, 10.0.0.2", "X-Real-IP": "10.9.9.9"})

    assert client_ip_address(request) == "198.51.100.1"


def test_client_ip_skips_unknown_and_falls_back():
    assert client_ip_address(_request({"X-Forwarded-For": "unknown", "X-Real-IP": "10.9.9.9"})) == "10.9.9.9"
    assert client_ip_address(_request({"X-Client-IP": "10.1.1.1"})) == "10.1.1.1"
    assert client_ip_address(_request()) == "192.0.2.10"
    assert client_ip_address(_request(peer=None)) is None


def test_health_reports_missing_stores():
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "error"
    assert data["checks"]["mongodb"].startswith("error")
    assert data["checks"]["redis"] == "skipped"
    assert data["cache"] == "disabled"
    assert "mixed" in data["kinds"]
