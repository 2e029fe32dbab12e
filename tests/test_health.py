# tests/test_health.py

from __future__ import annotations

from fastapi.testclient import TestClient

from product_catalog.core.deps import get_product_service
from product_catalog.main import app


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200

    data = r.json()
    assert data["status"] == "ok"
    assert data["service"] == "product-catalog-api"
    assert data["version"] == "0.1.0"
    assert data["env"] == "test"


def test_response_carries_request_id(client):
    r = client.get("/health")
    assert r.headers.get("X-Request-Id")


def test_request_id_is_echoed(client):
    r = client.get("/health", headers={"X-Request-Id": "req-123"})
    assert r.headers["X-Request-Id"] == "req-123"


def test_openapi_exposes_products_routes(client):
    r = client.get("/openapi.json")
    assert r.status_code == 200, r.text
    paths = r.json().get("paths", {})
    assert "/products" in paths, f"available paths: {sorted(paths)}"
    assert "/products/{product_id}" in paths


def test_unexpected_error_keeps_request_id_header():
    def broken_service():
        raise RuntimeError("boom")

    app.dependency_overrides[get_product_service] = broken_service
    try:
        r = TestClient(app, raise_server_exceptions=False).get("/products", headers={"X-Request-Id": "req-500"})
    finally:
        app.dependency_overrides.clear()

    assert r.status_code == 500
    assert r.json() == {"detail": "Unexpected error", "requestId": "req-500"}
    assert r.headers["X-Request-Id"] == "req-500"
