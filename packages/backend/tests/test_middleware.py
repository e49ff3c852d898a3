"""Tests for middleware — security headers, request IDs, error envelope."""

import pytest


@pytest.mark.asyncio
async def test_security_headers_on_health(client):
    """Health endpoint returns security headers."""
    r = await client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"


@pytest.mark.asyncio
async def test_api_responses_not_cached(client):
    r = await client.get("/api/v1/health")
    assert r.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
async def test_request_id_generated(client):
    """Each request gets a unique X-Request-ID header."""
    r1 = await client.get("/api/v1/health")
    r2 = await client.get("/api/v1/health")
    assert "X-Request-ID" in r1.headers
    assert "X-Request-ID" in r2.headers
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    """Incoming X-Request-ID is propagated through the response."""
    custom_id = "test-trace-12345"
    r = await client.get("/api/v1/health", headers={"X-Request-ID": custom_id})
    assert r.headers["X-Request-ID"] == custom_id


@pytest.mark.asyncio
async def test_malformed_request_id_replaced(client):
    """A request ID with unsafe characters is swapped for a generated one."""
    r = await client.get("/api/v1/health", headers={"X-Request-ID": "bad id;drop"})
    assert r.headers["X-Request-ID"] != "bad id;drop"
    assert len(r.headers["X-Request-ID"]) == 32


@pytest.mark.asyncio
async def test_no_hsts_on_http(client):
    """HSTS header is NOT set on HTTP connections (only HTTPS)."""
    r = await client.get("/api/v1/health")
    assert "Strict-Transport-Security" not in r.headers


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client):
    r = await client.get("/api/v1/nope")
    assert r.status_code == 404
    body = r.json()
    assert body["success"] is False
    assert body["data"] is None
    assert body["status_code"] == 404


@pytest.mark.asyncio
async def test_validation_error_is_400(client):
    """Malformed bodies come back as 400 with per-field errors."""
    r = await client.post("/api/v1/users/login", json={"password": "x"})
    assert r.status_code == 400
    body = r.json()
    assert body["message"] == "Invalid input"
    assert body["errors"]
