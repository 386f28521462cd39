"""Tests for application-wide behaviour: health, metrics, headers, errors."""

from gitolink.core.observability import normalize_endpoint


async def test_health(client):
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


async def test_metrics_exposed(client):
    await client.get("/api/v1/health")

    response = await client.get("/metrics")

    assert response.status_code == 200
    assert "http_requests_total" in response.text
    assert "clicks_recorded_total" in response.text


async def test_security_and_request_id_headers(client):
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


async def test_unknown_route_uses_error_shape(client):
    response = await client.get("/api/v1/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_normalize_endpoint_collapses_ids_and_usernames():
    assert (
        normalize_endpoint("/api/v1/links/2f1c7a52-6f0a-4c0e-9a55-0c6f1b3c2d10/analytics")
        == "/api/v1/links/{id}/analytics"
    )
    assert normalize_endpoint("/api/v1/profiles/alice/clicks") == "/api/v1/profiles/{username}/clicks"
