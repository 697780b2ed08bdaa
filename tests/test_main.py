"""Tests for the application shell: root, health and error handlers."""

from tests.conftest import UPSTASH_URL


def test_root_lists_endpoints(client):
    response = client.get("/")

    assert response.status_code == 200
    endpoints = response.json()["endpoints"]
    assert endpoints["community_apply"] == "POST /api/community-apply"
    assert endpoints["merch_waitlist"] == "POST /api/merch/waitlist"


def test_health_with_memory_store(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["rate_limit_backend"] == "memory"
    assert data["rate_limit_connected"] is True


def test_health_degraded_when_upstash_down(client, env, httpx_mock):
    env.setenv("UPSTASH_REDIS_REST_URL", UPSTASH_URL)
    env.setenv("UPSTASH_REDIS_REST_TOKEN", "upstash-token")
    httpx_mock.add_response(url=UPSTASH_URL, status_code=503)

    response = client.get("/health")

    data = response.json()
    assert data["status"] == "degraded"
    assert data["rate_limit_backend"] == "upstash"
    assert data["rate_limit_connected"] is False


def test_unknown_path(client):
    response = client.get("/api/unknown")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}
