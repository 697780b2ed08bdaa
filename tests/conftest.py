"""
Pytest configuration and shared fixtures.

Settings are rebuilt from the environment on every request through a
dependency override, so each test controls configuration with
``monkeypatch``. Outbound HTTP is intercepted with pytest-httpx.
"""

import pytest
from fastapi.testclient import TestClient

from formrelay.api import routes
from formrelay.core.config import Settings, get_settings
from formrelay.main import app


AIRTABLE_BASE_ID = "appBASE123"
APPLICATION_TABLE_URL = f"https://api.airtable.com/v0/{AIRTABLE_BASE_ID}/tblApplications"
MERCH_TABLE_URL = f"https://api.airtable.com/v0/{AIRTABLE_BASE_ID}/tblMerch"
EMAILOCTOPUS_CONTACTS_URL = "https://emailoctopus.com/api/1.6/lists/list-123/contacts"
SLACK_WEBHOOK_URL = "https://hooks.slack.com/services/T000/B000/apps"
SLACK_MERCH_WEBHOOK_URL = "https://hooks.slack.com/services/T000/B000/merch"
RESEND_EMAILS_URL = "https://api.resend.com/emails"
UPSTASH_URL = "https://test-redis.upstash.io"

ALL_SETTINGS = (
    "ENVIRONMENT",
    "AIRTABLE_API_URL",
    "AIRTABLE_PAT",
    "AIRTABLE_BASE_ID",
    "AIRTABLE_TABLE_ID",
    "AIRTABLE_TABLE_NAME",
    "AIRTABLE_MERCH_TABLE_ID",
    "SLACK_WEBHOOK_URL",
    "SLACK_MERCH_WEBHOOK_URL",
    "RESEND_API_URL",
    "RESEND_API_KEY",
    "FROM_EMAIL",
    "REPLY_TO_EMAIL",
    "EMAILOCTOPUS_API_URL",
    "EMAILOCTOPUS_API_KEY",
    "EMAILOCTOPUS_LIST_ID",
    "UPSTASH_REDIS_REST_URL",
    "UPSTASH_REDIS_REST_TOKEN",
    "SITE_NAME",
    "SITE_URL",
    "HTTP_TIMEOUT",
    "FORWARDED_ALLOW_IPS",
)


@pytest.fixture
def env(monkeypatch):
    """Minimal valid configuration for every endpoint, no notifications."""
    for name in ALL_SETTINGS:
        monkeypatch.delenv(name, raising=False)

    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("AIRTABLE_PAT", "pat-test-token")
    monkeypatch.setenv("AIRTABLE_BASE_ID", AIRTABLE_BASE_ID)
    monkeypatch.setenv("AIRTABLE_TABLE_ID", "tblApplications")
    monkeypatch.setenv("AIRTABLE_MERCH_TABLE_ID", "tblMerch")
    monkeypatch.setenv("EMAILOCTOPUS_API_KEY", "eo-test-key")
    monkeypatch.setenv("EMAILOCTOPUS_LIST_ID", "list-123")
    return monkeypatch


@pytest.fixture
def client(env):
    """TestClient with per-request settings and fresh rate-limit tables."""
    app.dependency_overrides[get_settings] = lambda: Settings()
    for pipeline in routes.PIPELINES.values():
        if pipeline.memory_limiter is not None:
            pipeline.memory_limiter.reset()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
