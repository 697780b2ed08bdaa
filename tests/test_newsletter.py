"""Tests for the newsletter endpoints.

Both variants write to EmailOctopus, drop honeypot submissions and
share the same 5-per-minute rate limit, each with its own table. The
named variant also requires first/last name and exposes upstream
detail outside production.
"""

import json

import pytest

from tests.conftest import EMAILOCTOPUS_CONTACTS_URL

SUBSCRIBE = "/api/newsletter/subscribe"
SIGNUP = "/api/newsletter/signup"

NAMED_BODY = {"email": "ada@example.com", "firstName": "Ada", "lastName": "Lovelace"}


def sent_contact(request) -> dict:
    return json.loads(request.content)


# =============================================================================
# Minimal Variant
# =============================================================================


class TestSubscribe:
    """POST /api/newsletter/subscribe."""

    def test_subscribe_creates_contact(self, client, httpx_mock):
        httpx_mock.add_response(url=EMAILOCTOPUS_CONTACTS_URL, json={"id": "contact-1"})

        response = client.post(SUBSCRIBE, json={"email": "a@b.com"})

        assert response.status_code == 200
        assert response.json() == {"success": True}
        contact = sent_contact(httpx_mock.get_request())
        assert contact == {
            "api_key": "eo-test-key",
            "email_address": "a@b.com",
            "fields": {"SignupSource": "website_newsletter"},
        }

    def test_email_is_trimmed(self, client, httpx_mock):
        httpx_mock.add_response(url=EMAILOCTOPUS_CONTACTS_URL, json={"id": "contact-1"})

        client.post(SUBSCRIBE, json={"email": "  a@b.com "})

        assert sent_contact(httpx_mock.get_request())["email_address"] == "a@b.com"

    def test_missing_email(self, client, httpx_mock):
        response = client.post(SUBSCRIBE, json={})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Email is required"}
        assert httpx_mock.get_requests() == []

    def test_invalid_email(self, client, httpx_mock):
        response = client.post(SUBSCRIBE, json={"email": "not-an-email"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid email format"}

    def test_invalid_json(self, client, httpx_mock):
        response = client.post(
            SUBSCRIBE, content="email=a@b.com", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid JSON"}

    def test_deeply_nested_body_is_invalid_json(self, client, httpx_mock):
        response = client.post(
            SUBSCRIBE,
            content="[" * 100000 + "]" * 100000,
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid JSON"}
        assert httpx_mock.get_requests() == []

    def test_honeypot_is_silently_accepted(self, client, httpx_mock):
        response = client.post(SUBSCRIBE, json={"email": "bot@spam.com", "company": "Acme"})

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert httpx_mock.get_requests() == []

    def test_blank_honeypot_is_ignored(self, client, httpx_mock):
        httpx_mock.add_response(url=EMAILOCTOPUS_CONTACTS_URL, json={"id": "contact-1"})

        response = client.post(SUBSCRIBE, json={"email": "a@b.com", "company": "   "})

        assert response.status_code == 200
        assert len(httpx_mock.get_requests()) == 1

    def test_missing_configuration(self, client, env, httpx_mock):
        env.delenv("EMAILOCTOPUS_LIST_ID")

        response = client.post(SUBSCRIBE, json={"email": "a@b.com"})

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "Server configuration error",
            "missing": ["EMAILOCTOPUS_LIST_ID"],
        }

    @pytest.mark.parametrize(
        "message",
        [
            "Contact is already subscribed.",
            "Contact is already pending.",
            "The email address is already on the list.",
        ],
    )
    def test_existing_contact_counts_as_success(self, client, httpx_mock, message):
        httpx_mock.add_response(
            url=EMAILOCTOPUS_CONTACTS_URL,
            status_code=409,
            json={"error": {"code": "MEMBER_EXISTS_WITH_EMAIL_ADDRESS", "message": message}},
        )

        response = client.post(SUBSCRIBE, json={"email": "a@b.com"})

        assert response.status_code == 200
        assert response.json() == {"success": True}

    def test_upstream_failure_hides_detail(self, client, httpx_mock):
        httpx_mock.add_response(
            url=EMAILOCTOPUS_CONTACTS_URL,
            status_code=403,
            json={"error": {"code": "INVALID_API_KEY", "message": "Your API key is invalid."}},
        )

        response = client.post(SUBSCRIBE, json={"email": "a@b.com"})

        assert response.status_code == 502
        assert response.json() == {
            "success": False,
            "error": "Failed to subscribe. Please try again later.",
        }


# =============================================================================
# Named Variant
# =============================================================================


class TestSignup:
    """POST /api/newsletter/signup."""

    def test_signup_sends_names(self, client, httpx_mock):
        httpx_mock.add_response(url=EMAILOCTOPUS_CONTACTS_URL, json={"id": "contact-1"})

        response = client.post(SIGNUP, json={**NAMED_BODY, "firstName": " Ada "})

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert sent_contact(httpx_mock.get_request())["fields"] == {
            "FirstName": "Ada",
            "LastName": "Lovelace",
            "SignupSource": "website_newsletter_named",
        }

    @pytest.mark.parametrize(
        "missing, message",
        [
            ("email", "Email is required"),
            ("firstName", "First name is required"),
            ("lastName", "Last name is required"),
        ],
    )
    def test_required_fields(self, client, httpx_mock, missing, message):
        body = {key: value for key, value in NAMED_BODY.items() if key != missing}

        response = client.post(SIGNUP, json=body)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": message}
        assert httpx_mock.get_requests() == []

    def test_upstream_detail_outside_production(self, client, httpx_mock):
        upstream_body = {"error": {"code": "INVALID_PARAMETERS", "message": "Bad field."}}
        httpx_mock.add_response(url=EMAILOCTOPUS_CONTACTS_URL, status_code=400, json=upstream_body)

        response = client.post(SIGNUP, json=NAMED_BODY)

        assert response.status_code == 502
        data = response.json()
        assert data["success"] is False
        assert "upstreamStatus and upstreamBody" in data["error"]
        assert data["upstreamStatus"] == 400
        assert data["upstreamBody"] == upstream_body

    def test_upstream_detail_hidden_in_production(self, client, env, httpx_mock):
        env.setenv("ENVIRONMENT", "production")
        httpx_mock.add_response(
            url=EMAILOCTOPUS_CONTACTS_URL,
            status_code=400,
            json={"error": {"code": "INVALID_PARAMETERS", "message": "Bad field."}},
        )

        response = client.post(SIGNUP, json=NAMED_BODY)

        assert response.status_code == 502
        assert response.json() == {
            "success": False,
            "error": "Failed to subscribe. Please try again later.",
        }

    def test_honeypot_is_silently_accepted(self, client, httpx_mock):
        response = client.post(SIGNUP, json={**NAMED_BODY, "company": "Acme"})

        assert response.status_code == 200
        assert httpx_mock.get_requests() == []


# =============================================================================
# Rate Limiting
# =============================================================================


class TestRateLimiting:
    """Five submissions per client per minute."""

    def test_sixth_request_is_rejected(self, client, httpx_mock):
        for _ in range(5):
            httpx_mock.add_response(url=EMAILOCTOPUS_CONTACTS_URL, json={"id": "contact"})
        headers = {"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}

        statuses = [
            client.post(SUBSCRIBE, json={"email": "a@b.com"}, headers=headers).status_code
            for _ in range(6)
        ]

        assert statuses == [200, 200, 200, 200, 200, 429]
        assert len(httpx_mock.get_requests()) == 5

    def test_rejection_body(self, client, httpx_mock):
        for _ in range(5):
            httpx_mock.add_response(url=EMAILOCTOPUS_CONTACTS_URL, json={"id": "contact"})
        for _ in range(5):
            client.post(SUBSCRIBE, json={"email": "a@b.com"})

        response = client.post(SUBSCRIBE, json={"email": "a@b.com"})

        assert response.status_code == 429
        assert response.json() == {
            "success": False,
            "error": "Too many requests. Please try again later.",
        }

    def test_clients_are_limited_separately(self, client, httpx_mock):
        for _ in range(6):
            httpx_mock.add_response(url=EMAILOCTOPUS_CONTACTS_URL, json={"id": "contact"})
        for _ in range(5):
            client.post(SUBSCRIBE, json={"email": "a@b.com"}, headers={"X-Forwarded-For": "203.0.113.7"})

        response = client.post(
            SUBSCRIBE, json={"email": "a@b.com"}, headers={"X-Forwarded-For": "198.51.100.2"}
        )

        assert response.status_code == 200

    def test_variants_have_separate_tables(self, client, httpx_mock):
        for _ in range(6):
            httpx_mock.add_response(url=EMAILOCTOPUS_CONTACTS_URL, json={"id": "contact"})
        for _ in range(5):
            client.post(SUBSCRIBE, json={"email": "a@b.com"})

        response = client.post(SIGNUP, json=NAMED_BODY)

        assert response.status_code == 200

    def test_invalid_submissions_are_not_counted(self, client, httpx_mock):
        httpx_mock.add_response(url=EMAILOCTOPUS_CONTACTS_URL, json={"id": "contact"})
        for _ in range(10):
            client.post(SUBSCRIBE, json={"email": "nope"})

        response = client.post(SUBSCRIBE, json={"email": "a@b.com"})

        assert response.status_code == 200

    def test_honeypot_is_not_counted(self, client, httpx_mock):
        httpx_mock.add_response(url=EMAILOCTOPUS_CONTACTS_URL, json={"id": "contact"})
        for _ in range(10):
            client.post(SUBSCRIBE, json={"email": "a@b.com", "company": "Acme"})

        response = client.post(SUBSCRIBE, json={"email": "a@b.com"})

        assert response.status_code == 200


@pytest.mark.parametrize("path", [SUBSCRIBE, SIGNUP])
def test_get_not_allowed(client, path):
    response = client.get(path)

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}
