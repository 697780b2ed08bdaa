"""
Configuration module for the form relay API.

Manages environment variables and third-party service settings.
All credentials are loaded from environment variables; nothing here
has a secret default. Empty values are treated as unset so that a
blank line in a deployment dashboard doesn't pass the presence checks.

ENVIRONMENT defaults to production, which keeps upstream error detail
out of responses; set it to development locally to see that detail.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_HTTP_TIMEOUT = 10.0


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Read an environment variable, treating blank values as unset."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_timeout(name: str, default: float) -> float:
    """
    Read a timeout in seconds, falling back to the default when the value
    is not a positive number.
    """
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not a number, using {default}")
        return default
    if not value > 0:
        logger.warning(f"Ignoring {name}={raw!r}: must be positive, using {default}")
        return default
    return value


@dataclass(frozen=True)
class AirtableConfig:
    """
    Immutable configuration for the Airtable record store.

    Attributes:
        api_url: Base URL of the Airtable REST API
        pat: Personal access token
        base_id: Base (account) identifier, redacted from logs
        table_id: Application table id (preferred)
        table_name: Application table name (fallback)
        merch_table_id: Merch waitlist table id
    """
    api_url: str
    pat: Optional[str] = None
    base_id: Optional[str] = None
    table_id: Optional[str] = None
    table_name: Optional[str] = None
    merch_table_id: Optional[str] = None

    @property
    def headers(self) -> dict[str, str]:
        """Returns the authorization headers for the Airtable API."""
        return {
            "Authorization": f"Bearer {self.pat}",
            "Content-Type": "application/json"
        }


@dataclass(frozen=True)
class SlackConfig:
    """
    Incoming webhook URLs for chat notifications.

    Attributes:
        webhook_url: Channel for community applications
        merch_webhook_url: Channel for merch waitlist signups
    """
    webhook_url: Optional[str] = None
    merch_webhook_url: Optional[str] = None


@dataclass(frozen=True)
class ResendConfig:
    """
    Configuration for the Resend transactional email API.

    Attributes:
        api_url: Base URL of the Resend API
        api_key: Resend API key
        from_email: Sender address for confirmation emails
        reply_to_email: Optional reply-to address
    """
    api_url: str
    api_key: Optional[str] = None
    from_email: Optional[str] = None
    reply_to_email: Optional[str] = None

    @property
    def enabled(self) -> bool:
        """Confirmation emails need both a key and a sender."""
        return bool(self.api_key and self.from_email)

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }


@dataclass(frozen=True)
class EmailOctopusConfig:
    """
    Configuration for the EmailOctopus newsletter list.

    Attributes:
        api_url: Base URL of the EmailOctopus API
        api_key: EmailOctopus API key (sent in the request body)
        list_id: Target list identifier
    """
    api_url: str
    api_key: Optional[str] = None
    list_id: Optional[str] = None


@dataclass(frozen=True)
class UpstashConfig:
    """
    Optional Upstash Redis connection used as a shared rate-limit store.

    Attributes:
        rest_url: The Upstash Redis REST API endpoint
        rest_token: Authentication token for Upstash Redis
    """
    rest_url: str
    rest_token: str

    @property
    def headers(self) -> dict[str, str]:
        """Returns the authorization headers for Upstash REST API."""
        return {
            "Authorization": f"Bearer {self.rest_token}",
            "Content-Type": "application/json"
        }


class Settings:
    """
    Central settings manager that aggregates all configuration.

    Loads configuration from environment variables at construction
    time. Routes receive the instance through the ``get_settings``
    dependency so tests can swap in a freshly built one.
    """

    def __init__(self):
        self.environment = _env("ENVIRONMENT", "production").lower()

        self.airtable = AirtableConfig(
            api_url=_env("AIRTABLE_API_URL", "https://api.airtable.com/v0").rstrip("/"),
            pat=_env("AIRTABLE_PAT"),
            base_id=_env("AIRTABLE_BASE_ID"),
            table_id=_env("AIRTABLE_TABLE_ID"),
            table_name=_env("AIRTABLE_TABLE_NAME"),
            merch_table_id=_env("AIRTABLE_MERCH_TABLE_ID")
        )

        self.slack = SlackConfig(
            webhook_url=_env("SLACK_WEBHOOK_URL"),
            merch_webhook_url=_env("SLACK_MERCH_WEBHOOK_URL")
        )

        self.resend = ResendConfig(
            api_url=_env("RESEND_API_URL", "https://api.resend.com").rstrip("/"),
            api_key=_env("RESEND_API_KEY"),
            from_email=_env("FROM_EMAIL"),
            reply_to_email=_env("REPLY_TO_EMAIL")
        )

        self.emailoctopus = EmailOctopusConfig(
            api_url=_env("EMAILOCTOPUS_API_URL", "https://emailoctopus.com/api/1.6").rstrip("/"),
            api_key=_env("EMAILOCTOPUS_API_KEY"),
            list_id=_env("EMAILOCTOPUS_LIST_ID")
        )

        # Shared rate limiting is only enabled when both values are set
        rest_url = _env("UPSTASH_REDIS_REST_URL")
        rest_token = _env("UPSTASH_REDIS_REST_TOKEN")
        self.upstash: Optional[UpstashConfig] = None
        if rest_url and rest_token:
            self.upstash = UpstashConfig(rest_url=rest_url.rstrip("/"), rest_token=rest_token)

        self.site_name = _env("SITE_NAME", "The Tech Bros")
        self.site_url = _env("SITE_URL", "https://thetechbros.io")
        self.cors_allow_origins = [
            origin.strip()
            for origin in (_env("CORS_ALLOW_ORIGINS", "") or "").split(",")
            if origin.strip()
        ]
        self.http_timeout = _env_timeout("HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)

        # Passed to uvicorn; proxies outside this list can't set the client scheme
        self.forwarded_allow_ips = _env("FORWARDED_ALLOW_IPS", "127.0.0.1")

    @property
    def is_production(self) -> bool:
        """True when upstream error detail must stay out of responses."""
        return self.environment == "production"

    @property
    def server_port(self) -> int:
        """Server port from environment variable."""
        return int(os.getenv("PORT", "8000"))

    @property
    def log_level(self) -> str:
        return (_env("LOG_LEVEL", "INFO") or "INFO").upper()

    @property
    def api_title(self) -> str:
        """API title for OpenAPI documentation."""
        return "Form Relay API"

    @property
    def api_version(self) -> str:
        """API version string."""
        return "1.0.0"

    @property
    def api_description(self) -> str:
        """API description for OpenAPI documentation."""
        return (
            "Server-side handlers for the marketing site's forms: validates "
            "submissions and relays them to Airtable, EmailOctopus, Slack and Resend."
        )

    def presence(self) -> dict[str, bool]:
        """
        Report which settings are present, never their values.

        Used for the startup banner.
        """
        return {
            "AIRTABLE_PAT": bool(self.airtable.pat),
            "AIRTABLE_BASE_ID": bool(self.airtable.base_id),
            "AIRTABLE_TABLE_ID": bool(self.airtable.table_id),
            "AIRTABLE_TABLE_NAME": bool(self.airtable.table_name),
            "AIRTABLE_MERCH_TABLE_ID": bool(self.airtable.merch_table_id),
            "SLACK_WEBHOOK_URL": bool(self.slack.webhook_url),
            "SLACK_MERCH_WEBHOOK_URL": bool(self.slack.merch_webhook_url),
            "RESEND_API_KEY": bool(self.resend.api_key),
            "FROM_EMAIL": bool(self.resend.from_email),
            "REPLY_TO_EMAIL": bool(self.resend.reply_to_email),
            "EMAILOCTOPUS_API_KEY": bool(self.emailoctopus.api_key),
            "EMAILOCTOPUS_LIST_ID": bool(self.emailoctopus.list_id),
            "UPSTASH_REDIS_REST_URL": self.upstash is not None,
        }


# Global settings instance - imported throughout the application
settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process-wide settings."""
    return settings
