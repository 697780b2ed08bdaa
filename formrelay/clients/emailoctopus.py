"""
EmailOctopus Client - Adds newsletter subscribers to a list.

The API key travels in the request body, so request bodies are never
logged. Contacts that are already on the list are reported by
EmailOctopus as errors; those count as a successful subscription.
"""

import httpx
import logging
from typing import Any, Optional

from ..core.config import EmailOctopusConfig
from ..core.errors import UpstreamFailure
from ..core.utils import safe_json_loads

# Configure logging
logger = logging.getLogger(__name__)

ALREADY_SUBSCRIBED_MARKERS = (
    "already subscribed",
    "already pending",
    "is already on the list",
)


def _error_message(body: Any) -> str:
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return str(error.get("message") or "")
    return ""


class EmailOctopusClient:
    """Creates contacts on an EmailOctopus list."""

    def __init__(self, config: EmailOctopusConfig, timeout: float = 10.0):
        self.api_url = config.api_url
        self.api_key = config.api_key
        self.list_id = config.list_id
        self.timeout = timeout

    async def create_contact(
        self,
        email: str,
        fields: Optional[dict[str, str]] = None
    ) -> bool:
        """
        Subscribe ``email`` to the configured list.

        Returns:
            True when a new contact was created, False when the address
            was already on the list

        Raises:
            UpstreamFailure: any other non-2xx answer, carrying the
                upstream status and decoded body
        """
        url = f"{self.api_url}/lists/{self.list_id}/contacts"

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                url,
                headers={"Content-Type": "application/json"},
                json={
                    "api_key": self.api_key,
                    "email_address": email,
                    "fields": fields or {}
                }
            )

        if response.is_success:
            logger.info("EmailOctopus contact created")
            return True

        body = safe_json_loads(response.text, default=response.text)
        message = _error_message(body).lower()
        if any(marker in message for marker in ALREADY_SUBSCRIBED_MARKERS):
            logger.info("EmailOctopus contact already on the list")
            return False

        logger.error(
            f"EmailOctopus API error: status={response.status_code} "
            f"reason={response.reason_phrase}"
        )
        raise UpstreamFailure("EmailOctopus", response.status_code, body)
