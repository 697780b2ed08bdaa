"""
Resend Client - Sends transactional email.

Used for confirmation emails after a successful submission. Like the
Slack client, failures are logged and reported as False.
"""

import httpx
import logging
from typing import Any

from ..core.config import ResendConfig
from ..core.utils import truncate_string

# Configure logging
logger = logging.getLogger(__name__)


class ResendClient:
    """Sends email through the Resend REST API."""

    def __init__(self, config: ResendConfig, timeout: float = 10.0):
        self.api_url = config.api_url
        self.headers = config.headers
        self.from_email = config.from_email
        self.reply_to_email = config.reply_to_email
        self.timeout = timeout

    def build_payload(self, to: str, subject: str, html: str, text: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "from": self.from_email,
            "to": to,
            "subject": subject,
            "html": html,
            "text": text
        }
        if self.reply_to_email:
            payload["reply_to"] = self.reply_to_email
        return payload

    async def send_email(self, to: str, subject: str, html: str, text: str) -> bool:
        """
        Send one email.

        Returns:
            True if Resend accepted the email, False otherwise
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.api_url}/emails",
                    headers=self.headers,
                    json=self.build_payload(to, subject, html, text)
                )

            if response.is_success:
                logger.info("Confirmation email sent successfully")
                return True

            logger.error(
                f"Resend API error: status={response.status_code} "
                f"reason={response.reason_phrase} "
                f"body={truncate_string(response.text, 500)}"
            )
            return False

        except httpx.TimeoutException:
            logger.error("Timeout while sending confirmation email")
            return False
        except Exception as e:
            logger.error(f"Error sending confirmation email: {str(e)}")
            return False
