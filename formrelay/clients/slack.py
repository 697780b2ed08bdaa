"""
Slack Client - Posts plain-text notifications to an incoming webhook.

Notifications are best-effort: every failure is logged and reported
as False, never raised.
"""

import httpx
import logging

from ..core.utils import truncate_string

# Configure logging
logger = logging.getLogger(__name__)


class SlackWebhook:
    """Sends messages to a single Slack incoming webhook."""

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def post_message(self, text: str) -> bool:
        """
        Post ``text`` to the webhook.

        Returns:
            True if Slack accepted the message, False otherwise
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.webhook_url,
                    headers={"Content-Type": "application/json"},
                    json={"text": text}
                )

            if response.is_success:
                logger.info("Slack notification sent successfully")
                return True

            logger.error(
                f"Slack webhook error: status={response.status_code} "
                f"reason={response.reason_phrase} "
                f"body={truncate_string(response.text, 500)}"
            )
            return False

        except httpx.TimeoutException:
            logger.error("Timeout while sending Slack notification")
            return False
        except Exception as e:
            logger.error(f"Error sending Slack notification: {str(e)}")
            return False
