"""
Airtable Client - Writes one record per accepted submission.

Airtable is the authoritative store for the application and merch
forms: its outcome decides the response, so failures are raised
rather than swallowed. The base id is part of the request path and is
redacted from anything that gets logged.
"""

import httpx
import logging
from typing import Any

from ..core.config import AirtableConfig
from ..core.errors import UpstreamFailure
from ..core.utils import redact_segment, truncate_string

# Configure logging
logger = logging.getLogger(__name__)


class AirtableClient:
    """Creates records in an Airtable base through the REST API."""

    def __init__(self, config: AirtableConfig, timeout: float = 10.0):
        self.api_url = config.api_url
        self.base_id = config.base_id
        self.headers = config.headers
        self.timeout = timeout

    def table_url(self, table: str) -> str:
        return f"{self.api_url}/{self.base_id}/{table}"

    async def create_record(self, table: str, fields: dict[str, Any]) -> dict[str, Any]:
        """
        Create a single record in ``table``.

        Args:
            table: Table id, or URL-quoted table name
            fields: Mapping of Airtable field label to value

        Returns:
            The decoded Airtable response

        Raises:
            UpstreamFailure: Airtable answered with a non-2xx status
            httpx.HTTPError: the request could not be completed
        """
        url = self.table_url(table)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                url,
                headers=self.headers,
                json={"records": [{"fields": fields}]}
            )

        if not response.is_success:
            body = response.text
            logger.error(
                f"Airtable API error: status={response.status_code} "
                f"reason={response.reason_phrase} "
                f"url={redact_segment(url, self.base_id)} "
                f"body={truncate_string(body, 1000)}"
            )
            raise UpstreamFailure("Airtable", response.status_code, body)

        logger.info(f"Airtable record created in table {table}")
        return response.json()
