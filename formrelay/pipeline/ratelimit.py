"""
Fixed-window rate limiting for form submissions.

Two interchangeable backends:

- ``InMemoryRateLimiter``: a per-process table keyed by client
  identifier. Entries are created or overwritten lazily and never
  evicted. Concurrent hits from one client may race; the limit is
  approximate under bursts.
- ``UpstashRateLimiter``: the same window kept in Upstash Redis through
  its REST API so that several server instances share one counter.

Both expose ``async hit(key) -> bool`` which records the attempt and
returns whether it is allowed.
"""

import httpx
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..core.config import UpstashConfig

# Configure logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitPolicy:
    """
    Limit applied to one endpoint.

    Attributes:
        name: Namespace for the endpoint's counters
        limit: Accepted submissions per window
        window_seconds: Window length
    """
    name: str
    limit: int = 5
    window_seconds: float = 60.0


@dataclass
class RateLimitRecord:
    """Counter for one client in the current window."""
    count: int
    reset_at: float


class InMemoryRateLimiter:
    """
    Process-local fixed-window counter.

    A request after ``reset_at`` starts a new window with count 1.
    Inside a window, a request is rejected once ``count`` has reached
    the limit; otherwise the count is incremented.
    """

    def __init__(self, policy: RateLimitPolicy, clock: Callable[[], float] = time.time):
        self.policy = policy
        self.clock = clock
        self.records: dict[str, RateLimitRecord] = {}

    async def hit(self, key: str) -> bool:
        now = self.clock()
        record = self.records.get(key)

        if record is None or now > record.reset_at:
            self.records[key] = RateLimitRecord(
                count=1,
                reset_at=now + self.policy.window_seconds
            )
            return True

        if record.count >= self.policy.limit:
            return False

        record.count += 1
        return True

    def reset(self) -> None:
        """Drop all counters."""
        self.records.clear()


class UpstashRateLimiter:
    """
    Fixed-window counter stored in Upstash Redis.

    Each hit runs ``INCR`` on the client's key and sets the window
    expiry only when the key is new (``PEXPIRE ... NX``), in a single
    REST pipeline call. If Upstash can't be reached the hit is allowed:
    limiting is best-effort and must not take the forms down.
    """

    def __init__(self, config: UpstashConfig, policy: RateLimitPolicy, timeout: float = 3.0):
        self.base_url = config.rest_url
        self.headers = config.headers
        self.policy = policy
        self.timeout = timeout

    def _key(self, client: str) -> str:
        return f"ratelimit:{self.policy.name}:{client}"

    async def hit(self, key: str) -> bool:
        redis_key = self._key(key)
        window_ms = str(int(self.policy.window_seconds * 1000))
        pipeline_commands = [
            ["INCR", redis_key],
            ["PEXPIRE", redis_key, window_ms, "NX"]
        ]

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/pipeline",
                    headers=self.headers,
                    json=pipeline_commands
                )

            if response.status_code != 200:
                logger.warning(
                    f"Rate limit store returned status {response.status_code}; "
                    f"allowing request"
                )
                return True

            results = response.json()
            count = int(results[0].get("result", 0))
            return count <= self.policy.limit

        except httpx.TimeoutException:
            logger.warning("Timeout while checking rate limit; allowing request")
            return True
        except Exception as e:
            logger.warning(f"Error checking rate limit: {str(e)}; allowing request")
            return True

    async def health_check(self) -> bool:
        """
        Check if the Upstash Redis connection is healthy.

        Returns:
            True if connection is healthy, False otherwise
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}",
                    headers=self.headers,
                    json=["PING"]
                )

                if response.status_code == 200:
                    data = response.json()
                    return data.get("result") == "PONG"
                return False

        except Exception:
            return False


def select_rate_limiter(
    memory_limiter: InMemoryRateLimiter,
    upstash: Optional[UpstashConfig]
) -> "InMemoryRateLimiter | UpstashRateLimiter":
    """Use the shared Upstash counter when configured, else the local table."""
    if upstash is None:
        return memory_limiter
    return UpstashRateLimiter(upstash, memory_limiter.policy)
