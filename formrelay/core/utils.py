"""
Shared utility functions for the form relay API.

Contains helpers used across multiple modules: timestamps, client
address derivation, origin comparison and log-safe formatting.
"""

import json
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import urlsplit

from starlette.requests import Request

DEFAULT_PORTS = {"http": 80, "https": 443}

UNKNOWN_CLIENT = "unknown"


def get_timestamp() -> str:
    """
    Get current UTC timestamp in ISO format.

    Returns:
        ISO-formatted UTC timestamp string
    """
    return datetime.now(timezone.utc).isoformat()


def safe_json_loads(data: str | bytes, default: Any = None) -> Any:
    """
    Safely parse JSON with error handling.

    Args:
        data: JSON string or bytes to parse
        default: Value to return if parsing fails

    Returns:
        Parsed JSON data or default value on failure
    """
    try:
        if isinstance(data, bytes):
            data = data.decode('utf-8')
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError, RecursionError):
        return default


def truncate_string(s: str, max_length: int = 100) -> str:
    """
    Truncate a string to a maximum length for logging.

    Args:
        s: String to truncate
        max_length: Maximum allowed length

    Returns:
        Original string if short enough, otherwise truncated with ellipsis
    """
    if len(s) <= max_length:
        return s
    return s[:max_length - 3] + "..."


def get_client_ip(request: Request) -> str:
    """
    Get the client identifier used for rate limiting.

    Takes the first address in X-Forwarded-For (set by the hosting
    proxy), then X-Real-IP, and falls back to a fixed sentinel so that
    clients without either header share one bucket.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return UNKNOWN_CLIENT


def origin_of(url: str) -> Optional[str]:
    """
    Serialize the origin (scheme, host, port) of a URL.

    Default ports are dropped so ``https://site.io`` and
    ``https://site.io:443`` compare equal. Returns None when the value
    has no usable scheme or host, e.g. the literal ``null`` origin.
    """
    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError:
        return None

    scheme = parts.scheme.lower()
    host = parts.hostname
    if not scheme or not host:
        return None

    if port is None or port == DEFAULT_PORTS.get(scheme):
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


def _first_value(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    first = header.split(",")[0].strip()
    return first or None


def request_origin(request: Request) -> Optional[str]:
    """
    Origin the client used to reach this service.

    Behind a TLS-terminating proxy the request arrives over plain http,
    so X-Forwarded-Proto and X-Forwarded-Host take precedence over the
    request URL when present.
    """
    proto = _first_value(request.headers.get("x-forwarded-proto"))
    host = _first_value(request.headers.get("x-forwarded-host"))
    if not proto and not host:
        return origin_of(str(request.url))
    scheme = proto or request.url.scheme
    netloc = host or request.url.netloc
    return origin_of(f"{scheme}://{netloc}")


def is_same_origin(request: Request) -> bool:
    """
    Check the Origin header against the request's own origin.

    A missing Origin header passes: same-origin fetches may omit it.
    """
    origin = request.headers.get("origin")
    if origin is None:
        return True
    claimed = origin_of(origin)
    return claimed is not None and claimed == request_origin(request)


def redact_segment(url: str, secret: Optional[str]) -> str:
    """
    Replace an identifier embedded in a URL with a placeholder.

    Used so that the Airtable base id never reaches the logs.
    """
    if not secret:
        return url
    return url.replace(secret, "[REDACTED]")
