"""
Error taxonomy for form submissions.

Every rejection the pipeline can produce is one of these exceptions.
Each carries the HTTP status it maps to and a message that is safe to
show the caller. The pipeline renders them into the endpoint's
response shape in a single place.
"""

from typing import Any, Optional


class SubmissionError(Exception):
    """Base class for all terminal submission outcomes other than success."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def extra(self) -> dict[str, Any]:
        """Additional response fields beyond the error message."""
        return {}


class Forbidden(SubmissionError):
    """Request Origin doesn't match the request's own origin."""
    status_code = 403
    default_message = "Forbidden"


class Misconfigured(SubmissionError):
    """One or more required settings are missing."""
    status_code = 500
    default_message = "Server configuration error"

    def __init__(self, missing: list[str], message: Optional[str] = None):
        super().__init__(message)
        self.missing = list(missing)

    def extra(self) -> dict[str, Any]:
        # Only names are reported, never values
        return {"missing": self.missing}


class MalformedInput(SubmissionError):
    """Body is not a JSON object."""
    status_code = 400
    default_message = "Invalid JSON"


class InvalidField(SubmissionError):
    """A required field is missing or has an invalid value."""
    status_code = 400

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class RateLimited(SubmissionError):
    """Client exceeded the submission quota for the current window."""
    status_code = 429
    default_message = "Too many requests. Please try again later."


class UpstreamFailure(SubmissionError):
    """The authoritative upstream write was rejected."""
    status_code = 502
    default_message = "Upstream request failed"

    def __init__(
        self,
        service: str,
        upstream_status: Optional[int] = None,
        upstream_body: Any = None,
        message: Optional[str] = None
    ):
        super().__init__(message or f"{service} request failed")
        self.service = service
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body


class Unexpected(SubmissionError):
    """Uncaught failure while processing an accepted submission."""
    status_code = 500
    default_message = "Internal server error"
