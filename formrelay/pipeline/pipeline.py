"""
Form Submission Pipeline - one parameterized handler for every form.

Each form endpoint is described by a ``FormEndpoint``: its fields, the
settings it needs, which anti-abuse checks apply, how the accepted
submission is written upstream and which notifications follow. A
``FormPipeline`` runs that description against one request:

    origin check -> configuration check -> body parse -> honeypot
    -> field validation -> rate limit -> sanitize -> upstream write
    -> (background) notifications -> response

Every rejection is a ``SubmissionError`` raised by one of the steps and
rendered here into the endpoint's response shape. Only the upstream
write is on the critical path; notifications run as background tasks
once the response is settled, and their failures are only logged.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

from fastapi import BackgroundTasks, Request
from fastapi.responses import JSONResponse

from ..core.config import Settings
from ..core.errors import (
    Forbidden,
    MalformedInput,
    Misconfigured,
    RateLimited,
    SubmissionError,
    Unexpected,
    UpstreamFailure,
)
from ..core.utils import get_client_ip, get_timestamp, is_same_origin, safe_json_loads
from ..models.schemas import (
    ErrorResponse,
    FailureResponse,
    OkResponse,
    ResponseStyle,
    SuccessResponse,
)
from .fields import FieldSpec, map_to_record, sanitize_fields, validate_fields, scalar_text
from .ratelimit import InMemoryRateLimiter, RateLimitPolicy, select_rate_limiter

# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class Submission:
    """
    A validated, sanitized submission ready for upstream delivery.

    Attributes:
        endpoint: Name of the form that accepted it
        values: Cleaned values keyed by request field name
        record: Cleaned values keyed by upstream field label
        client_ip: Client identifier used for rate limiting
        received_at: ISO timestamp of acceptance
    """
    endpoint: str
    values: dict[str, Any]
    record: dict[str, Any]
    client_ip: str
    received_at: str

    def display(self, name: str, default: str = "Not provided") -> str:
        """Human-readable value for notifications."""
        value = self.values.get(name)
        if value is None or value == "" or value == []:
            return default
        if isinstance(value, list):
            return ", ".join(value)
        if isinstance(value, bool):
            return "Yes" if value else "No"
        return str(value)


Writer = Callable[[Submission, Settings], Awaitable[Any]]
Notifier = Callable[[Submission, Settings], Awaitable[None]]


@dataclass(frozen=True)
class SettingRequirement:
    """
    A setting (or group of alternatives) an endpoint can't run without.

    Attributes:
        name: What to report when absent, e.g. ``AIRTABLE_PAT``
        is_present: Predicate over the current settings
    """
    name: str
    is_present: Callable[[Settings], bool]


@dataclass(frozen=True)
class FormEndpoint:
    """
    Configuration of one form endpoint.

    Attributes:
        name: Short identifier used in logs and rate-limit keys
        fields: Field specifications, in validation order
        requirements: Settings checked before the body is read
        write: Authoritative upstream write; raises on failure
        notify: Best-effort follow-up run after a successful write
        style: Response envelope
        check_origin: Reject cross-origin requests
        honeypot_field: Field that must stay empty for real users
        rate_limit: Per-client submission quota
        constant_fields: Extra values added to every upstream record
        misconfigured_message: Error text for missing settings
        upstream_message: Error text when the upstream write fails
        unexpected_message: Error text for any other failure
        expose_upstream_detail: Include upstream status/body outside production
    """
    name: str
    fields: tuple[FieldSpec, ...]
    requirements: tuple[SettingRequirement, ...]
    write: Writer
    notify: Optional[Notifier] = None
    style: ResponseStyle = ResponseStyle.SUCCESS
    check_origin: bool = False
    honeypot_field: Optional[str] = None
    rate_limit: Optional[RateLimitPolicy] = None
    constant_fields: dict[str, Any] = field(default_factory=dict)
    misconfigured_message: str = "Server configuration error"
    upstream_message: str = "Failed to submit"
    unexpected_message: str = "Internal server error"
    expose_upstream_detail: bool = False


class FormPipeline:
    """
    Runs a ``FormEndpoint`` against incoming requests.

    Holds the endpoint's in-memory rate-limit table, which lives as long
    as the pipeline (normally the whole process).
    """

    def __init__(self, endpoint: FormEndpoint, clock: Callable[[], float] = time.time):
        self.endpoint = endpoint
        self.memory_limiter: Optional[InMemoryRateLimiter] = None
        if endpoint.rate_limit is not None:
            self.memory_limiter = InMemoryRateLimiter(endpoint.rate_limit, clock)

    async def handle(
        self,
        request: Request,
        settings: Settings,
        background_tasks: BackgroundTasks
    ) -> JSONResponse:
        """
        Process one request and produce exactly one response.

        Notifications are scheduled on ``background_tasks`` only after
        the upstream write succeeded.
        """
        try:
            submission = await self.process(request, settings)
        except SubmissionError as exc:
            return self.render_error(exc, settings)
        except Exception as e:
            logger.error(
                f"Unexpected error handling {self.endpoint.name} submission: {str(e)}",
                exc_info=True
            )
            return self.render_error(Unexpected(self.endpoint.unexpected_message), settings)

        if submission is not None and self.endpoint.notify is not None:
            background_tasks.add_task(self.run_notifications, submission, settings)

        return self.render_success()

    async def process(self, request: Request, settings: Settings) -> Optional[Submission]:
        """
        Run every step up to and including the upstream write.

        Returns:
            The accepted submission, or None when the honeypot was
            filled and the request was silently discarded

        Raises:
            SubmissionError: the first check that rejected the request
        """
        endpoint = self.endpoint

        if endpoint.check_origin and not is_same_origin(request):
            logger.warning(
                f"Rejected {endpoint.name} submission from foreign origin "
                f"{request.headers.get('origin')!r}"
            )
            raise Forbidden()

        self.check_configuration(settings)

        body = await self.parse_body(request)

        if self.honeypot_filled(body):
            logger.info(f"Honeypot filled on {endpoint.name}; discarding submission")
            return None

        validate_fields(body, endpoint.fields)

        client_ip = get_client_ip(request)
        await self.check_rate_limit(client_ip, settings)

        values = sanitize_fields(body, endpoint.fields)
        record = map_to_record(values, endpoint.fields)
        record.update(endpoint.constant_fields)

        submission = Submission(
            endpoint=endpoint.name,
            values=values,
            record=record,
            client_ip=client_ip,
            received_at=get_timestamp()
        )

        await endpoint.write(submission, settings)
        logger.info(f"Accepted {endpoint.name} submission")
        return submission

    def check_configuration(self, settings: Settings) -> None:
        missing = [
            requirement.name
            for requirement in self.endpoint.requirements
            if not requirement.is_present(settings)
        ]
        if missing:
            logger.error(
                f"Missing required settings for {self.endpoint.name}: {', '.join(missing)}"
            )
            raise Misconfigured(missing, self.endpoint.misconfigured_message)

    async def parse_body(self, request: Request) -> dict[str, Any]:
        raw = await request.body()
        body = safe_json_loads(raw)
        if not isinstance(body, dict):
            raise MalformedInput()
        return body

    def honeypot_filled(self, body: dict[str, Any]) -> bool:
        name = self.endpoint.honeypot_field
        if name is None:
            return False
        return bool(scalar_text(body.get(name)))

    async def check_rate_limit(self, client_ip: str, settings: Settings) -> None:
        if self.memory_limiter is None:
            return
        limiter = select_rate_limiter(self.memory_limiter, settings.upstash)
        if not await limiter.hit(client_ip):
            logger.warning(f"Rate limit exceeded on {self.endpoint.name} for {client_ip}")
            raise RateLimited()

    async def run_notifications(self, submission: Submission, settings: Settings) -> None:
        """Best-effort follow-up; never raises."""
        try:
            await self.endpoint.notify(submission, settings)
        except Exception as e:
            logger.error(
                f"Notification failed for {self.endpoint.name} submission: {str(e)}",
                exc_info=True
            )

    # ============================================================
    # Response Rendering
    # ============================================================

    def render_success(self) -> JSONResponse:
        if self.endpoint.style == ResponseStyle.OK:
            content = OkResponse().model_dump()
        else:
            content = SuccessResponse().model_dump()
        return JSONResponse(status_code=200, content=content)

    def render_error(self, exc: SubmissionError, settings: Settings) -> JSONResponse:
        message = exc.message
        extra = exc.extra()

        if isinstance(exc, UpstreamFailure):
            if self.endpoint.expose_upstream_detail and not settings.is_production:
                message = (
                    f"{exc.service} API request failed. "
                    f"Check upstreamStatus and upstreamBody for details."
                )
                extra = {
                    "upstreamStatus": exc.upstream_status,
                    "upstreamBody": exc.upstream_body
                }
            else:
                message = self.endpoint.upstream_message

        if self.endpoint.style == ResponseStyle.OK:
            content = ErrorResponse(error=message, **extra).model_dump(exclude_none=True)
        else:
            content = FailureResponse(error=message, **extra).model_dump(exclude_none=True)

        return JSONResponse(status_code=exc.status_code, content=content)
