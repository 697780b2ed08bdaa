"""
API Routes - FastAPI endpoints for the site's forms.

Every form endpoint delegates to a ``FormPipeline`` built from its
``FormEndpoint`` configuration:
- POST /api/community-apply: community application intake
- POST /api/newsletter/subscribe: email-only newsletter signup
- POST /api/newsletter/signup: newsletter signup with first/last name
- POST /api/merch/waitlist: merchandise waitlist

Other methods on these paths get a 405 from the router. Bodies are
read by the pipeline, not by FastAPI, so every rejection keeps the
endpoint's own response shape.
"""

import logging
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse

from ..core.config import Settings, get_settings
from ..core.utils import get_timestamp
from ..forms import (
    APPLICATION_ENDPOINT,
    MERCH_ENDPOINT,
    NAMED_NEWSLETTER_ENDPOINT,
    NEWSLETTER_ENDPOINT,
)
from ..models.schemas import (
    ErrorResponse,
    FailureResponse,
    HealthResponse,
    OkResponse,
    SuccessResponse,
)
from ..pipeline import FormPipeline, RateLimitPolicy, UpstashRateLimiter

# Configure logging
logger = logging.getLogger(__name__)

# Create the router
router = APIRouter()

# One pipeline per endpoint; each owns its rate-limit table
application_pipeline = FormPipeline(APPLICATION_ENDPOINT)
newsletter_pipeline = FormPipeline(NEWSLETTER_ENDPOINT)
named_newsletter_pipeline = FormPipeline(NAMED_NEWSLETTER_ENDPOINT)
merch_pipeline = FormPipeline(MERCH_ENDPOINT)

PIPELINES = {
    "community_application": application_pipeline,
    "newsletter_subscribe": newsletter_pipeline,
    "newsletter_signup": named_newsletter_pipeline,
    "merch_waitlist": merch_pipeline,
}

OK_RESPONSES = {
    200: {"model": OkResponse, "description": "Application stored"},
    400: {"model": ErrorResponse, "description": "Invalid JSON or missing/invalid field"},
    403: {"model": ErrorResponse, "description": "Cross-origin request"},
    500: {"model": ErrorResponse, "description": "Server misconfigured or unexpected failure"},
    502: {"model": ErrorResponse, "description": "Record store rejected the write"},
}

SUCCESS_RESPONSES = {
    200: {"model": SuccessResponse, "description": "Submission accepted"},
    400: {"model": FailureResponse, "description": "Invalid JSON or missing/invalid field"},
    500: {"model": FailureResponse, "description": "Server misconfigured or unexpected failure"},
    502: {"model": FailureResponse, "description": "Upstream service rejected the write"},
}

RATE_LIMITED_RESPONSES = {
    **SUCCESS_RESPONSES,
    429: {"model": FailureResponse, "description": "Too many submissions from this client"},
}


# ============================================================
# Form Endpoints
# ============================================================

@router.post(
    "/api/community-apply",
    summary="Submit a community application",
    responses=OK_RESPONSES
)
async def community_apply(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings)
) -> JSONResponse:
    """
    Store a community application in Airtable.

    On success a Slack announcement and a confirmation email are sent
    in the background; their failures don't change the response.
    """
    return await application_pipeline.handle(request, settings, background_tasks)


@router.post(
    "/api/newsletter/subscribe",
    summary="Subscribe to the newsletter",
    responses=RATE_LIMITED_RESPONSES
)
async def newsletter_subscribe(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings)
) -> JSONResponse:
    """Add an email address to the newsletter list."""
    return await newsletter_pipeline.handle(request, settings, background_tasks)


@router.post(
    "/api/newsletter/signup",
    summary="Subscribe to the newsletter with name",
    responses=RATE_LIMITED_RESPONSES
)
async def newsletter_signup(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings)
) -> JSONResponse:
    """
    Add a named contact to the newsletter list.

    Outside production, upstream failures include the upstream status
    and body for debugging.
    """
    return await named_newsletter_pipeline.handle(request, settings, background_tasks)


@router.post(
    "/api/merch/waitlist",
    summary="Join the merch waitlist",
    responses=SUCCESS_RESPONSES
)
async def merch_waitlist(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings)
) -> JSONResponse:
    """Store a merch waitlist signup and notify the merch channel."""
    return await merch_pipeline.handle(request, settings, background_tasks)


# ============================================================
# Utility Endpoints
# ============================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health of the API and its rate-limit store."
)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """
    Perform a health check.

    With Upstash configured, verifies that the shared rate-limit store
    answers; the in-memory store is always available.
    """
    backend = "memory"
    connected = True
    if settings.upstash is not None:
        backend = "upstash"
        limiter = UpstashRateLimiter(settings.upstash, RateLimitPolicy("health"))
        connected = await limiter.health_check()

    return HealthResponse(
        status="healthy" if connected else "degraded",
        version=settings.api_version,
        rate_limit_backend=backend,
        rate_limit_connected=connected,
        timestamp=get_timestamp()
    )
