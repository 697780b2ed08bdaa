"""
FastAPI Application Entry Point

This is the main application module that configures and runs the
form relay API for the marketing site.

The API:
- Accepts JSON form submissions from the site
- Rejects bots (honeypot, origin check, per-client rate limit)
- Writes accepted submissions to Airtable or EmailOctopus
- Sends Slack and email notifications in the background

Run with: uvicorn formrelay.main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.utils import get_timestamp
from .api.routes import router

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# httpx logs full request URLs at INFO, which include the Airtable base id
logging.getLogger("httpx").setLevel(logging.WARNING)


# ============================================================
# Application Lifespan Handler
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events:
    - Startup: Log which settings are present (never their values)
    - Shutdown: Nothing to release; clients are per-request
    """
    # ---- Startup ----
    logger.info("=" * 60)
    logger.info("FORM RELAY API STARTING")
    logger.info("=" * 60)
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"API Version: {settings.api_version}")
    logger.info(f"Rate limit store: {'upstash' if settings.upstash else 'memory'}")

    for name, present in settings.presence().items():
        logger.info(f"  {name}: {'set' if present else 'missing'}")

    logger.info("=" * 60)
    logger.info(f"API ready to accept requests on port {settings.server_port}")
    logger.info("=" * 60)

    yield  # Application runs here

    # ---- Shutdown ----
    logger.info("API shutting down...")


# ============================================================
# FastAPI Application Instance
# ============================================================

app = FastAPI(
    title=settings.api_title,
    description=settings.api_description,
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)


# ============================================================
# Middleware Configuration
# ============================================================

# Forms are served same-origin; CORS is only added for explicit origins
if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["POST"],
        allow_headers=["Content-Type"],
    )


# ============================================================
# Exception Handlers
# ============================================================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Render routing errors with the forms' ``{"error": ...}`` shape.

    Covers 405 for non-POST methods on form paths and 404 for
    unknown paths.
    """
    detail = exc.detail
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        detail = "Method not allowed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": detail},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler for anything the pipelines didn't catch.

    The error is logged with its traceback; the caller only sees a
    generic message.
    """
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"}
    )


# ============================================================
# Route Registration
# ============================================================

app.include_router(router, tags=["Forms"])


# ============================================================
# Root Endpoint
# ============================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint with API information.

    Provides basic info and links to documentation.
    """
    return {
        "service": settings.api_title,
        "version": settings.api_version,
        "description": settings.api_description,
        "endpoints": {
            "community_apply": "POST /api/community-apply",
            "newsletter_subscribe": "POST /api/newsletter/subscribe",
            "newsletter_signup": "POST /api/newsletter/signup",
            "merch_waitlist": "POST /api/merch/waitlist",
            "health": "GET /health",
            "docs": "GET /docs"
        },
        "timestamp": get_timestamp()
    }


# ============================================================
# Run Configuration (for direct execution)
# ============================================================

if __name__ == "__main__":
    import uvicorn

    print("=" * 60)
    print("FORM RELAY API")
    print("=" * 60)
    print(f"Binding to 0.0.0.0:{settings.server_port}")
    print(f"Docs: http://localhost:{settings.server_port}/docs")
    print("=" * 60)

    uvicorn.run(
        "formrelay.main:app",
        host="0.0.0.0",
        port=settings.server_port,
        reload=False,
        workers=1,
        log_level="info",
        proxy_headers=True,
        forwarded_allow_ips=settings.forwarded_allow_ips
    )
