"""
Pydantic models for API responses.

Defines the data contracts returned to the site's forms. Two response
shapes exist: the application form uses ``{ok}``/``{error}`` and the
newsletter and merch forms use ``{success}``/``{success, error}``.
Request bodies are parsed by the submission pipeline rather than by
FastAPI so that every rejection keeps the endpoint's own shape.
"""

from pydantic import BaseModel, Field
from typing import Any, Optional
from enum import Enum


class ResponseStyle(str, Enum):
    """
    Response envelope used by an endpoint.

    OK: ``{"ok": true}`` / ``{"error": "..."}``
    SUCCESS: ``{"success": true}`` / ``{"success": false, "error": "..."}``
    """
    OK = "ok"
    SUCCESS = "success"


# ============================================================
# Success Models
# ============================================================

class OkResponse(BaseModel):
    """Acknowledgment returned by the application endpoint."""
    ok: bool = True


class SuccessResponse(BaseModel):
    """Acknowledgment returned by the newsletter and merch endpoints."""
    success: bool = True

    class Config:
        json_schema_extra = {
            "example": {"success": True}
        }


# ============================================================
# Error Models
# ============================================================

class ErrorResponse(BaseModel):
    """
    Error body for the application endpoint and generic HTTP errors.

    ``missing`` is only present for configuration errors.
    """
    error: str
    missing: Optional[list[str]] = None

    class Config:
        json_schema_extra = {
            "examples": [
                {"error": "fullName is required"},
                {"error": "Server configuration error", "missing": ["AIRTABLE_PAT"]}
            ]
        }


class FailureResponse(BaseModel):
    """
    Error body for the newsletter and merch endpoints.

    ``upstreamStatus`` and ``upstreamBody`` are only filled outside
    production on endpoints that expose upstream detail.
    """
    success: bool = False
    error: str
    missing: Optional[list[str]] = None
    upstreamStatus: Optional[int] = None
    upstreamBody: Optional[Any] = None

    class Config:
        json_schema_extra = {
            "example": {"success": False, "error": "Invalid email format"}
        }


# ============================================================
# Service Models
# ============================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    service: str = "formrelay"
    version: str
    rate_limit_backend: str = Field(
        ...,
        description="'memory' or 'upstash'"
    )
    rate_limit_connected: bool
    timestamp: str
