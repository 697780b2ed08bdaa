"""
Models module containing Pydantic schemas.
"""

from .schemas import (
    ResponseStyle,
    OkResponse,
    SuccessResponse,
    ErrorResponse,
    FailureResponse,
    HealthResponse
)

__all__ = [
    "ResponseStyle",
    "OkResponse",
    "SuccessResponse",
    "ErrorResponse",
    "FailureResponse",
    "HealthResponse"
]
