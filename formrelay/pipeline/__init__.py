"""
Form submission pipeline: field specs, rate limiting and the executor.
"""

from .fields import FieldKind, FieldSpec
from .pipeline import FormEndpoint, FormPipeline, SettingRequirement, Submission
from .ratelimit import InMemoryRateLimiter, RateLimitPolicy, UpstashRateLimiter

__all__ = [
    "FieldKind",
    "FieldSpec",
    "FormEndpoint",
    "FormPipeline",
    "SettingRequirement",
    "Submission",
    "InMemoryRateLimiter",
    "RateLimitPolicy",
    "UpstashRateLimiter",
]
