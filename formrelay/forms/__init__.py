"""
Form endpoint configurations.
"""

from .application import APPLICATION_ENDPOINT
from .merch import MERCH_ENDPOINT
from .newsletter import NAMED_NEWSLETTER_ENDPOINT, NEWSLETTER_ENDPOINT

__all__ = [
    "APPLICATION_ENDPOINT",
    "MERCH_ENDPOINT",
    "NAMED_NEWSLETTER_ENDPOINT",
    "NEWSLETTER_ENDPOINT",
]
