"""
Core module containing configuration, errors and utilities.
"""

from .config import settings, get_settings, Settings
from .utils import get_timestamp, get_client_ip, safe_json_loads

__all__ = ["settings", "get_settings", "Settings", "get_timestamp", "get_client_ip", "safe_json_loads"]
