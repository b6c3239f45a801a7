"""Core utilities for the Branch Office API.

This module exports commonly used utilities for easy importing:
    from core import get_logger
"""

from core.logger import get_logger
from core.wide_event import set_wide_event_fields

__all__ = ["get_logger", "set_wide_event_fields"]
