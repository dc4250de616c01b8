"""Core utilities for the certificate renderer service.

This module exports commonly used utilities for easy importing:
    from core import get_logger
"""

from core.logger import bound_contextvars, get_logger

__all__ = [
    "get_logger",
    "bound_contextvars",
]
