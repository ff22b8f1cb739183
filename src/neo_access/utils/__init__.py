"""
neo-access Utilities.

This module provides caching, rate limiting, retry, validation and logging
helpers used by the service layer.
"""

from neo_access.utils.cache import CacheEntry, TTLCache
from neo_access.utils.logging import configure_logging, get_logger, set_level
from neo_access.utils.rate_limiter import RateLimiter, RateWindow
from neo_access.utils.retry import RetryConfig, calculate_delay, retry_async

__all__ = [
    # Cache
    "CacheEntry",
    "TTLCache",
    # Rate limiting
    "RateLimiter",
    "RateWindow",
    # Retry
    "RetryConfig",
    "calculate_delay",
    "retry_async",
    # Logging
    "get_logger",
    "configure_logging",
    "set_level",
]
