"""
Utility tests.

Tests cover:
- TTLCache freshness and expiry (test_cache.py)
- RateLimiter fixed windows (test_rate_limiter.py)
- Retry policy (test_retry.py)
- Input validation (test_validation.py)
"""
