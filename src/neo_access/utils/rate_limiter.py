"""Fixed-window rate limiting keyed by client identifier."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from neo_access.errors import RateLimitError
from neo_access.utils.logging import get_logger

_logger = get_logger(__name__)


@dataclass
class RateWindow:
    """Admission counter for one key."""

    count: int
    window_start: float


class RateLimiter:
    """
    Fixed-window admission counter.

    Each key gets ``max_requests`` admissions per ``window_ms``. The call
    that pushes a key past the limit raises RateLimitError. Windows whose
    period has elapsed are pruned while serving other keys, at most once
    per window.

    Example:
        >>> limiter = RateLimiter(max_requests=2, window_ms=60_000)
        >>> limiter.check_limit("client-a")
        True
        >>> limiter.check_limit("client-a")
        True
        >>> limiter.check_limit("client-a")
        Traceback (most recent call last):
        ...
        neo_access.errors.types.RateLimitError: [RATE_LIMITED] Rate limit exceeded. Try again in 60 seconds.
    """

    def __init__(
        self,
        max_requests: int = 60,
        window_ms: int = 60_000,
        enabled: bool = True,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")

        self._max_requests = max_requests
        self._window_ms = window_ms
        self._enabled = enabled
        self._clock = clock
        self._windows: Dict[str, RateWindow] = {}
        self._last_prune = clock()

        _logger.info(
            "Rate limiter initialized",
            extra={
                "max_requests": max_requests,
                "window_ms": window_ms,
                "enabled": enabled,
            },
        )

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_ms(self) -> int:
        return self._window_ms

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def tracked_keys(self) -> int:
        """Number of keys currently holding a window."""
        return len(self._windows)

    def _window_seconds(self) -> float:
        return self._window_ms / 1000

    def _prune(self, now: float) -> None:
        if now - self._last_prune < self._window_seconds():
            return
        self._last_prune = now

        stale = [
            key
            for key, window in self._windows.items()
            if now - window.window_start >= self._window_seconds()
        ]
        for key in stale:
            del self._windows[key]
        if stale:
            _logger.debug("Pruned rate windows", extra={"removed": len(stale)})

    def check_limit(self, key: str) -> bool:
        """
        Admit one request for ``key``.

        Returns:
            True when the request is admitted.

        Raises:
            RateLimitError: When the request exceeds the window's budget.
        """
        if not self._enabled:
            return True

        now = self._clock()
        self._prune(now)

        window = self._windows.get(key)
        if window is None or now - window.window_start >= self._window_seconds():
            self._windows[key] = RateWindow(count=1, window_start=now)
            return True

        window.count += 1
        if window.count > self._max_requests:
            reset_at = window.window_start + self._window_seconds()
            retry_after = max(1, math.ceil(reset_at - now))
            _logger.warning(
                "Rate limit exceeded",
                extra={
                    "key": key,
                    "count": window.count,
                    "max_requests": self._max_requests,
                    "window_ms": self._window_ms,
                    "retry_after": retry_after,
                },
            )
            raise RateLimitError(
                limit=self._max_requests,
                current=window.count,
                retry_after=retry_after,
                key=key,
            )

        return True

    def remaining(self, key: str) -> int:
        """Admissions left for ``key`` in its current window."""
        window = self._windows.get(key)
        if window is None or self._clock() - window.window_start >= self._window_seconds():
            return self._max_requests
        return max(0, self._max_requests - window.count)

    def reset_limit(self, key: str) -> None:
        """Forget the window held by ``key``."""
        self._windows.pop(key, None)
        _logger.debug("Rate limit reset", extra={"key": key})

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled
        _logger.info("Rate limiting toggled", extra={"enabled": enabled})

    def update_settings(
        self,
        max_requests: Optional[int] = None,
        window_ms: Optional[int] = None,
    ) -> None:
        """Change the budget or window length; existing windows are kept."""
        if max_requests is not None:
            if max_requests < 1:
                raise ValueError("max_requests must be at least 1")
            self._max_requests = max_requests
        if window_ms is not None:
            if window_ms <= 0:
                raise ValueError("window_ms must be positive")
            self._window_ms = window_ms
        _logger.info(
            "Rate limiter settings updated",
            extra={"max_requests": self._max_requests, "window_ms": self._window_ms},
        )
