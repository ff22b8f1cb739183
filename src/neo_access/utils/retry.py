"""
Retry Utilities for neo-access.

Provides exponential backoff with jitter for transient RPC failures.
Retry is composed explicitly at each call site:

    block_count = await retry_async(lambda: client.get_block_count(), config)
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from typing import (
    Awaitable,
    Callable,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

from neo_access.errors import RpcTransportError
from neo_access.utils.logging import get_logger

T = TypeVar("T")

_logger = get_logger(__name__)


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior.

    Example:
        ```python
        config = RetryConfig(
            max_attempts=5,
            base_delay_ms=500,
            jitter=True,
            retryable_errors=(RpcTransportError,),
        )
        ```
    """

    max_attempts: int = 3
    """Maximum number of attempts (first call included)."""

    base_delay_ms: int = 250
    """Base delay in milliseconds for exponential backoff."""

    max_delay_ms: int = 2000
    """Maximum delay in milliseconds (cap for exponential growth)."""

    jitter: bool = True
    """Whether to add random jitter to delays."""

    exponential_base: float = 2.0
    """Base for exponential backoff calculation."""

    retryable_errors: Tuple[Type[Exception], ...] = field(
        default_factory=lambda: (RpcTransportError,)
    )
    """Tuple of exception types that may trigger a retry."""

    should_retry: Optional[Callable[[Exception], bool]] = None
    """Optional predicate narrowing ``retryable_errors`` further."""

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("delays must be non-negative")

    def is_retryable(self, error: Exception) -> bool:
        """Return True when ``error`` should be retried under this policy."""
        if not isinstance(error, self.retryable_errors):
            return False
        if self.should_retry is not None:
            return self.should_retry(error)
        return True


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """
    Calculate delay with exponential backoff and optional jitter.

    Args:
        attempt: Zero-based attempt number (0 = first retry)
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    delay_ms = config.base_delay_ms * (config.exponential_base ** attempt)
    delay_ms = min(delay_ms, config.max_delay_ms)

    if config.jitter:
        # Full jitter
        delay_ms = random.uniform(0, delay_ms)

    return delay_ms / 1000


async def retry_async(
    fn: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
    *,
    operation: Optional[str] = None,
) -> T:
    """
    Execute async function with retry logic.

    Non-retryable errors propagate immediately. When every attempt fails with
    a retryable error, the last one is re-raised.

    Args:
        fn: Async function to execute (no arguments)
        config: Retry configuration (uses defaults if None)
        operation: Name used in log records

    Returns:
        Result of the function

    Example:
        ```python
        height = await retry_async(
            lambda: client.get_block_count(),
            RetryConfig(max_attempts=3),
            operation="getblockcount",
        )
        ```
    """
    config = config or RetryConfig()
    last_error: Optional[Exception] = None

    for attempt in range(config.max_attempts):
        try:
            return await fn()
        except Exception as e:
            if not config.is_retryable(e):
                raise
            last_error = e

            if attempt < config.max_attempts - 1:
                delay = calculate_delay(attempt, config)
                _logger.warning(
                    "Transient failure, retrying",
                    extra={
                        "operation": operation,
                        "attempt": attempt + 1,
                        "max_attempts": config.max_attempts,
                        "delay_s": round(delay, 3),
                        "error": str(e),
                    },
                )
                await asyncio.sleep(delay)

    if last_error is not None:
        raise last_error

    raise RuntimeError("Retry exhausted without error")
