"""
Tests for retry utility with exponential backoff.

Tests cover:
- RetryConfig defaults and validation
- Delay calculation with exponential backoff
- Jitter randomization and max delay capping
- Retryable error filtering (transport errors only by default)
- Async retry execution
"""

from typing import List
from unittest.mock import AsyncMock, patch

import pytest

from neo_access.errors import (
    ContractError,
    RpcResponseError,
    RpcTransportError,
    ValidationError,
)
from neo_access.utils.retry import RetryConfig, calculate_delay, retry_async


# =============================================================================
# RetryConfig Tests
# =============================================================================


class TestRetryConfig:
    """Tests for RetryConfig dataclass."""

    def test_default_values(self) -> None:
        config = RetryConfig()

        assert config.max_attempts == 3
        assert config.base_delay_ms == 250
        assert config.max_delay_ms == 2000
        assert config.jitter is True
        assert config.exponential_base == 2.0
        assert config.retryable_errors == (RpcTransportError,)
        assert config.should_retry is None

    def test_custom_values(self) -> None:
        config = RetryConfig(
            max_attempts=5,
            base_delay_ms=500,
            max_delay_ms=10000,
            jitter=False,
            exponential_base=3.0,
            retryable_errors=(ValueError, TypeError),
        )

        assert config.max_attempts == 5
        assert config.retryable_errors == (ValueError, TypeError)

    def test_zero_attempts_rejected(self) -> None:
        with pytest.raises(ValueError):
            RetryConfig(max_attempts=0)

    def test_is_retryable_default_policy(self) -> None:
        config = RetryConfig()

        assert config.is_retryable(RpcTransportError("reset", method="getblockcount"))
        assert not config.is_retryable(RpcResponseError("bad params", rpc_code=-32602))
        assert not config.is_retryable(ValidationError("bad"))
        assert not config.is_retryable(ContractError("FAULT", code="VM_FAULT"))

    def test_should_retry_narrows_policy(self) -> None:
        config = RetryConfig(should_retry=lambda e: getattr(e, "status_code", None) == 503)

        assert config.is_retryable(RpcTransportError("gateway", status_code=503))
        assert not config.is_retryable(RpcTransportError("gateway", status_code=502))


# =============================================================================
# Delay Calculation Tests
# =============================================================================


class TestDelayCalculation:
    """Tests for calculate_delay function."""

    def test_exponential_growth(self) -> None:
        config = RetryConfig(base_delay_ms=250, max_delay_ms=10_000, jitter=False)

        delays = [calculate_delay(i, config) for i in range(4)]

        # Expected: 0.25s, 0.5s, 1s, 2s
        assert delays == [0.25, 0.5, 1.0, 2.0]

    def test_max_delay_cap(self) -> None:
        config = RetryConfig(base_delay_ms=250, max_delay_ms=2000, jitter=False)

        assert calculate_delay(10, config) == 2.0

    def test_jitter_stays_within_bounds(self) -> None:
        config = RetryConfig(base_delay_ms=1000, jitter=True)

        delays = [calculate_delay(0, config) for _ in range(100)]

        assert min(delays) != max(delays)
        assert all(0 <= d <= 1.0 for d in delays)

    def test_jitter_disabled(self) -> None:
        config = RetryConfig(base_delay_ms=1000, jitter=False)

        assert all(calculate_delay(0, config) == 1.0 for _ in range(10))


# =============================================================================
# Async Retry Tests
# =============================================================================


class TestRetryAsync:
    """Tests for retry_async function."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self) -> None:
        fn = AsyncMock(return_value=1000)

        assert await retry_async(fn) == 1000
        assert fn.await_count == 1

    @pytest.mark.asyncio
    async def test_transient_failure_then_success(self, fast_retry: RetryConfig) -> None:
        fn = AsyncMock(
            side_effect=[
                RpcTransportError("connection reset", method="getblockcount"),
                RpcTransportError("HTTP 503", method="getblockcount", status_code=503),
                1000,
            ]
        )

        assert await retry_async(fn, fast_retry) == 1000
        assert fn.await_count == 3

    @pytest.mark.asyncio
    async def test_max_attempts_exceeded_raises_last_error(self, fast_retry: RetryConfig) -> None:
        errors = [RpcTransportError(f"failure {i}") for i in range(3)]
        fn = AsyncMock(side_effect=errors)

        with pytest.raises(RpcTransportError) as exc_info:
            await retry_async(fn, fast_retry)

        assert exc_info.value is errors[-1]
        assert fn.await_count == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            RpcResponseError("Invalid params", rpc_code=-32602),
            ValidationError("bad input"),
            ContractError("Contract execution failed", code="VM_FAULT"),
        ],
    )
    async def test_non_transient_errors_not_retried(
        self, fast_retry: RetryConfig, error: Exception
    ) -> None:
        fn = AsyncMock(side_effect=error)

        with pytest.raises(type(error)):
            await retry_async(fn, fast_retry)

        assert fn.await_count == 1

    @pytest.mark.asyncio
    async def test_retryable_error_filter(self) -> None:
        errors: List[Exception] = [ValueError("a"), ValueError("b"), RuntimeError("c")]
        fn = AsyncMock(side_effect=errors)
        config = RetryConfig(max_attempts=5, base_delay_ms=0, retryable_errors=(ValueError,))

        with pytest.raises(RuntimeError):
            await retry_async(fn, config)

        assert fn.await_count == 3

    @pytest.mark.asyncio
    async def test_sleeps_between_attempts(self) -> None:
        fn = AsyncMock(side_effect=[RpcTransportError("a"), RpcTransportError("b"), "ok"])
        config = RetryConfig(base_delay_ms=250, jitter=False)

        with patch("neo_access.utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await retry_async(fn, config)

        assert result == "ok"
        assert [c.args[0] for c in sleep.await_args_list] == [0.25, 0.5]

    @pytest.mark.asyncio
    async def test_no_sleep_after_final_attempt(self) -> None:
        fn = AsyncMock(side_effect=RpcTransportError("down"))
        config = RetryConfig(max_attempts=2, base_delay_ms=250, jitter=False)

        with patch("neo_access.utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            with pytest.raises(RpcTransportError):
                await retry_async(fn, config)

        assert sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_retry_is_logged(self, fast_retry: RetryConfig, caplog) -> None:
        fn = AsyncMock(side_effect=[RpcTransportError("reset"), "ok"])

        with caplog.at_level("WARNING", logger="neo_access"):
            await retry_async(fn, fast_retry, operation="getblockcount")

        assert any("retrying" in record.getMessage() for record in caplog.records)
        assert caplog.records[0].operation == "getblockcount"
