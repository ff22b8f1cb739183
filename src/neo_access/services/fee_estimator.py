"""
Fee estimation by dry run.

The estimator builds the same invocation a write would broadcast, executes
it without broadcasting and scales the measured ``gasconsumed`` by
GAS_SAFETY_MULTIPLIER:

    min_required  = gasconsumed
    estimated_gas = ceil_8dp(gasconsumed * 1.15), at least min_required + 1e-8
"""

from __future__ import annotations

from decimal import ROUND_UP, Decimal
from typing import Optional, Sequence

from neo_access.config import Network
from neo_access.constants import GAS_FRACTION, GAS_SAFETY_MULTIPLIER
from neo_access.models import FeeEstimate
from neo_access.rpc.client import LedgerClient
from neo_access.rpc.params import ContractParam, ParamType
from neo_access.services.invocation import dry_run, fractions_to_gas, gas_consumed, signer_for
from neo_access.utils.logging import get_logger
from neo_access.utils.retry import RetryConfig

_logger = get_logger(__name__)


def apply_safety_margin(
    min_required: Decimal,
    multiplier: Decimal = GAS_SAFETY_MULTIPLIER,
) -> Decimal:
    """
    Scale ``min_required`` and round up to GAS precision.

    The result is always strictly greater than ``min_required``.

    Example:
        >>> apply_safety_margin(Decimal("0.0997745"))
        Decimal('0.11474068')
        >>> apply_safety_margin(Decimal("0"))
        Decimal('1E-8')
    """
    estimated = (min_required * multiplier).quantize(GAS_FRACTION, rounding=ROUND_UP)
    if estimated <= min_required:
        estimated = min_required + GAS_FRACTION
    return estimated


def nep17_transfer_params(
    from_script_hash: str,
    to_script_hash: str,
    amount_fractions: int,
) -> Sequence[ContractParam]:
    """Arguments of ``transfer(from, to, amount, data)``."""
    return (
        ContractParam(ParamType.HASH160, from_script_hash),
        ContractParam(ParamType.HASH160, to_script_hash),
        ContractParam(ParamType.INTEGER, str(amount_fractions)),
        ContractParam(ParamType.ANY, None),
    )


class FeeEstimator:
    """Measures GAS consumption of prospective invocations."""

    def __init__(
        self,
        client: LedgerClient,
        network: Network,
        retry_config: Optional[RetryConfig] = None,
        multiplier: Decimal = GAS_SAFETY_MULTIPLIER,
    ) -> None:
        if multiplier <= 1:
            raise ValueError("multiplier must be greater than 1")
        self._client = client
        self._network = network
        self._retry_config = retry_config
        self._multiplier = multiplier

    async def estimate_invoke(
        self,
        sender_script_hash: str,
        script_hash: str,
        operation: str,
        params: Sequence[ContractParam] = (),
    ) -> FeeEstimate:
        """
        Estimate fees for a contract call signed by ``sender_script_hash``.

        Raises:
            ContractError: If the dry run faults
        """
        result = await dry_run(
            self._client,
            script_hash,
            operation,
            params,
            [signer_for(sender_script_hash)],
            retry_config=self._retry_config,
        )
        min_required = fractions_to_gas(gas_consumed(result))
        estimate = FeeEstimate(
            estimated_gas=apply_safety_margin(min_required, self._multiplier),
            min_required=min_required,
            network=self._network,
        )
        _logger.debug(
            "Fee estimated",
            extra={
                "script_hash": script_hash,
                "operation": operation,
                "min_required": str(estimate.min_required),
                "estimated_gas": str(estimate.estimated_gas),
            },
        )
        return estimate

    async def estimate_transfer(
        self,
        from_script_hash: str,
        to_script_hash: str,
        asset_hash: str,
        amount_fractions: int,
    ) -> FeeEstimate:
        """Estimate fees for a NEP-17 transfer."""
        return await self.estimate_invoke(
            from_script_hash,
            asset_hash,
            "transfer",
            nep17_transfer_params(from_script_hash, to_script_hash, amount_fractions),
        )
