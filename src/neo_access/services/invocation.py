"""
Node call helpers shared by the service layer.

``call_node`` runs one node call under the retry policy and converts
anything outside the error taxonomy into NetworkError. ``dry_run`` executes
``invokefunction`` and returns the VM result only when the VM halted
normally; a FAULT always raises ContractError with the VM exception text
and is never retried.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, TypeVar

from neo_access.constants import DEFAULT_SIGNER_SCOPE, GAS_DECIMALS
from neo_access.errors import ContractError, NeoAccessError, NetworkError
from neo_access.rpc.client import LedgerClient
from neo_access.rpc.params import ContractParam
from neo_access.utils.logging import get_logger
from neo_access.utils.retry import RetryConfig, retry_async

T = TypeVar("T")

_logger = get_logger(__name__)


async def call_node(
    operation: str,
    fn: Callable[[], Awaitable[T]],
    retry_config: Optional[RetryConfig] = None,
) -> T:
    """
    Execute one node call with retry.

    Raises:
        NeoAccessError: Errors from the taxonomy propagate unchanged
        NetworkError: Wraps any other exception raised by the client
    """
    try:
        return await retry_async(fn, retry_config, operation=operation)
    except NeoAccessError:
        raise
    except Exception as e:
        raise NetworkError(
            f"{operation} failed: {e}",
            details={"operation": operation, "cause": e.__class__.__name__},
        ) from e


def signer_for(account_script_hash: str, scopes: str = DEFAULT_SIGNER_SCOPE) -> Dict[str, Any]:
    return {"account": account_script_hash, "scopes": scopes}


def ensure_halt(result: Any, *, script_hash: str, operation: str) -> Dict[str, Any]:
    """
    Validate a VM result.

    Raises:
        NetworkError: If the node returned something other than a VM result
        ContractError: If the VM state is FAULT
    """
    if not isinstance(result, dict) or "state" not in result:
        raise NetworkError(
            f"Malformed invocation result for {operation}",
            code="MALFORMED_RESPONSE",
            details={"script_hash": script_hash, "operation": operation},
        )

    state = str(result.get("state", ""))
    if "FAULT" in state.upper():
        exception = result.get("exception") or "unknown VM exception"
        _logger.warning(
            "Contract execution faulted",
            extra={"script_hash": script_hash, "operation": operation, "vm_exception": exception},
        )
        raise ContractError(
            f"Contract execution failed: {exception}",
            code="VM_FAULT",
            details={
                "script_hash": script_hash,
                "operation": operation,
                "vm_state": state,
                "gas_consumed": result.get("gasconsumed"),
            },
            vm_exception=str(exception),
        )

    return result


def gas_consumed(result: Dict[str, Any]) -> int:
    """``gasconsumed`` in GAS fractions."""
    raw = result.get("gasconsumed")
    try:
        value = int(str(raw))
    except (TypeError, ValueError):
        raise NetworkError(
            "Invocation result has no usable gasconsumed",
            code="MALFORMED_RESPONSE",
            details={"gasconsumed": raw},
        )
    if value < 0:
        raise NetworkError(
            "Invocation result reports negative gasconsumed",
            code="MALFORMED_RESPONSE",
            details={"gasconsumed": raw},
        )
    return value


def stack_integer(result: Dict[str, Any], index: int = 0) -> int:
    """Read an Integer item from the result stack."""
    stack = result.get("stack")
    item = stack[index] if isinstance(stack, list) and len(stack) > index else None
    if not isinstance(item, dict) or item.get("type") != "Integer":
        raise NetworkError(
            "Invocation result has no Integer on the stack",
            code="MALFORMED_RESPONSE",
            details={"stack": stack},
        )
    try:
        return int(str(item.get("value")))
    except ValueError:
        raise NetworkError(
            "Invocation result has a malformed Integer",
            code="MALFORMED_RESPONSE",
            details={"stack": stack},
        )


def fractions_to_gas(fractions: int) -> Decimal:
    return Decimal(fractions).scaleb(-GAS_DECIMALS)


async def dry_run(
    client: LedgerClient,
    script_hash: str,
    operation: str,
    params: Sequence[ContractParam] = (),
    signers: Sequence[Dict[str, Any]] = (),
    *,
    retry_config: Optional[RetryConfig] = None,
) -> Dict[str, Any]:
    """Run ``operation`` on ``script_hash`` without broadcasting."""
    payload = [p.to_json() for p in params]
    result = await call_node(
        "invokefunction",
        lambda: client.invoke_function(script_hash, operation, payload, list(signers)),
        retry_config,
    )
    return ensure_halt(result, script_hash=script_hash, operation=operation)
