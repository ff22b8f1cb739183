"""
Error taxonomy for neo-access.

Each top-level class maps to one error kind. Kinds that are plausibly
retryable after a backoff (NetworkError, RateLimitError) set
``retryable = True``; all others are terminal.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from neo_access.errors.base import NeoAccessError


class ValidationError(NeoAccessError):
    """
    Raised when input is malformed or out of range.

    Always raised before any network call is made.

    Example:
        >>> raise ValidationError("Password must be at least 8 characters long")
    """

    kind = "ValidationError"

    def __init__(
        self,
        message: str,
        *,
        code: str = "VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class InvalidAddressError(ValidationError):
    """
    Raised when a ledger address is malformed.

    Example:
        >>> raise InvalidAddressError("Nbad", reason="must be 34 characters")
    """

    def __init__(
        self,
        address: str,
        *,
        field: str = "address",
        reason: Optional[str] = None,
    ) -> None:
        message = f"Invalid {field}: {address}"
        if reason:
            message += f" ({reason})"
        super().__init__(
            message,
            code="INVALID_ADDRESS",
            details={"field": field, "value": address, "reason": reason},
        )
        self.address = address
        self.reason = reason


class InvalidHashError(ValidationError):
    """
    Raised when a transaction, block or script hash is malformed.

    Example:
        >>> raise InvalidHashError("0x12", expected_length=64)
    """

    def __init__(
        self,
        value: str,
        *,
        field: str = "hash",
        expected_length: int = 64,
        reason: Optional[str] = None,
    ) -> None:
        message = f"Invalid {field}: {value}"
        if reason:
            message += f" ({reason})"
        super().__init__(
            message,
            code="INVALID_HASH",
            details={
                "field": field,
                "value": value,
                "expected_length": expected_length,
                "reason": reason,
            },
        )
        self.value = value


class InvalidAmountError(ValidationError):
    """
    Raised when an amount is not a positive, finite, bounded decimal.

    Example:
        >>> raise InvalidAmountError("-1", reason="must be greater than zero")
    """

    def __init__(
        self,
        amount: str,
        *,
        field: str = "amount",
        reason: Optional[str] = None,
        max_amount: Optional[str] = None,
    ) -> None:
        details: Dict[str, Any] = {"field": field, "value": amount, "reason": reason}
        if max_amount is not None:
            details["max_amount"] = max_amount
        message = f"Invalid {field}: {amount}"
        if reason:
            message += f" ({reason})"
        super().__init__(message, code="INVALID_AMOUNT", details=details)
        self.amount = amount
        self.reason = reason


class NetworkError(NeoAccessError):
    """
    Raised when the node is unreachable or returns a malformed/empty response.

    Also raised when the ledger client cannot be constructed.
    """

    kind = "NetworkError"
    retryable = True

    def __init__(
        self,
        message: str,
        *,
        code: str = "NETWORK_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class RpcTransportError(NetworkError):
    """
    Connection-level failure (refused, reset, timeout, 502/503/504).

    This is the only error class the RPC retry policy retries.
    """

    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        details: Dict[str, Any] = {"method": method}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, code="RPC_TRANSPORT_ERROR", details=details)
        self.method = method
        self.status_code = status_code


class RpcResponseError(NetworkError):
    """
    The node answered with a JSON-RPC error object.

    The node is reachable, so this is not retried.
    """

    retryable = False

    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        rpc_code: Optional[int] = None,
        data: Any = None,
    ) -> None:
        super().__init__(
            message,
            code="RPC_RESPONSE_ERROR",
            details={"method": method, "rpc_code": rpc_code, "data": data},
        )
        self.method = method
        self.rpc_code = rpc_code
        self.data = data


class ContractError(NeoAccessError):
    """
    Raised for unknown contracts/operations and for VM FAULT results.

    Example:
        >>> raise ContractError(
        ...     "Contract execution failed: ASSERT is executed with false result.",
        ...     code="VM_FAULT",
        ...     details={"vm_state": "FAULT"},
        ... )
    """

    kind = "ContractError"

    def __init__(
        self,
        message: str,
        *,
        code: str = "CONTRACT_ERROR",
        details: Optional[Dict[str, Any]] = None,
        vm_exception: Optional[str] = None,
    ) -> None:
        details = details or {}
        if vm_exception is not None:
            details["vm_exception"] = vm_exception
        super().__init__(message, code=code, details=details)
        self.vm_exception = vm_exception


class TransactionError(NeoAccessError):
    """Raised when a broadcast is rejected (e.g. insufficient funds)."""

    kind = "TransactionError"

    def __init__(
        self,
        message: str,
        *,
        code: str = "TRANSACTION_ERROR",
        tx_hash: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if tx_hash:
            details["tx_hash"] = tx_hash
        super().__init__(message, code=code, details=details)
        self.tx_hash = tx_hash


class RateLimitError(NeoAccessError):
    """
    Raised when a client exceeds its admission window.

    Example:
        >>> raise RateLimitError(limit=60, current=61, retry_after=12)
    """

    kind = "RateLimitError"
    retryable = True

    def __init__(
        self,
        *,
        limit: int,
        current: int,
        retry_after: int,
        key: Optional[str] = None,
    ) -> None:
        super().__init__(
            f"Rate limit exceeded. Try again in {retry_after} seconds.",
            code="RATE_LIMITED",
            details={
                "limit": limit,
                "current": current,
                "retry_after": retry_after,
                "key": key,
            },
        )
        self.limit = limit
        self.current = current
        self.retry_after = retry_after


class WalletError(NeoAccessError):
    """Raised when key generation, derivation, decryption or signing fails."""

    kind = "WalletError"

    def __init__(
        self,
        message: str,
        *,
        code: str = "WALLET_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class InternalError(NeoAccessError):
    """Anything that does not fit another kind."""

    kind = "InternalError"

    def __init__(
        self,
        message: str,
        *,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)
