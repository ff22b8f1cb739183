"""
Exception hierarchy for neo-access.

    NeoAccessError
    ├── ValidationError
    │   ├── InvalidAddressError
    │   ├── InvalidHashError
    │   └── InvalidAmountError
    ├── NetworkError
    │   ├── RpcTransportError
    │   └── RpcResponseError
    ├── ContractError
    ├── TransactionError
    ├── RateLimitError
    ├── WalletError
    └── InternalError
"""

from neo_access.errors.base import NeoAccessError
from neo_access.errors.handler import normalize_error, to_error_response
from neo_access.errors.types import (
    ContractError,
    InternalError,
    InvalidAddressError,
    InvalidAmountError,
    InvalidHashError,
    NetworkError,
    RateLimitError,
    RpcResponseError,
    RpcTransportError,
    TransactionError,
    ValidationError,
    WalletError,
)

__all__ = [
    "NeoAccessError",
    "ValidationError",
    "InvalidAddressError",
    "InvalidHashError",
    "InvalidAmountError",
    "NetworkError",
    "RpcTransportError",
    "RpcResponseError",
    "ContractError",
    "TransactionError",
    "RateLimitError",
    "WalletError",
    "InternalError",
    "normalize_error",
    "to_error_response",
]
