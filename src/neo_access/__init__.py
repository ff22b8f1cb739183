"""
neo-access - resilient access layer for Neo N3 JSON-RPC nodes.

Quick Start:
    >>> from neo_access import NetworkRegistry
    >>> import asyncio
    >>>
    >>> async def main():
    ...     registry = NetworkRegistry.from_settings()
    ...     service = registry.service_for("testnet")
    ...     info = await service.get_blockchain_info()
    ...     print(f"Height: {info.height}")
    ...     await registry.aclose()
    ...
    >>> asyncio.run(main())

Modules:
- `services`: NeoService facade, FeeEstimator, TransactionStatusChecker,
  TransactionTracker
- `contracts`: ContractRegistry catalog and ContractService
- `rpc`: JSON-RPC client and typed contract parameters
- `networks` / `config`: network selection and environment settings
- `errors`: Exception hierarchy and uniform error shape
- `utils`: cache, rate limiter, retry, validation and logging
"""

from neo_access.version import __version__, __version_info__

from neo_access.accounts import Account, AccountBackend, UnsignedTransaction, WalletAccount
from neo_access.config import (
    NETWORKS,
    Network,
    NetworkConfig,
    NetworkMode,
    Settings,
    get_network_config,
    load_settings,
)
from neo_access.contracts import (
    DEFAULT_REGISTRY,
    FAMOUS_CONTRACTS,
    ContractDescriptor,
    ContractRegistry,
    ContractService,
    OperationSpec,
)
from neo_access.errors import (
    ContractError,
    InternalError,
    InvalidAddressError,
    InvalidAmountError,
    InvalidHashError,
    NeoAccessError,
    NetworkError,
    RateLimitError,
    RpcResponseError,
    RpcTransportError,
    TransactionError,
    ValidationError,
    WalletError,
    normalize_error,
    to_error_response,
)
from neo_access.models import (
    BlockchainInfo,
    ConfirmedStatus,
    FeeEstimate,
    NotFoundStatus,
    PendingStatus,
    TrackedTransaction,
    TransactionResult,
    TransactionStatus,
    WalletRecord,
)
from neo_access.networks import NetworkRegistry
from neo_access.rpc import ContractParam, LedgerClient, NeoRpcClient, ParamType, marshal_param
from neo_access.services import (
    FeeEstimator,
    NeoService,
    TransactionStatusChecker,
    TransactionTracker,
)
from neo_access.utils import RateLimiter, RetryConfig, TTLCache, retry_async

__all__ = [
    "__version__",
    "__version_info__",
    # Accounts
    "Account",
    "AccountBackend",
    "UnsignedTransaction",
    "WalletAccount",
    # Config
    "NETWORKS",
    "Network",
    "NetworkConfig",
    "NetworkMode",
    "Settings",
    "get_network_config",
    "load_settings",
    "NetworkRegistry",
    # Contracts
    "DEFAULT_REGISTRY",
    "FAMOUS_CONTRACTS",
    "ContractDescriptor",
    "ContractRegistry",
    "ContractService",
    "OperationSpec",
    # Errors
    "NeoAccessError",
    "ValidationError",
    "InvalidAddressError",
    "InvalidAmountError",
    "InvalidHashError",
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
    # Models
    "BlockchainInfo",
    "ConfirmedStatus",
    "FeeEstimate",
    "NotFoundStatus",
    "PendingStatus",
    "TrackedTransaction",
    "TransactionResult",
    "TransactionStatus",
    "WalletRecord",
    # RPC
    "ContractParam",
    "LedgerClient",
    "NeoRpcClient",
    "ParamType",
    "marshal_param",
    # Services
    "FeeEstimator",
    "NeoService",
    "TransactionStatusChecker",
    "TransactionTracker",
    # Utils
    "RateLimiter",
    "RetryConfig",
    "TTLCache",
    "retry_async",
]
