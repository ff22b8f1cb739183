"""Constants for neo-access.

This module defines constant values used across the package, including
address and hash formats, native asset metadata, fee parameters,
transaction validity, and validation bounds.
"""

from decimal import Decimal

# Address / Hash Constants
ADDRESS_LENGTH = 34
ADDRESS_VERSION = 0x35  # N3 addresses start with "N"
HASH_HEX_LENGTH = 64  # tx / block hash
SCRIPT_HASH_HEX_LENGTH = 40  # contract / account script hash

# Native Assets
NEO_HASH = "0xef4073a0f2b305a38ec4050e4d3d28bc40ea63f5"
GAS_HASH = "0xd2a4cff31913016155e38e474a2c06d08be276cf"
NEO_DECIMALS = 0
GAS_DECIMALS = 8
NATIVE_ASSETS = {
    "NEO": (NEO_HASH, NEO_DECIMALS),
    "GAS": (GAS_HASH, GAS_DECIMALS),
}

# Fee Constants
GAS_SAFETY_MULTIPLIER = Decimal("1.15")
GAS_FRACTION = Decimal("0.00000001")  # 1 datoshi

# Transaction Constants
VALID_UNTIL_BLOCK_INCREMENT = 5760  # ~1 day at 15s blocks
DEFAULT_SIGNER_SCOPE = "CalledByEntry"

# Validation Bounds
MAX_TRANSFER_AMOUNT = Decimal(1_000_000_000)
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 100

# RPC Constants
RPC_TIMEOUT_SECONDS = 30
RPC_UNKNOWN_TRANSACTION_CODE = -100
TRANSIENT_HTTP_STATUSES = frozenset({502, 503, 504})

# Cache / Rate Limit Defaults
DEFAULT_CACHE_TTL_MS = 30_000
DEFAULT_MAX_REQUESTS_PER_MINUTE = 60
DEFAULT_RATE_LIMIT_KEY = "default"

__all__ = [
    "ADDRESS_LENGTH",
    "ADDRESS_VERSION",
    "HASH_HEX_LENGTH",
    "SCRIPT_HASH_HEX_LENGTH",
    "NEO_HASH",
    "GAS_HASH",
    "NEO_DECIMALS",
    "GAS_DECIMALS",
    "NATIVE_ASSETS",
    "GAS_SAFETY_MULTIPLIER",
    "GAS_FRACTION",
    "VALID_UNTIL_BLOCK_INCREMENT",
    "DEFAULT_SIGNER_SCOPE",
    "MAX_TRANSFER_AMOUNT",
    "MIN_PASSWORD_LENGTH",
    "MAX_PASSWORD_LENGTH",
    "RPC_TIMEOUT_SECONDS",
    "RPC_UNKNOWN_TRANSACTION_CODE",
    "TRANSIENT_HTTP_STATUSES",
    "DEFAULT_CACHE_TTL_MS",
    "DEFAULT_MAX_REQUESTS_PER_MINUTE",
    "DEFAULT_RATE_LIMIT_KEY",
]
