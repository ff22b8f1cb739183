"""
Result models returned by the service layer.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from neo_access.config import Network


# ============================================================================
# Chain State
# ============================================================================

class BlockchainInfo(BaseModel):
    """Current chain height plus the next validator set."""

    model_config = ConfigDict(frozen=True)

    height: int = Field(..., gt=0, description="Block count reported by the node")
    validators: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Entries from getnextblockvalidators",
    )
    network: Network


# ============================================================================
# Transaction Status
# ============================================================================

class NotFoundStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["not_found"] = "not_found"
    txid: str
    network: Network
    message: str = Field(..., min_length=1)


class PendingStatus(BaseModel):
    """Known to the node, not yet in a block."""

    model_config = ConfigDict(frozen=True)

    status: Literal["pending"] = "pending"
    txid: str
    network: Network
    sender: Optional[str] = None
    system_fee: Optional[str] = None
    network_fee: Optional[str] = None
    valid_until_block: Optional[int] = None


class ConfirmedStatus(BaseModel):
    """Included in a block."""

    model_config = ConfigDict(frozen=True)

    status: Literal["confirmed"] = "confirmed"
    txid: str
    network: Network
    confirmations: int = Field(..., ge=1)
    block_height: int = Field(..., ge=0)
    block_hash: str
    block_time: Optional[int] = Field(
        default=None,
        description="Block timestamp in milliseconds",
    )


TransactionStatus = Annotated[
    Union[NotFoundStatus, PendingStatus, ConfirmedStatus],
    Field(discriminator="status"),
]


class TrackedTransaction(BaseModel):
    """
    A transaction followed by TransactionTracker.

    ``failed`` means the node never reported the transaction within the
    tracker's not-found timeout. Times are seconds on the tracker clock.
    """

    model_config = ConfigDict(frozen=True)

    txid: str
    network: Network
    status: Literal["pending", "confirmed", "failed"] = "pending"
    confirmations: int = Field(default=0, ge=0)
    block_height: Optional[int] = None
    block_time: Optional[int] = None
    error: Optional[str] = None
    tracked_at: float
    last_checked: float


# ============================================================================
# Fees
# ============================================================================

class FeeEstimate(BaseModel):
    """
    GAS needed for an operation.

    ``min_required`` is the dry-run consumption; ``estimated_gas`` adds the
    safety margin and is always strictly greater.
    """

    model_config = ConfigDict(frozen=True)

    estimated_gas: Decimal
    min_required: Decimal
    network: Network

    @model_validator(mode="after")
    def _check_margin(self) -> "FeeEstimate":
        if self.estimated_gas <= self.min_required:
            raise ValueError("estimated_gas must exceed min_required")
        return self


# ============================================================================
# Writes and Wallets
# ============================================================================

class TransactionResult(BaseModel):
    """Outcome of a successful broadcast."""

    model_config = ConfigDict(frozen=True)

    txid: str
    network: Network
    sender: str
    system_fee: str = Field(..., description="System fee in GAS")
    valid_until_block: int


class WalletRecord(BaseModel):
    """
    Key material for a new or imported wallet.

    Exactly one of ``encrypted_private_key`` and ``wif`` is set: a wallet
    produced with a password never carries the plaintext key.
    """

    model_config = ConfigDict(frozen=True)

    address: str
    public_key: str
    encrypted_private_key: Optional[str] = None
    wif: Optional[str] = None

    @model_validator(mode="after")
    def _check_key_material(self) -> "WalletRecord":
        if (self.encrypted_private_key is None) == (self.wif is None):
            raise ValueError("exactly one of encrypted_private_key and wif must be set")
        return self
