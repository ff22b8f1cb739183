"""
Account abstraction.

Key generation, NEP-2 encryption and transaction signing live outside this
package. The service layer depends only on the protocols below and hands
accounts an ``UnsignedTransaction`` to sign.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Tuple, runtime_checkable


@dataclass(frozen=True)
class UnsignedTransaction:
    """
    A transaction ready for signing.

    Attributes:
        script: Invocation script (base64) as returned by the dry run
        signers: Signer entries in RPC form (``account`` / ``scopes``)
        system_fee: System fee in GAS fractions (``gasconsumed``)
        valid_until_block: Last block height at which it may be included
        network_magic: Magic number of the target network
    """

    script: str
    signers: Tuple[Dict[str, Any], ...]
    system_fee: int
    valid_until_block: int
    network_magic: int
    attributes: Tuple[Dict[str, Any], ...] = field(default_factory=tuple)

    @property
    def sender(self) -> Optional[str]:
        """Script hash of the first signer (the fee payer)."""
        if not self.signers:
            return None
        return self.signers[0].get("account")


@runtime_checkable
class Account(Protocol):
    """Anything that has an address and can sign."""

    @property
    def address(self) -> str: ...

    def sign_transaction(self, tx: UnsignedTransaction) -> str:
        """Return the signed transaction, base64-encoded, ready to broadcast."""
        ...


@runtime_checkable
class WalletAccount(Account, Protocol):
    """An account holding its private key in memory."""

    @property
    def public_key(self) -> str: ...

    @property
    def wif(self) -> str: ...

    def encrypt(self, password: str) -> str:
        """Return the NEP-2 encrypted private key."""
        ...


class AccountBackend(Protocol):
    """Produces WalletAccounts from fresh or imported key material."""

    def create(self) -> WalletAccount: ...

    def from_wif(self, wif: str) -> WalletAccount: ...

    def from_private_key(self, private_key_hex: str) -> WalletAccount: ...

    def decrypt(self, nep2_key: str, password: str) -> WalletAccount: ...
