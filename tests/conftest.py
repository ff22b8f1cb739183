"""
Shared fixtures for neo-access tests.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import base58
import pytest

from neo_access.accounts import UnsignedTransaction
from neo_access.config import Network
from neo_access.services.neo_service import NeoService
from neo_access.utils.retry import RetryConfig


# =============================================================================
# Test Constants
# =============================================================================


def make_address(seed: int) -> str:
    """Valid N3 address whose script hash bytes are ``seed, seed+1, ...``."""
    payload = bytes((seed + i) % 256 for i in range(20))
    return base58.b58encode_check(b"\x35" + payload).decode("ascii")


def script_hash_of(seed: int) -> str:
    payload = bytes((seed + i) % 256 for i in range(20))
    return "0x" + payload[::-1].hex()


SENDER_ADDRESS = make_address(1)
SENDER_SCRIPT_HASH = script_hash_of(1)
RECIPIENT_ADDRESS = make_address(100)
RECIPIENT_SCRIPT_HASH = script_hash_of(100)

TX_HASH = "0x" + "ab" * 32
BLOCK_HASH = "0x" + "cd" * 32
CONTRACT_HASH = "0x" + "12" * 20
SIGNED_TX = "c2lnbmVkLXRyYW5zYWN0aW9u"
VALIDATOR_KEY = "02" + "a" * 64


def halt_result(
    gas: int = 9977450,
    stack: Optional[List[Dict[str, Any]]] = None,
    script: str = "EMAMCHRyYW5zZmVy",
) -> Dict[str, Any]:
    """A successful invokefunction result."""
    return {
        "script": script,
        "state": "HALT",
        "gasconsumed": str(gas),
        "exception": None,
        "stack": stack if stack is not None else [{"type": "Boolean", "value": True}],
    }


def fault_result(exception: str = "ASSERT is executed with false result.") -> Dict[str, Any]:
    return {
        "script": "EMAMCHRyYW5zZmVy",
        "state": "FAULT",
        "gasconsumed": "1000000",
        "exception": exception,
        "stack": [],
    }


# =============================================================================
# Fakes
# =============================================================================


class FakeLedgerClient:
    """LedgerClient with an AsyncMock per node method."""

    def __init__(self) -> None:
        self.get_block_count = AsyncMock(return_value=1000)
        self.get_next_block_validators = AsyncMock(
            return_value=[{"publickey": VALIDATOR_KEY, "votes": "42"}]
        )
        self.get_block = AsyncMock(
            return_value={"hash": BLOCK_HASH, "index": 10, "time": 1700000000000}
        )
        self.get_block_header = AsyncMock(return_value={"hash": BLOCK_HASH, "index": 990})
        self.get_raw_transaction = AsyncMock(return_value={"hash": TX_HASH})
        self.get_nep17_balances = AsyncMock(
            return_value={
                "address": SENDER_ADDRESS,
                "balance": [
                    {
                        "assethash": "0xd2a4cff31913016155e38e474a2c06d08be276cf",
                        "amount": "150000000",
                        "lastupdatedblock": 900,
                    }
                ],
            }
        )
        self.invoke_function = AsyncMock(return_value=halt_result())
        self.send_raw_transaction = AsyncMock(return_value={"hash": TX_HASH})
        self.get_version = AsyncMock(return_value={"useragent": "/Neo:3.6.0/"})
        self.aclose = AsyncMock()

    @property
    def node_calls(self) -> int:
        """Total awaited node calls, excluding aclose."""
        return sum(
            mock.await_count
            for mock in (
                self.get_block_count,
                self.get_next_block_validators,
                self.get_block,
                self.get_block_header,
                self.get_raw_transaction,
                self.get_nep17_balances,
                self.invoke_function,
                self.send_raw_transaction,
                self.get_version,
            )
        )


class FakeAccount:
    """Account that records what it signs."""

    def __init__(self, address: str = SENDER_ADDRESS, signed: str = SIGNED_TX) -> None:
        self._address = address
        self._signed = signed
        self.signed_transactions: List[UnsignedTransaction] = []

    @property
    def address(self) -> str:
        return self._address

    def sign_transaction(self, tx: UnsignedTransaction) -> str:
        self.signed_transactions.append(tx)
        return self._signed


class FailingAccount(FakeAccount):
    def sign_transaction(self, tx: UnsignedTransaction) -> str:
        raise RuntimeError("hardware wallet disconnected")


class FakeWalletAccount(FakeAccount):
    def __init__(self, address: str = SENDER_ADDRESS, wif: str = "KxFakeWif") -> None:
        super().__init__(address)
        self._wif = wif

    @property
    def public_key(self) -> str:
        return "03" + "b" * 64

    @property
    def wif(self) -> str:
        return self._wif

    def encrypt(self, password: str) -> str:
        return "6P" + ("Y" * 56)


NEP2_KEY = "6P" + ("Y" * 56)
NEP2_PASSWORD = "correct horse"


class FakeAccountBackend:
    def __init__(self) -> None:
        self.calls: List[str] = []

    def create(self) -> FakeWalletAccount:
        self.calls.append("create")
        return FakeWalletAccount()

    def from_wif(self, wif: str) -> FakeWalletAccount:
        self.calls.append("from_wif")
        if not wif.startswith(("K", "L")):
            raise ValueError("invalid WIF")
        return FakeWalletAccount(wif=wif)

    def from_private_key(self, private_key_hex: str) -> FakeWalletAccount:
        self.calls.append("from_private_key")
        return FakeWalletAccount()

    def decrypt(self, nep2_key: str, password: str) -> FakeWalletAccount:
        self.calls.append("decrypt")
        if password != NEP2_PASSWORD:
            raise ValueError("wrong password")
        return FakeWalletAccount()


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ledger() -> FakeLedgerClient:
    return FakeLedgerClient()


@pytest.fixture
def fast_retry() -> RetryConfig:
    """Three attempts without sleeping."""
    return RetryConfig(max_attempts=3, base_delay_ms=0, max_delay_ms=0, jitter=False)


@pytest.fixture
def account_backend() -> FakeAccountBackend:
    return FakeAccountBackend()


@pytest.fixture
def service(
    ledger: FakeLedgerClient,
    fast_retry: RetryConfig,
    account_backend: FakeAccountBackend,
) -> NeoService:
    return NeoService(
        network=Network.TESTNET,
        client=ledger,
        retry_config=fast_retry,
        account_backend=account_backend,
        max_amount=Decimal(1_000_000_000),
    )


@pytest.fixture
def account() -> FakeAccount:
    return FakeAccount()
