"""
Tests for TransactionTracker.
"""

import pytest

from neo_access.config import Network
from neo_access.errors import InvalidHashError, RpcResponseError, RpcTransportError
from neo_access.services.neo_service import NeoService
from neo_access.services.transaction_status import TransactionStatusChecker
from neo_access.services.transaction_tracker import TransactionTracker
from neo_access.utils.retry import RetryConfig

from ..conftest import BLOCK_HASH, TX_HASH, FakeClock, FakeLedgerClient

OTHER_TX = "0x" + "ef" * 32


@pytest.fixture
def tracker(ledger: FakeLedgerClient, fast_retry: RetryConfig, clock: FakeClock) -> TransactionTracker:
    checker = TransactionStatusChecker(ledger, Network.TESTNET, fast_retry)
    return TransactionTracker(
        checker,
        Network.TESTNET,
        retention_ms=3_600_000,
        not_found_timeout_s=600.0,
        clock=clock,
    )


def confirmed_record():
    return {
        "hash": TX_HASH,
        "blockhash": BLOCK_HASH,
        "blockheight": 990,
        "blocktime": 1700000000000,
    }


# =============================================================================
# Tracking
# =============================================================================


class TestTrack:
    def test_new_entry_is_pending(self, tracker: TransactionTracker, clock: FakeClock) -> None:
        entry = tracker.track(TX_HASH[2:].upper())

        assert entry.txid == TX_HASH
        assert entry.status == "pending"
        assert entry.confirmations == 0
        assert entry.tracked_at == clock.now
        assert tracker.get(TX_HASH) == entry

    def test_tracking_twice_keeps_first_entry(
        self, tracker: TransactionTracker, clock: FakeClock
    ) -> None:
        first = tracker.track(TX_HASH)
        clock.advance(5)

        assert tracker.track(TX_HASH) == first
        assert len(tracker.list()) == 1

    def test_invalid_txid(self, tracker: TransactionTracker) -> None:
        with pytest.raises(InvalidHashError):
            tracker.track("0x1234")

    def test_untracked_is_none(self, tracker: TransactionTracker) -> None:
        assert tracker.get(TX_HASH) is None

    def test_pending_count_and_untrack(self, tracker: TransactionTracker) -> None:
        tracker.track(TX_HASH)
        tracker.track(OTHER_TX)
        assert tracker.pending_count() == 2

        tracker.untrack(OTHER_TX)

        assert tracker.pending_count() == 1
        assert [entry.txid for entry in tracker.list()] == [TX_HASH]

    def test_entries_expire_after_retention(
        self, tracker: TransactionTracker, clock: FakeClock
    ) -> None:
        tracker.track(TX_HASH)
        clock.advance(3601)

        assert tracker.get(TX_HASH) is None


# =============================================================================
# Refresh
# =============================================================================


class TestRefresh:
    @pytest.mark.asyncio
    async def test_confirmed(
        self, tracker: TransactionTracker, ledger: FakeLedgerClient
    ) -> None:
        tracker.track(TX_HASH)
        ledger.get_raw_transaction.return_value = confirmed_record()

        refreshed = await tracker.refresh()

        entry = tracker.get(TX_HASH)
        assert refreshed == [entry]
        assert entry.status == "confirmed"
        assert entry.confirmations == 10
        assert entry.block_height == 990
        assert entry.block_time == 1700000000000
        assert tracker.pending_count() == 0

    @pytest.mark.asyncio
    async def test_settled_entries_are_not_rechecked(
        self, tracker: TransactionTracker, ledger: FakeLedgerClient
    ) -> None:
        tracker.track(TX_HASH)
        ledger.get_raw_transaction.return_value = confirmed_record()
        await tracker.refresh()

        assert await tracker.refresh() == []
        assert ledger.get_raw_transaction.await_count == 1

    @pytest.mark.asyncio
    async def test_pending_updates_last_checked(
        self, tracker: TransactionTracker, ledger: FakeLedgerClient, clock: FakeClock
    ) -> None:
        tracker.track(TX_HASH)
        clock.advance(15)
        ledger.get_raw_transaction.return_value = {"hash": TX_HASH, "validuntilblock": 6760}

        await tracker.refresh()

        entry = tracker.get(TX_HASH)
        assert entry.status == "pending"
        assert entry.last_checked == entry.tracked_at + 15

    @pytest.mark.asyncio
    async def test_not_found_fails_only_after_timeout(
        self, tracker: TransactionTracker, ledger: FakeLedgerClient, clock: FakeClock
    ) -> None:
        tracker.track(TX_HASH)
        ledger.get_raw_transaction.side_effect = RpcResponseError("Unknown", rpc_code=-100)

        clock.advance(300)
        await tracker.refresh()
        assert tracker.get(TX_HASH).status == "pending"

        clock.advance(301)
        await tracker.refresh()
        entry = tracker.get(TX_HASH)
        assert entry.status == "failed"
        assert entry.error == "Transaction not found after timeout"

    @pytest.mark.asyncio
    async def test_node_failure_is_recorded_per_entry(
        self, tracker: TransactionTracker, ledger: FakeLedgerClient
    ) -> None:
        tracker.track(TX_HASH)
        tracker.track(OTHER_TX)
        ledger.get_raw_transaction.side_effect = [
            RpcTransportError("connection reset"),
            RpcTransportError("connection reset"),
            RpcTransportError("connection reset"),
            confirmed_record(),
        ]

        await tracker.refresh()

        failed, confirmed = tracker.get(TX_HASH), tracker.get(OTHER_TX)
        assert failed.status == "pending"
        assert "connection reset" in failed.error
        assert confirmed.status == "confirmed"

    @pytest.mark.asyncio
    async def test_caller_cannot_mutate_tracked_state(
        self, tracker: TransactionTracker, ledger: FakeLedgerClient
    ) -> None:
        entry = tracker.track(TX_HASH)

        with pytest.raises(Exception):
            entry.status = "confirmed"

        assert tracker.get(TX_HASH).status == "pending"


# =============================================================================
# Service Integration
# =============================================================================


class TestServiceTracking:
    @pytest.mark.asyncio
    async def test_track_and_refresh_through_service(
        self, service: NeoService, ledger: FakeLedgerClient
    ) -> None:
        service.track_transaction(TX_HASH)
        ledger.get_raw_transaction.return_value = confirmed_record()

        refreshed = await service.refresh_tracked_transactions()

        assert refreshed[0].status == "confirmed"
        assert refreshed[0].network is Network.TESTNET
        assert service.transaction_tracker.pending_count() == 0
