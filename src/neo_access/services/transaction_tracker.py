"""
Follow submitted transactions until they confirm.

The tracker keeps a set of transaction ids and refreshes the pending ones
when ``refresh`` is awaited. There is no background timer: callers decide
when to poll. Entries are kept for ``retention_ms`` after their last update.

A tracked transaction the node has never reported is marked ``failed`` once
``not_found_timeout_s`` has passed since tracking started.
"""

from __future__ import annotations

import time
from typing import Callable, List, Optional

from neo_access.config import Network
from neo_access.errors import NeoAccessError
from neo_access.models import TrackedTransaction
from neo_access.services.transaction_status import TransactionStatusChecker
from neo_access.utils.cache import TTLCache
from neo_access.utils.logging import get_logger
from neo_access.utils.validation import validate_hash

_logger = get_logger(__name__)

DEFAULT_RETENTION_MS = 86_400_000
DEFAULT_NOT_FOUND_TIMEOUT_S = 3600.0


class TransactionTracker:
    """
    Tracks transactions on one network.

    Example:
        ```python
        tracker = TransactionTracker(checker, Network.TESTNET)
        tracker.track(result.txid)
        await tracker.refresh()
        print(tracker.pending_count())
        ```
    """

    def __init__(
        self,
        checker: TransactionStatusChecker,
        network: Network,
        *,
        retention_ms: int = DEFAULT_RETENTION_MS,
        not_found_timeout_s: float = DEFAULT_NOT_FOUND_TIMEOUT_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._checker = checker
        self._network = network
        self._not_found_timeout_s = not_found_timeout_s
        self._clock = clock
        self._entries: TTLCache[TrackedTransaction] = TTLCache(
            f"tracked:{network.value}", ttl_ms=retention_ms, clock=clock
        )

    @property
    def network(self) -> Network:
        return self._network

    def track(self, txid: str) -> TrackedTransaction:
        """
        Start tracking ``txid``. Tracking an id twice returns the existing entry.

        Raises:
            InvalidHashError: If ``txid`` is malformed
        """
        txid = validate_hash(txid, field_name="txid")
        existing = self._entries.get(txid)
        if existing is not None:
            return existing

        now = self._clock()
        entry = TrackedTransaction(
            txid=txid,
            network=self._network,
            tracked_at=now,
            last_checked=now,
        )
        self._entries.set(txid, entry)
        _logger.info(
            "Tracking transaction",
            extra={"txid": txid, "network": self._network.value},
        )
        return entry

    def get(self, txid: str) -> Optional[TrackedTransaction]:
        return self._entries.get(validate_hash(txid, field_name="txid"))

    def list(self) -> List[TrackedTransaction]:
        return [entry for _, entry in self._entries.entries()]

    def pending_count(self) -> int:
        return sum(1 for entry in self.list() if entry.status == "pending")

    def untrack(self, txid: str) -> None:
        self._entries.remove(validate_hash(txid, field_name="txid"))

    async def _refresh_one(self, entry: TrackedTransaction) -> TrackedTransaction:
        try:
            status = await self._checker.check(entry.txid)
        except NeoAccessError as e:
            _logger.warning(
                "Failed to refresh tracked transaction",
                extra={"txid": entry.txid, "network": self._network.value, "error": str(e)},
            )
            return entry.model_copy(update={"last_checked": self._clock(), "error": str(e)})

        now = self._clock()
        if status.status == "confirmed":
            _logger.info(
                "Tracked transaction confirmed",
                extra={"txid": entry.txid, "confirmations": status.confirmations},
            )
            return entry.model_copy(
                update={
                    "status": "confirmed",
                    "confirmations": status.confirmations,
                    "block_height": status.block_height,
                    "block_time": status.block_time,
                    "error": None,
                    "last_checked": now,
                }
            )

        if status.status == "not_found" and now - entry.tracked_at > self._not_found_timeout_s:
            _logger.warning(
                "Tracked transaction not found after timeout",
                extra={"txid": entry.txid, "network": self._network.value},
            )
            return entry.model_copy(
                update={
                    "status": "failed",
                    "error": "Transaction not found after timeout",
                    "last_checked": now,
                }
            )

        return entry.model_copy(update={"error": None, "last_checked": now})

    async def refresh(self) -> List[TrackedTransaction]:
        """
        Re-check every pending entry once.

        A node failure for one transaction is recorded on that entry's
        ``error`` and does not stop the others from being checked.

        Returns:
            The refreshed entries
        """
        refreshed = []
        for entry in self.list():
            if entry.status != "pending":
                continue
            updated = await self._refresh_one(entry)
            self._entries.set(updated.txid, updated)
            refreshed.append(updated)

        _logger.debug(
            "Refreshed tracked transactions",
            extra={"network": self._network.value, "checked": len(refreshed)},
        )
        return refreshed
