"""
Transaction lifecycle classification.

A transaction id is classified fresh on every call, nothing is persisted:

- the node does not know it          -> not_found
- known, no ``blockhash`` yet        -> pending
- known, with ``blockhash``          -> confirmed

Confirmations count the blocks from the transaction's block up to the chain
head inclusive. The head index is ``getblockcount - 1``, so a transaction in
the newest block has one confirmation. A transaction whose ``validuntilblock``
has passed without inclusion is still reported as pending.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

from neo_access.config import Network
from neo_access.constants import RPC_UNKNOWN_TRANSACTION_CODE
from neo_access.errors import NetworkError, RpcResponseError
from neo_access.models import (
    ConfirmedStatus,
    NotFoundStatus,
    PendingStatus,
    TransactionStatus,
)
from neo_access.rpc.client import LedgerClient
from neo_access.services.invocation import call_node
from neo_access.utils.logging import get_logger
from neo_access.utils.retry import RetryConfig
from neo_access.utils.validation import validate_hash

_logger = get_logger(__name__)

_NOT_FOUND_MARKERS = ("unknown transaction", "not found")


def is_not_found_error(error: RpcResponseError) -> bool:
    if error.rpc_code == RPC_UNKNOWN_TRANSACTION_CODE:
        return True
    message = error.message.lower()
    return any(marker in message for marker in _NOT_FOUND_MARKERS)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


class TransactionStatusChecker:
    """
    Classifies transaction ids.

    Example:
        ```python
        checker = TransactionStatusChecker(client, Network.TESTNET)
        status = await checker.check(txid)
        if status.status == "confirmed":
            print(status.confirmations)
        ```
    """

    def __init__(
        self,
        client: LedgerClient,
        network: Network,
        retry_config: Optional[RetryConfig] = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._network = network
        self._retry_config = retry_config
        self._sleep = sleep

    async def _fetch(self, txid: str) -> Optional[Dict[str, Any]]:
        try:
            record = await call_node(
                "getrawtransaction",
                lambda: self._client.get_raw_transaction(txid, True),
                self._retry_config,
            )
        except RpcResponseError as e:
            if is_not_found_error(e):
                return None
            raise

        if record is None:
            return None
        if not isinstance(record, dict):
            raise NetworkError(
                f"Malformed transaction record for {txid}",
                code="MALFORMED_RESPONSE",
                details={"txid": txid},
            )
        return record

    async def _block_height(self, record: Dict[str, Any], block_hash: str) -> int:
        for key in ("blockheight", "blockindex"):
            height = _optional_int(record.get(key))
            if height is not None:
                return height

        header = await call_node(
            "getblockheader",
            lambda: self._client.get_block_header(block_hash, True),
            self._retry_config,
        )
        height = _optional_int(header.get("index")) if isinstance(header, dict) else None
        if height is None:
            raise NetworkError(
                f"Block header for {block_hash} has no index",
                code="MALFORMED_RESPONSE",
                details={"block_hash": block_hash},
            )
        return height

    async def _head_index(self) -> int:
        """Index of the newest block, one less than ``getblockcount``."""
        count = await call_node(
            "getblockcount",
            self._client.get_block_count,
            self._retry_config,
        )
        block_count = _optional_int(count)
        if block_count is None or block_count <= 0:
            raise NetworkError(
                "Node returned an invalid block count",
                code="MALFORMED_RESPONSE",
                details={"block_count": count},
            )
        return block_count - 1

    async def check(self, txid: str) -> TransactionStatus:
        """
        Classify ``txid``.

        Raises:
            InvalidHashError: If ``txid`` is malformed (no RPC call is made)
            NetworkError: If the node fails or returns a malformed record
        """
        txid = validate_hash(txid, field_name="txid")
        record = await self._fetch(txid)

        if record is None:
            return NotFoundStatus(
                txid=txid,
                network=self._network,
                message=f"Transaction {txid} not found on {self._network.value}",
            )

        block_hash = record.get("blockhash")
        if not block_hash:
            return PendingStatus(
                txid=txid,
                network=self._network,
                sender=_optional_str(record.get("sender")),
                system_fee=_optional_str(record.get("sysfee")),
                network_fee=_optional_str(record.get("netfee")),
                valid_until_block=_optional_int(record.get("validuntilblock")),
            )

        block_height = await self._block_height(record, block_hash)
        head_index = await self._head_index()
        confirmations = max(1, head_index - block_height + 1)

        return ConfirmedStatus(
            txid=txid,
            network=self._network,
            confirmations=confirmations,
            block_height=block_height,
            block_hash=str(block_hash),
            block_time=_optional_int(record.get("blocktime")),
        )

    async def wait_for_confirmation(
        self,
        txid: str,
        poll_interval_s: float = 15.0,
        max_polls: int = 20,
    ) -> TransactionStatus:
        """
        Poll until confirmed or ``max_polls`` checks have been made.

        Returns:
            The confirmed status, or the last status observed
        """
        if max_polls < 1:
            raise ValueError("max_polls must be at least 1")

        status = await self.check(txid)
        polls = 1
        while status.status != "confirmed" and polls < max_polls:
            await self._sleep(poll_interval_s)
            status = await self.check(txid)
            polls += 1

        _logger.info(
            "Stopped polling transaction",
            extra={"txid": txid, "status": status.status, "polls": polls},
        )
        return status
