"""
JSON-RPC client for Neo N3 nodes.

Thin transport over ``httpx.AsyncClient``: it builds the JSON-RPC envelope,
classifies failures and returns the raw ``result`` member. Retry, caching
and rate limiting are applied by the caller (see NeoService).

Failure classification:
- connection errors, timeouts, HTTP 502/503/504 -> RpcTransportError
- other HTTP errors, non-JSON bodies, missing ``result`` -> NetworkError
- a JSON-RPC ``error`` object -> RpcResponseError
"""

from __future__ import annotations

import itertools
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

import httpx

from neo_access.constants import RPC_TIMEOUT_SECONDS, TRANSIENT_HTTP_STATUSES
from neo_access.errors import NetworkError, RpcResponseError, RpcTransportError
from neo_access.utils.logging import get_logger

_logger = get_logger(__name__)


class LedgerClient(Protocol):
    """The node operations the service layer depends on."""

    async def get_block_count(self) -> Any: ...

    async def get_next_block_validators(self) -> Any: ...

    async def get_block(self, block: Union[int, str], verbose: bool = True) -> Any: ...

    async def get_block_header(self, block: Union[int, str], verbose: bool = True) -> Any: ...

    async def get_raw_transaction(self, txid: str, verbose: bool = True) -> Any: ...

    async def get_nep17_balances(self, address: str) -> Any: ...

    async def invoke_function(
        self,
        script_hash: str,
        operation: str,
        params: Sequence[Dict[str, Any]] = (),
        signers: Sequence[Dict[str, Any]] = (),
    ) -> Any: ...

    async def send_raw_transaction(self, tx: str) -> Any: ...

    async def get_version(self) -> Any: ...

    async def aclose(self) -> None: ...


class NeoRpcClient:
    """
    Async JSON-RPC 2.0 client.

    Example:
        ```python
        async with NeoRpcClient("https://testnet1.neo.coz.io:443") as client:
            height = await client.get_block_count()
        ```
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = RPC_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        """
        Create the client.

        Raises:
            NetworkError: If ``url`` is empty or not an http(s) URL
        """
        if not url or not isinstance(url, str):
            raise NetworkError("RPC URL is required", code="INVALID_RPC_URL")

        try:
            parsed = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as e:
            raise NetworkError(
                f"Invalid RPC URL: {url}",
                code="INVALID_RPC_URL",
                details={"url": url, "error": str(e)},
            ) from e

        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise NetworkError(
                f"Invalid RPC URL: {url}",
                code="INVALID_RPC_URL",
                details={"url": url, "reason": "must be an http(s) URL"},
            )

        self._url = url
        self._ids = itertools.count(1)
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            transport=transport,
            headers={"Content-Type": "application/json", **(headers or {})},
        )

    @property
    def url(self) -> str:
        return self._url

    async def __aenter__(self) -> "NeoRpcClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Perform one JSON-RPC call.

        Args:
            method: RPC method name (e.g. "getblockcount")
            params: Positional parameters

        Returns:
            The ``result`` member of the response

        Raises:
            RpcTransportError: Connection-level or gateway failure
            RpcResponseError: The node returned an error object
            NetworkError: Any other malformed reply
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": next(self._ids),
        }

        try:
            response = await self._client.post(self._url, json=payload)
        except httpx.TransportError as e:
            raise RpcTransportError(
                f"RPC transport failure for {method}: {e}",
                method=method,
            ) from e

        if response.status_code in TRANSIENT_HTTP_STATUSES:
            raise RpcTransportError(
                f"RPC gateway error for {method}: HTTP {response.status_code}",
                method=method,
                status_code=response.status_code,
            )

        if response.status_code != 200:
            raise NetworkError(
                f"RPC request {method} failed: HTTP {response.status_code}",
                code="RPC_HTTP_ERROR",
                details={"method": method, "status_code": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise NetworkError(
                f"RPC response for {method} is not valid JSON",
                code="MALFORMED_RESPONSE",
                details={"method": method},
            ) from e

        if not isinstance(data, dict):
            raise NetworkError(
                f"RPC response for {method} is not a JSON object",
                code="MALFORMED_RESPONSE",
                details={"method": method},
            )

        error = data.get("error")
        if error is not None:
            if isinstance(error, dict):
                message = str(error.get("message") or "Unknown RPC error")
                rpc_code = error.get("code")
                error_data = error.get("data")
            else:
                message, rpc_code, error_data = str(error), None, None
            _logger.debug(
                "RPC error response",
                extra={"method": method, "rpc_code": rpc_code, "rpc_message": message},
            )
            raise RpcResponseError(
                message,
                method=method,
                rpc_code=rpc_code if isinstance(rpc_code, int) else None,
                data=error_data,
            )

        if "result" not in data:
            raise NetworkError(
                f"RPC response for {method} has no result",
                code="MALFORMED_RESPONSE",
                details={"method": method},
            )

        return data["result"]

    async def get_block_count(self) -> Any:
        return await self.call("getblockcount")

    async def get_next_block_validators(self) -> Any:
        return await self.call("getnextblockvalidators")

    async def get_block(self, block: Union[int, str], verbose: bool = True) -> Any:
        return await self.call("getblock", [block, verbose])

    async def get_block_header(self, block: Union[int, str], verbose: bool = True) -> Any:
        return await self.call("getblockheader", [block, verbose])

    async def get_raw_transaction(self, txid: str, verbose: bool = True) -> Any:
        return await self.call("getrawtransaction", [txid, verbose])

    async def get_nep17_balances(self, address: str) -> Any:
        return await self.call("getnep17balances", [address])

    async def invoke_function(
        self,
        script_hash: str,
        operation: str,
        params: Sequence[Dict[str, Any]] = (),
        signers: Sequence[Dict[str, Any]] = (),
    ) -> Any:
        return await self.call(
            "invokefunction",
            [script_hash, operation, list(params), list(signers)],
        )

    async def send_raw_transaction(self, tx: str) -> Any:
        return await self.call("sendrawtransaction", [tx])

    async def get_version(self) -> Any:
        return await self.call("getversion")
