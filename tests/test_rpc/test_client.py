"""
Tests for the JSON-RPC client.

Responses come from an ``httpx.MockTransport`` so no node is contacted.
"""

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from neo_access.errors import NetworkError, RpcResponseError, RpcTransportError
from neo_access.rpc.client import NeoRpcClient

from ..conftest import TX_HASH

RPC_URL = "http://localhost:10332"


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> NeoRpcClient:
    return NeoRpcClient(RPC_URL, transport=httpx.MockTransport(handler))


def rpc_result(result: Any) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    return handler


# =============================================================================
# Construction
# =============================================================================


class TestConstruction:
    @pytest.mark.parametrize("url", ["", "ftp://node.example", "not a url", "http://"])
    def test_invalid_url(self, url: str) -> None:
        with pytest.raises(NetworkError) as exc_info:
            NeoRpcClient(url)
        assert exc_info.value.code == "INVALID_RPC_URL"

    @pytest.mark.asyncio
    async def test_context_manager_closes(self) -> None:
        async with make_client(rpc_result(1)) as client:
            assert client.url == RPC_URL


# =============================================================================
# Envelope
# =============================================================================


class TestEnvelope:
    @pytest.mark.asyncio
    async def test_request_envelope(self) -> None:
        requests: List[Dict[str, Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(json.loads(request.content))
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": 1000})

        async with make_client(handler) as client:
            assert await client.get_block_count() == 1000
            await client.get_raw_transaction(TX_HASH)

        assert requests[0] == {"jsonrpc": "2.0", "method": "getblockcount", "params": [], "id": 1}
        assert requests[1]["method"] == "getrawtransaction"
        assert requests[1]["params"] == [TX_HASH, True]
        assert requests[1]["id"] == 2

    @pytest.mark.asyncio
    async def test_invoke_function_params(self) -> None:
        requests: List[Dict[str, Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(json.loads(request.content))
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": {}})

        params = [{"type": "Integer", "value": "1"}]
        signers = [{"account": "0x" + "1" * 40, "scopes": "CalledByEntry"}]
        async with make_client(handler) as client:
            await client.invoke_function("0x" + "2" * 40, "symbol", params, signers)

        assert requests[0]["params"] == ["0x" + "2" * 40, "symbol", params, signers]

    @pytest.mark.asyncio
    async def test_null_result_is_returned(self) -> None:
        async with make_client(rpc_result(None)) as client:
            assert await client.call("getrawtransaction", [TX_HASH, True]) is None


# =============================================================================
# Failure Classification
# =============================================================================


class TestFailures:
    @pytest.mark.asyncio
    async def test_rpc_error_object(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "jsonrpc": "2.0",
                    "id": 1,
                    "error": {"code": -100, "message": "Unknown transaction", "data": "x"},
                },
            )

        async with make_client(handler) as client:
            with pytest.raises(RpcResponseError) as exc_info:
                await client.get_raw_transaction(TX_HASH)

        error = exc_info.value
        assert error.rpc_code == -100
        assert error.message == "Unknown transaction"
        assert error.method == "getrawtransaction"
        assert error.retryable is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [502, 503, 504])
    async def test_gateway_status_is_transport_error(self, status: int) -> None:
        async with make_client(lambda request: httpx.Response(status)) as client:
            with pytest.raises(RpcTransportError) as exc_info:
                await client.get_block_count()

        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    async def test_other_status_is_network_error(self) -> None:
        async with make_client(lambda request: httpx.Response(500)) as client:
            with pytest.raises(NetworkError) as exc_info:
                await client.get_block_count()

        assert not isinstance(exc_info.value, RpcTransportError)
        assert exc_info.value.code == "RPC_HTTP_ERROR"

    @pytest.mark.asyncio
    async def test_connection_error_is_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(RpcTransportError) as exc_info:
                await client.get_block_count()

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_timeout_is_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_client(handler) as client:
            with pytest.raises(RpcTransportError):
                await client.get_version()

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        async with make_client(lambda request: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(NetworkError) as exc_info:
                await client.get_block_count()

        assert exc_info.value.code == "MALFORMED_RESPONSE"

    @pytest.mark.asyncio
    async def test_non_object_body(self) -> None:
        async with make_client(lambda request: httpx.Response(200, json=[1, 2])) as client:
            with pytest.raises(NetworkError):
                await client.get_block_count()

    @pytest.mark.asyncio
    async def test_missing_result(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1})

        async with make_client(handler) as client:
            with pytest.raises(NetworkError) as exc_info:
                await client.get_block_count()

        assert exc_info.value.code == "MALFORMED_RESPONSE"
