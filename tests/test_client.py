"""Tests for the TronGrid HTTP client."""

import json

import httpx
import pytest

from tronsigner.errors import NodeTransportError
from tronsigner.tron.client import (
    TransactionStatus,
    TronGridClient,
    decode_node_message,
    transaction_status,
)


def make_client(handler, api_key=None) -> TronGridClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TronGridClient("https://node.test/", api_key=api_key, http_client=http_client)


class TestTronGridClient:
    """Tests for TronGridClient requests and error mapping."""

    @pytest.mark.asyncio
    async def test_create_transfer_request(self):
        """Test endpoint, body and API key header."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            seen["api_key"] = request.headers.get("TRON-PRO-API-KEY")
            return httpx.Response(200, json={"txID": "ab", "raw_data_hex": "00"})

        client = make_client(handler, api_key="grid-key")
        data = await client.create_transfer("41" + "aa" * 20, "41" + "bb" * 20, 1_000_000)

        assert data["txID"] == "ab"
        assert seen["url"] == "https://node.test/wallet/createtransaction"
        assert seen["body"] == {
            "owner_address": "41" + "aa" * 20,
            "to_address": "41" + "bb" * 20,
            "amount": 1_000_000,
        }
        assert seen["api_key"] == "grid-key"

    @pytest.mark.asyncio
    async def test_trigger_smart_contract_request(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"result": {"result": True}, "transaction": {}})

        client = make_client(handler)
        await client.trigger_smart_contract(
            "41" + "aa" * 20, "41" + "cc" * 20, "transfer(address,uint256)", "00" * 64, 30_000_000
        )

        assert seen["path"] == "/wallet/triggersmartcontract"
        assert seen["body"]["fee_limit"] == 30_000_000
        assert seen["body"]["function_selector"] == "transfer(address,uint256)"
        assert seen["body"]["call_value"] == 0

    @pytest.mark.asyncio
    async def test_node_error_payload_is_returned(self):
        """Test ledger-level errors come back as data, not exceptions."""
        client = make_client(lambda request: httpx.Response(200, json={"code": "SIGERROR", "message": "bad"}))

        data = await client.broadcast_transaction({"txID": "ab"})

        assert data["code"] == "SIGERROR"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        client = make_client(lambda request: httpx.Response(503, text="unavailable"))

        with pytest.raises(NodeTransportError):
            await client.broadcast_transaction({"txID": "ab"})

    @pytest.mark.asyncio
    async def test_malformed_json(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(NodeTransportError):
            await client.broadcast_transaction({"txID": "ab"})

    @pytest.mark.asyncio
    async def test_non_object_json(self):
        client = make_client(lambda request: httpx.Response(200, json=[1, 2]))

        with pytest.raises(NodeTransportError):
            await client.get_transaction("ab")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        """Test network failures become NodeTransportError."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(NodeTransportError):
            await client.create_transfer("41" + "aa" * 20, "41" + "bb" * 20, 1)

    @pytest.mark.asyncio
    async def test_transaction_status(self):
        client = make_client(
            lambda request: httpx.Response(200, json={"ret": [{"contractRet": "REVERT"}]})
        )

        assert await client.get_transaction_status("ab") == TransactionStatus.FAILED

    @pytest.mark.asyncio
    async def test_close_keeps_injected_client(self):
        """Test close() leaves a caller-owned httpx client open."""
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={})))
        client = TronGridClient("https://node.test", http_client=http_client)

        await client.close()

        assert not http_client.is_closed
        await http_client.aclose()


class TestHelpers:
    """Tests for payload helpers."""

    @pytest.mark.parametrize("data, expected", [
        ({}, TransactionStatus.PENDING),
        ({"txID": "ab"}, TransactionStatus.CONFIRMING),
        ({"ret": [{"contractRet": "SUCCESS"}]}, TransactionStatus.COMPLETED),
        ({"ret": [{"contractRet": "OUT_OF_ENERGY"}]}, TransactionStatus.FAILED),
    ])
    def test_transaction_status(self, data, expected):
        assert transaction_status(data) == expected

    def test_decode_hex_message(self):
        assert decode_node_message("48656c6c6f") == "Hello"

    def test_decode_keeps_plain_text(self):
        assert decode_node_message("Dup transaction.") == "Dup transaction."

    def test_decode_keeps_binary_hex(self):
        assert decode_node_message("00ff") == "00ff"

    def test_decode_none(self):
        assert decode_node_message(None) == ""
