"""
Tests for GatewayClient — canned gateway replies, no network.

Uses a FakeTransport that returns pre-built reply dicts, exercising the
request building and reply parsing in client.py.

Test plan:
- broadcast_tx: request path/body (base64 bytes, wire mode), reply parsed,
  missing tx_response → MalformedResponse
- simulate: request path/body, gas_info parsed, missing gas_info →
  MalformedResponse, node error propagates as RequestError
- get_tx: path includes hash, populated reply parsed, null / missing
  tx_response → None, NOT_FOUND status propagates
- Transport errors propagate unchanged
"""

import base64
from typing import Any

import pytest

from txsubmit.client import SIMULATE_PATH, TXS_PATH, GatewayClient, TxServiceClient
from txsubmit.config import ClientConfig
from txsubmit.errors import GrpcCode, MalformedResponse, RequestError, TransportError
from txsubmit.transport import HttpxTransport
from txsubmit.types import BroadcastMode, GasInfo, TxResponse

URL = "http://localhost:1317"
TX_BYTES = b"\x0a\x02signed"

# ---------------------------------------------------------------------------
# Fake transports
# ---------------------------------------------------------------------------


class FakeTransport:
    """Returns a canned reply for every request and records the calls."""

    def __init__(self, reply: dict[str, Any]) -> None:
        self._reply = reply
        self.posts: list[tuple[str, dict[str, Any]]] = []
        self.gets: list[str] = []

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        self.posts.append((url, payload))
        return self._reply

    async def get_json(self, url: str) -> dict[str, Any]:
        self.gets.append(url)
        return self._reply


class ErrorTransport:
    """Raises on every request to simulate node or transport failures."""

    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        raise self._exc

    async def get_json(self, url: str) -> dict[str, Any]:
        raise self._exc


# ---------------------------------------------------------------------------
# Canned replies
# ---------------------------------------------------------------------------

BROADCAST_OK = {
    "tx_response": {
        "height": "0",
        "txhash": "ABC",
        "codespace": "",
        "code": 0,
        "data": "",
        "raw_log": "[]",
        "logs": [],
        "info": "",
        "gas_wanted": "0",
        "gas_used": "0",
        "tx": None,
        "timestamp": "",
        "events": [],
    },
}

BROADCAST_LOW_FEE = {
    "tx_response": {
        "height": "0",
        "txhash": "DEF",
        "codespace": "sdk",
        "code": 13,
        "raw_log": "insufficient fees; got: 1stake required: 200stake: insufficient fee",
        "gas_wanted": "200000",
        "gas_used": "0",
    },
}

GET_TX_FOUND = {
    "tx": {"body": {"messages": []}},
    "tx_response": {
        "height": "4312",
        "txhash": "ABC",
        "code": 0,
        "raw_log": "",
        "gas_wanted": "200000",
        "gas_used": "81234",
        "timestamp": "2024-05-01T10:00:00Z",
    },
}

SIMULATE_OK = {
    "gas_info": {"gas_wanted": "0", "gas_used": "81234"},
    "result": {"data": "", "log": "", "events": []},
}


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(GatewayClient(URL, FakeTransport({})), TxServiceClient)

    def test_trailing_slash_stripped(self) -> None:
        assert GatewayClient(URL + "/", FakeTransport({})).url == URL

    def test_empty_url_rejected(self) -> None:
        with pytest.raises(ValueError):
            GatewayClient("")

    def test_from_config_uses_request_timeout(self) -> None:
        client = GatewayClient.from_config(ClientConfig(url=URL, request_timeout=7.5))
        assert client.url == URL
        assert isinstance(client._transport, HttpxTransport)
        assert client._transport.timeout == 7.5


# ---------------------------------------------------------------------------
# broadcast_tx
# ---------------------------------------------------------------------------


class TestBroadcastTx:
    @pytest.mark.asyncio
    async def test_posts_base64_bytes_and_mode(self) -> None:
        transport = FakeTransport(BROADCAST_OK)
        await GatewayClient(URL, transport).broadcast_tx(TX_BYTES, BroadcastMode.SYNC)
        url, payload = transport.posts[0]
        assert url == URL + TXS_PATH
        assert payload == {
            "tx_bytes": base64.b64encode(TX_BYTES).decode("ascii"),
            "mode": "BROADCAST_MODE_SYNC",
        }

    @pytest.mark.asyncio
    async def test_async_mode_on_wire(self) -> None:
        transport = FakeTransport(BROADCAST_OK)
        await GatewayClient(URL, transport).broadcast_tx(TX_BYTES, BroadcastMode.ASYNC)
        assert transport.posts[0][1]["mode"] == "BROADCAST_MODE_ASYNC"

    @pytest.mark.asyncio
    async def test_reply_parsed(self) -> None:
        client = GatewayClient(URL, FakeTransport(BROADCAST_OK))
        response = await client.broadcast_tx(TX_BYTES, BroadcastMode.SYNC)
        assert response == TxResponse(txhash="ABC", code=0, raw_log="[]")

    @pytest.mark.asyncio
    async def test_failure_codes_are_not_interpreted(self) -> None:
        client = GatewayClient(URL, FakeTransport(BROADCAST_LOW_FEE))
        response = await client.broadcast_tx(TX_BYTES, BroadcastMode.SYNC)
        assert response.code == 13
        assert response.codespace == "sdk"
        assert response.gas_wanted == 200000

    @pytest.mark.asyncio
    async def test_missing_tx_response_is_malformed(self) -> None:
        client = GatewayClient(URL, FakeTransport({}))
        with pytest.raises(MalformedResponse, match="tx_response"):
            await client.broadcast_tx(TX_BYTES, BroadcastMode.SYNC)

    @pytest.mark.asyncio
    async def test_missing_txhash_is_malformed(self) -> None:
        client = GatewayClient(URL, FakeTransport({"tx_response": {"code": 0}}))
        with pytest.raises(MalformedResponse):
            await client.broadcast_tx(TX_BYTES, BroadcastMode.SYNC)

    @pytest.mark.asyncio
    async def test_non_numeric_height_is_malformed(self) -> None:
        reply = {"tx_response": {"txhash": "ABC", "height": "tall"}}
        client = GatewayClient(URL, FakeTransport(reply))
        with pytest.raises(MalformedResponse):
            await client.broadcast_tx(TX_BYTES, BroadcastMode.SYNC)

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self) -> None:
        error = TransportError("connection refused")
        client = GatewayClient(URL, ErrorTransport(error))
        with pytest.raises(TransportError) as exc:
            await client.broadcast_tx(TX_BYTES, BroadcastMode.SYNC)
        assert exc.value is error


# ---------------------------------------------------------------------------
# simulate
# ---------------------------------------------------------------------------


class TestSimulate:
    @pytest.mark.asyncio
    async def test_posts_tx_bytes(self) -> None:
        transport = FakeTransport(SIMULATE_OK)
        await GatewayClient(URL, transport).simulate(TX_BYTES)
        url, payload = transport.posts[0]
        assert url == URL + SIMULATE_PATH
        assert payload == {"tx_bytes": base64.b64encode(TX_BYTES).decode("ascii")}

    @pytest.mark.asyncio
    async def test_gas_info_parsed(self) -> None:
        gas = await GatewayClient(URL, FakeTransport(SIMULATE_OK)).simulate(TX_BYTES)
        assert gas == GasInfo(gas_wanted=0, gas_used=81234)

    @pytest.mark.asyncio
    async def test_missing_gas_info_is_malformed(self) -> None:
        client = GatewayClient(URL, FakeTransport({"result": {}}))
        with pytest.raises(MalformedResponse, match="gas_info"):
            await client.simulate(TX_BYTES)

    @pytest.mark.asyncio
    async def test_execution_error_propagates(self) -> None:
        error = RequestError(GrpcCode.UNKNOWN, "failed to execute message; message index: 0")
        client = GatewayClient(URL, ErrorTransport(error))
        with pytest.raises(RequestError) as exc:
            await client.simulate(TX_BYTES)
        assert "message index" in exc.value.message


# ---------------------------------------------------------------------------
# get_tx
# ---------------------------------------------------------------------------


class TestGetTx:
    @pytest.mark.asyncio
    async def test_path_includes_hash(self) -> None:
        transport = FakeTransport(GET_TX_FOUND)
        await GatewayClient(URL, transport).get_tx("ABC")
        assert transport.gets == [f"{URL}{TXS_PATH}/ABC"]

    @pytest.mark.asyncio
    async def test_found_parsed(self) -> None:
        response = await GatewayClient(URL, FakeTransport(GET_TX_FOUND)).get_tx("ABC")
        assert response is not None
        assert response.height == 4312
        assert response.gas_used == 81234

    @pytest.mark.asyncio
    async def test_null_tx_response_is_none(self) -> None:
        client = GatewayClient(URL, FakeTransport({"tx": None, "tx_response": None}))
        assert await client.get_tx("ABC") is None

    @pytest.mark.asyncio
    async def test_missing_tx_response_is_none(self) -> None:
        assert await GatewayClient(URL, FakeTransport({})).get_tx("ABC") is None

    @pytest.mark.asyncio
    async def test_not_found_status_propagates(self) -> None:
        error = RequestError(GrpcCode.NOT_FOUND, "tx not found: ABC")
        client = GatewayClient(URL, ErrorTransport(error))
        with pytest.raises(RequestError) as exc:
            await client.get_tx("ABC")
        assert exc.value.code == GrpcCode.NOT_FOUND

    @pytest.mark.asyncio
    async def test_empty_hash_rejected(self) -> None:
        with pytest.raises(ValueError):
            await GatewayClient(URL, FakeTransport({})).get_tx("")
