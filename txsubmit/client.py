"""
Transaction service client — the network boundary.

``TxServiceClient`` is the interface the broadcaster, simulator and
poller depend on. ``GatewayClient`` is the real implementation, speaking
to a node's gRPC-gateway REST surface through an injectable transport.

The protocol has exactly three methods, one RPC each:
    - broadcast_tx(tx_bytes, mode) → TxResponse
    - simulate(tx_bytes) → GasInfo
    - get_tx(tx_hash) → TxResponse | None

No retry loops. No classification beyond turning replies into records:
deciding what a record *means* is classify.py's job.
"""

from __future__ import annotations

import base64
import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from txsubmit.errors import MalformedResponse
from txsubmit.schema import (
    BROADCAST_REPLY_SCHEMA,
    GET_TX_REPLY_SCHEMA,
    SIMULATE_REPLY_SCHEMA,
    validate_reply,
)
from txsubmit.transport import HttpxTransport, RestTransport
from txsubmit.types import BroadcastMode, GasInfo, TxResponse

if TYPE_CHECKING:
    from txsubmit.config import ClientConfig

log = logging.getLogger("txsubmit.client")

TXS_PATH = "/cosmos/tx/v1beta1/txs"
SIMULATE_PATH = "/cosmos/tx/v1beta1/simulate"


# =========================================================================
# Protocol
# =========================================================================


@runtime_checkable
class TxServiceClient(Protocol):
    """Interface for the node's transaction service.

    Implementations raise TransportError, MalformedResponse or
    RequestError; they never interpret result codes.
    """

    async def broadcast_tx(self, tx_bytes: bytes, mode: BroadcastMode) -> TxResponse:
        """Broadcast signed transaction bytes. Returns the node's response record."""
        ...

    async def simulate(self, tx_bytes: bytes) -> GasInfo:
        """Dry-run an encoded transaction. Returns the gas estimate."""
        ...

    async def get_tx(self, tx_hash: str) -> TxResponse | None:
        """Look up a transaction by hash.

        Returns None when the node answers without a response record.
        An unknown hash is usually reported as RequestError (NOT_FOUND).
        """
        ...


# =========================================================================
# Gateway implementation
# =========================================================================


class GatewayClient:
    """Transaction service client over the gRPC-gateway REST surface.

    Args:
        url: Gateway base URL (e.g. "http://localhost:1317").
        transport: Injectable transport. Defaults to HttpxTransport.
            Pass a FakeTransport for testing.
    """

    def __init__(self, url: str, transport: RestTransport | None = None) -> None:
        if not url:
            raise ValueError("url must be non-empty")
        self._url = url.rstrip("/")
        self._transport = transport or HttpxTransport()

    @classmethod
    def from_config(cls, config: ClientConfig) -> GatewayClient:
        return cls(config.url, HttpxTransport(timeout=config.request_timeout))

    @property
    def url(self) -> str:
        """The gateway base URL."""
        return self._url

    async def broadcast_tx(self, tx_bytes: bytes, mode: BroadcastMode) -> TxResponse:
        payload = {
            "tx_bytes": base64.b64encode(tx_bytes).decode("ascii"),
            "mode": str(mode),
        }
        log.debug("broadcast %d bytes mode=%s", len(tx_bytes), mode)
        reply = await self._transport.post_json(self._url + TXS_PATH, payload)
        return _parse_broadcast_reply(reply)

    async def simulate(self, tx_bytes: bytes) -> GasInfo:
        payload = {"tx_bytes": base64.b64encode(tx_bytes).decode("ascii")}
        reply = await self._transport.post_json(self._url + SIMULATE_PATH, payload)
        return _parse_simulate_reply(reply)

    async def get_tx(self, tx_hash: str) -> TxResponse | None:
        if not tx_hash:
            raise ValueError("tx_hash must be non-empty")
        reply = await self._transport.get_json(f"{self._url}{TXS_PATH}/{tx_hash}")
        return _parse_get_tx_reply(reply)


# =====================================================================
# Reply parsing (pure functions, no I/O)
# =====================================================================


def _tx_response(data: dict[str, Any], what: str) -> TxResponse:
    try:
        return TxResponse.from_json(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedResponse(f"malformed {what} tx_response: {exc}") from exc


def _parse_broadcast_reply(reply: dict[str, Any]) -> TxResponse:
    """``{"tx_response": {...}}`` → TxResponse. The payload is mandatory."""
    validate_reply(reply, BROADCAST_REPLY_SCHEMA, "broadcast")
    return _tx_response(reply["tx_response"], "broadcast")


def _parse_simulate_reply(reply: dict[str, Any]) -> GasInfo:
    """``{"gas_info": {...}, "result": {...}}`` → GasInfo. gas_info is mandatory."""
    validate_reply(reply, SIMULATE_REPLY_SCHEMA, "simulate")
    return GasInfo.from_json(reply["gas_info"])


def _parse_get_tx_reply(reply: dict[str, Any]) -> TxResponse | None:
    """``{"tx": ..., "tx_response": {...}}`` → TxResponse, or None if absent."""
    validate_reply(reply, GET_TX_REPLY_SCHEMA, "get_tx")
    data = reply.get("tx_response")
    if data is None:
        return None
    return _tx_response(data, "get_tx")
