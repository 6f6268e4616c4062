"""
Data model shared by the broadcaster, simulator and confirmation poller.

All records are frozen dataclasses. Node replies are converted once, at
the client boundary, with the ``from_json`` constructors; nothing above
the client sees raw JSON.

Integer fields (height, gas) arrive from the gateway as JSON strings,
following the proto3 JSON mapping for 64-bit integers, and are converted
to ``int`` here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

_COIN_RE = re.compile(r"^(\d+)([a-zA-Z][a-zA-Z0-9/:._-]{2,127})$")


# =========================================================================
# Enums
# =========================================================================


class BroadcastMode(StrEnum):
    """How long the broadcast call itself waits before returning.

    SYNC waits for the node's basic validity check (CheckTx), ASYNC
    returns as soon as the bytes are received, BLOCK waits for commit.
    Values are the wire names used by the gateway.
    """

    SYNC = "BROADCAST_MODE_SYNC"
    ASYNC = "BROADCAST_MODE_ASYNC"
    BLOCK = "BROADCAST_MODE_BLOCK"

    @classmethod
    def parse(cls, value: str) -> BroadcastMode:
        """Accept either the wire name or the short name ("sync")."""
        text = value.strip().upper()
        if not text.startswith("BROADCAST_MODE_"):
            text = f"BROADCAST_MODE_{text}"
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"unknown broadcast mode: {value!r}") from None


# =========================================================================
# Coins and fees
# =========================================================================


@dataclass(frozen=True)
class Coin:
    """An amount of a single denomination, e.g. ``200stake``."""

    amount: int
    denom: str

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"

    @classmethod
    def parse(cls, text: str) -> Coin:
        """Parse ``"<amount><denom>"``. Raises ValueError on anything else."""
        match = _COIN_RE.match(text.strip())
        if match is None:
            raise ValueError(f"not a coin: {text!r}")
        return cls(amount=int(match.group(1)), denom=match.group(2))


@dataclass(frozen=True)
class FeeInfo:
    """Minimum fee and/or gas reported by a node that refused a transaction.

    Informational only: parsed best-effort from the node's free-form log,
    so either field may be empty even when the rejection is genuine.

    Attributes:
        min_fees: Coins the node requires as fee. Empty if not parseable.
        min_gas: Gas the transaction needs. None unless the node reported
            running out of gas.
    """

    min_fees: tuple[Coin, ...] = ()
    min_gas: int | None = None

    def describe(self) -> str:
        parts: list[str] = []
        if self.min_fees:
            parts.append("insufficient fees, required " + ",".join(str(c) for c in self.min_fees))
        if self.min_gas is not None:
            parts.append(f"insufficient gas, required {self.min_gas}")
        return "; ".join(parts) if parts else "insufficient fees or gas"


# =========================================================================
# Node records
# =========================================================================


def _int_field(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    if value in (None, ""):
        return 0
    return int(value)


@dataclass(frozen=True)
class TxResponse:
    """A node-reported transaction record.

    Immutable once returned by the node. A later query may produce a newer
    record for the same hash; the old one is never updated in place.

    Attributes:
        txhash: Transaction hash (uppercase hex as reported by the node).
        code: Result code. 0 is success, anything else is a failure
            within ``codespace``.
        codespace: Module namespace for ``code`` ("sdk" for core errors).
        raw_log: Free-form log. On failure, the node's error message.
        height: Block height. 0 until the transaction is included.
        gas_wanted: Gas limit set by the transaction.
        gas_used: Gas consumed.
        info: Additional node-defined information.
        timestamp: Block time (RFC3339), empty until included.
    """

    txhash: str
    code: int = 0
    codespace: str = ""
    raw_log: str = ""
    height: int = 0
    gas_wanted: int = 0
    gas_used: int = 0
    info: str = ""
    timestamp: str = ""

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> TxResponse:
        """Build from a gateway ``tx_response`` object.

        Raises:
            KeyError: If ``txhash`` is missing.
            ValueError: If a numeric field is not an integer.
        """
        return cls(
            txhash=str(data["txhash"]),
            code=_int_field(data, "code"),
            codespace=str(data.get("codespace") or ""),
            raw_log=str(data.get("raw_log") or ""),
            height=_int_field(data, "height"),
            gas_wanted=_int_field(data, "gas_wanted"),
            gas_used=_int_field(data, "gas_used"),
            info=str(data.get("info") or ""),
            timestamp=str(data.get("timestamp") or ""),
        )


@dataclass(frozen=True)
class GasInfo:
    """Resource estimate returned by a simulation."""

    gas_wanted: int
    gas_used: int

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> GasInfo:
        return cls(
            gas_wanted=_int_field(data, "gas_wanted"),
            gas_used=_int_field(data, "gas_used"),
        )


# =========================================================================
# Simulation envelope
# =========================================================================


def _encode_varint(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _length_delimited(field_number: int, payload: bytes) -> bytes:
    return _encode_varint((field_number << 3) | 2) + _encode_varint(len(payload)) + payload


@dataclass(frozen=True)
class TxEnvelope:
    """A fully assembled transaction for dry-run execution.

    Produced by the caller's transaction builder; this package only reads
    it. Body and auth info are already protobuf-serialized.

    Attributes:
        body_bytes: Serialized ``TxBody``.
        auth_info_bytes: Serialized ``AuthInfo`` (signer infos and fee).
        signatures: One entry per signer. Simulation accepts empty
            signatures, but the count must match the signer infos.
    """

    body_bytes: bytes
    auth_info_bytes: bytes
    signatures: tuple[bytes, ...] = field(default_factory=tuple)

    def to_tx_raw(self) -> bytes:
        """Encode as a protobuf ``TxRaw`` message.

        Field layout: 1 body_bytes, 2 auth_info_bytes, 3 repeated
        signatures. Empty singular fields are omitted (proto3); every
        signature entry is written, including empty ones.
        """
        out = bytearray()
        if self.body_bytes:
            out += _length_delimited(1, self.body_bytes)
        if self.auth_info_bytes:
            out += _length_delimited(2, self.auth_info_bytes)
        for signature in self.signatures:
            out += _length_delimited(3, signature)
        return bytes(out)


# =========================================================================
# Broadcast outcome (tagged union)
# =========================================================================


@dataclass(frozen=True)
class Accepted:
    """The node took the transaction into its pipeline; inclusion unknown."""

    response: TxResponse


@dataclass(frozen=True)
class InsufficientFee:
    """The node refused the transaction for paying too little fee or gas."""

    fee_info: FeeInfo
    response: TxResponse


@dataclass(frozen=True)
class Rejected:
    """The node reported failure synchronously, during broadcast."""

    response: TxResponse


BroadcastOutcome = Accepted | InsufficientFee | Rejected
