"""
Broadcaster and simulator.

Both issue exactly one RPC and never retry. Transport and malformed-reply
errors propagate as raised by the client.

    - ``broadcast()`` — impure. Sends signed bytes, classifies the reply.
      Returns the provisional response on acceptance; raises
      InsufficientFees or TransactionFailed otherwise.
    - ``classify_broadcast()`` — pure. The same decision as a value
      (Accepted / InsufficientFee / Rejected).
    - ``simulate()`` — impure. Dry-runs an envelope, returns GasInfo.
    - ``send_and_wait()`` — broadcast, then hand the provisional response
      to the confirmation poller.
"""

from __future__ import annotations

import logging
from typing import Any

from txsubmit.classify import Verdict, classify
from txsubmit.client import TxServiceClient
from txsubmit.config import ClientConfig
from txsubmit.errors import InsufficientFees, TransactionFailed
from txsubmit.poller import wait_for_tx
from txsubmit.types import (
    Accepted,
    BroadcastMode,
    BroadcastOutcome,
    GasInfo,
    InsufficientFee,
    Rejected,
    TxEnvelope,
    TxResponse,
)

log = logging.getLogger("txsubmit.sender")

# Distinguishes "timeout not given" from an explicit None (do not wait).
_UNSET: Any = object()


def classify_broadcast(response: TxResponse) -> BroadcastOutcome:
    """Decide what a broadcast reply means, without raising."""
    result = classify(response)
    if result.verdict is Verdict.INSUFFICIENT_FEE:
        assert result.fee_info is not None
        return InsufficientFee(result.fee_info, response)
    if result.verdict is Verdict.FAILED:
        return Rejected(response)
    return Accepted(response)


async def broadcast(
    client: TxServiceClient,
    tx_bytes: bytes,
    mode: BroadcastMode = BroadcastMode.SYNC,
) -> TxResponse:
    """Broadcast a signed transaction once.

    Args:
        client: Transaction service client.
        tx_bytes: Signed transaction bytes, produced by the caller.
        mode: Delivery mode. SYNC waits for the node's validity check.

    Returns:
        The provisional TxResponse. The node accepted the transaction;
        whether it is included is not yet known.

    Raises:
        InsufficientFees: The node refused the fee or gas limit. Do not
            poll; re-fee and broadcast again.
        TransactionFailed: The node reported failure synchronously
            (``elapsed`` is 0.0).
        TransportError, MalformedResponse, RequestError: From the client.
        ValueError: If tx_bytes is empty.
    """
    if not tx_bytes:
        raise ValueError("tx_bytes must be non-empty")

    response = await client.broadcast_tx(tx_bytes, mode)
    outcome = classify_broadcast(response)

    if isinstance(outcome, InsufficientFee):
        log.warning("broadcast %s rejected: %s", response.txhash, outcome.fee_info.describe())
        raise InsufficientFees(outcome.fee_info, response)
    if isinstance(outcome, Rejected):
        log.warning(
            "broadcast %s failed with code %d (%s): %s",
            response.txhash,
            response.code,
            response.codespace or "-",
            response.raw_log,
        )
        raise TransactionFailed(response, 0.0)

    log.info("broadcast %s accepted (mode=%s)", response.txhash, mode.name)
    return response


# Name used by callers that think of this as "send the signed transaction".
send_transaction = broadcast


async def simulate(client: TxServiceClient, envelope: TxEnvelope) -> GasInfo:
    """Dry-run a transaction envelope and return the node's gas estimate.

    The result is not classified: a payload that fails to execute comes
    back from the node as RequestError with the node's message.
    """
    gas_info = await client.simulate(envelope.to_tx_raw())
    log.debug("simulated gas_used=%d gas_wanted=%d", gas_info.gas_used, gas_info.gas_wanted)
    return gas_info


simulate_tx = simulate


async def send_and_wait(
    client: TxServiceClient,
    tx_bytes: bytes,
    *,
    mode: BroadcastMode | None = None,
    timeout: float | None = _UNSET,
    config: ClientConfig | None = None,
    **poll_options: Any,
) -> TxResponse:
    """Broadcast once, then optionally wait for the transaction to execute.

    Args:
        client: Transaction service client.
        tx_bytes: Signed transaction bytes.
        mode: Delivery mode for the broadcast. Defaults to
            ``config.broadcast_mode``, or SYNC without a config.
        timeout: Wait budget in seconds. None returns the provisional
            response without waiting. Defaults to ``config.wait_timeout``,
            or None without a config.
        config: Client configuration supplying the defaults above and the
            poll interval.
        **poll_options: Passed to ``wait_for_tx`` (interval, clock, sleep,
            cancel). An explicit interval wins over the config.

    Returns:
        The executed TxResponse, or the provisional one when timeout is None.
    """
    if mode is None:
        mode = config.broadcast_mode if config is not None else BroadcastMode.SYNC
    if timeout is _UNSET:
        timeout = config.wait_timeout if config is not None else None
    if config is not None:
        poll_options.setdefault("interval", config.poll_interval)

    response = await broadcast(client, tx_bytes, mode)
    if timeout is None:
        return response
    return await wait_for_tx(client, response, timeout, **poll_options)
