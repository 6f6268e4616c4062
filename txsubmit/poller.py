"""
Confirmation poller — waits for a broadcast transaction to be executed.

A node accepting a broadcast says nothing about inclusion. The poller
queries the transaction by hash once per interval until one of:

    Confirmed   the node returns an executed record with code 0
    Failed      the node returns an executed record with a nonzero code,
                or the query fails with a status outside the absent class
    TimedOut    the wait budget runs out
    Cancelled   the caller's cancel event is set

"Not yet visible" (no record, or NOT_FOUND / UNKNOWN / INVALID_ARGUMENT)
is never terminal: a fresh transaction is routinely missing from the
query index for a block or more. Transport and malformed-reply errors
propagate unchanged on first occurrence.

The interval is fixed, not exponential; block times are roughly
constant. Clock and sleep are injectable so tests run without real time
passing.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from txsubmit.classify import Verdict, classify, is_absent_status
from txsubmit.client import TxServiceClient
from txsubmit.errors import PollCancelled, RequestError, TransactionFailed, code_name
from txsubmit.types import TxResponse

log = logging.getLogger("txsubmit.poller")

DEFAULT_POLL_INTERVAL = 1.0

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


@dataclass
class _PollState:
    start: float
    provisional: TxResponse
    last_error: RequestError | None = None
    queries: int = 0


def _check_cancelled(cancel: asyncio.Event | None, state: _PollState, clock: Clock) -> None:
    if cancel is None or not cancel.is_set():
        return
    log.info("wait for tx %s cancelled after %d queries", state.provisional.txhash, state.queries)
    raise PollCancelled(
        state.provisional,
        clock() - state.start,
        last_error=state.last_error,
    )


async def wait_for_tx(
    client: TxServiceClient,
    response: TxResponse,
    timeout: float,
    *,
    interval: float = DEFAULT_POLL_INTERVAL,
    clock: Clock = time.monotonic,
    sleep: Sleep = asyncio.sleep,
    cancel: asyncio.Event | None = None,
) -> TxResponse:
    """Wait for a provisionally accepted transaction to reach a terminal status.

    Args:
        client: Transaction service client used for the by-hash queries.
        response: Provisional broadcast response; its ``txhash`` is polled.
        timeout: Wait budget in seconds.
        interval: Fixed pause between queries, in seconds.
        clock: Monotonic clock in seconds. Inject for tests.
        sleep: Async sleep. Inject for tests.
        cancel: Optional event, checked before each query and after each
            sleep; once set, the wait stops.

    Returns:
        The executed TxResponse reported by the node (code 0).

    Raises:
        TransactionFailed: The node reported the transaction failed (carries
            the executed record), a query failed with a fatal status
            (carries the provisional response), or the budget ran out
            (``timed_out=True``, ``elapsed == timeout``).
        PollCancelled: ``cancel`` was set first.
        TransportError: A query could not reach the node.
        MalformedResponse: A query reply was missing required fields.
        ValueError: If timeout is negative, interval is not positive, or
            the response has no hash.
    """
    if timeout < 0:
        raise ValueError(f"timeout must be >= 0, got: {timeout}")
    if interval <= 0:
        raise ValueError(f"interval must be > 0, got: {interval}")
    if not response.txhash:
        raise ValueError("provisional response has no txhash")

    state = _PollState(start=clock(), provisional=response)
    log.debug("waiting up to %.1fs for tx %s", timeout, response.txhash)

    while clock() - state.start < timeout:
        _check_cancelled(cancel, state, clock)

        state.queries += 1
        try:
            found = await client.get_tx(response.txhash)
        except RequestError as exc:
            if not is_absent_status(exc.code):
                elapsed = clock() - state.start
                log.warning(
                    "query for tx %s failed with %s, giving up after %.1fs",
                    response.txhash,
                    code_name(exc.code),
                    elapsed,
                )
                raise TransactionFailed(state.provisional, elapsed, last_error=exc) from exc
            state.last_error = exc
            found = None

        if found is not None:
            elapsed = clock() - state.start
            if classify(found).verdict is Verdict.SUCCESS:
                log.info(
                    "tx %s confirmed at height %d after %.1fs",
                    found.txhash,
                    found.height,
                    elapsed,
                )
                return found
            log.warning("tx %s executed with code %d: %s", found.txhash, found.code, found.raw_log)
            raise TransactionFailed(found, elapsed, last_error=state.last_error)

        await sleep(interval)
        # Before the deadline test, so a cancel during the last sleep wins.
        _check_cancelled(cancel, state, clock)

    log.warning(
        "tx %s not confirmed within %.1fs (%d queries)",
        response.txhash,
        timeout,
        state.queries,
    )
    raise TransactionFailed(
        state.provisional,
        timeout,
        timed_out=True,
        last_error=state.last_error,
    )
