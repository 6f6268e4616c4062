"""
Error taxonomy for transaction submission and confirmation.

Every failure a caller can see is one of these exceptions. Transport and
malformed-reply errors are fatal and never retried; the confirmation
poller is the only component that tolerates a (narrow) class of query
errors.

Hierarchy:
    TxSubmitError
    ├── TransportError      — the node could not be reached
    ├── MalformedResponse   — the node replied without a required payload
    ├── RequestError        — the node answered with a gRPC status
    ├── InsufficientFees    — broadcast refused on fee/gas grounds
    └── TransactionFailed   — the ledger reported failure, or the wait ran out
        └── PollCancelled   — the caller stopped the wait early
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from txsubmit.types import FeeInfo, TxResponse


class GrpcCode(IntEnum):
    """gRPC status codes as reported in gateway error bodies."""

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16


def code_name(code: int) -> str:
    """Readable name for a status code, tolerating values outside the enum."""
    try:
        return GrpcCode(code).name
    except ValueError:
        return f"CODE_{code}"


class TxSubmitError(Exception):
    """Base class for every error raised by txsubmit.

    Attributes:
        error_code: Machine-readable category (stable across versions).
        details: Extra diagnostic fields. Never contains key material.
    """

    error_code = "TX_SUBMIT_ERROR"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


class TransportError(TxSubmitError):
    """Connection, TLS, timeout or non-JSON HTTP failure."""

    error_code = "TRANSPORT_ERROR"


class MalformedResponse(TxSubmitError):
    """The node's reply is missing a required payload field."""

    error_code = "MALFORMED_RESPONSE"


class RequestError(TxSubmitError):
    """The node answered the RPC with a non-OK gRPC status.

    Attributes:
        code: The raw status code. Compared against GrpcCode members.
        message: The node's message, verbatim.
    """

    error_code = "REQUEST_ERROR"

    def __init__(self, code: int, message: str = "") -> None:
        super().__init__(
            f"node returned {code_name(code)} ({code}): {message}",
            details={"code": code, "message": message},
        )
        self.code = code
        self.message = message


class InsufficientFees(TxSubmitError):
    """Broadcast rejected because the fee or gas limit was too low.

    The caller should re-fee, re-sign and broadcast again; this package
    never does that on its own.
    """

    error_code = "INSUFFICIENT_FEES"

    def __init__(self, fee_info: FeeInfo, response: TxResponse) -> None:
        super().__init__(
            f"transaction {response.txhash or '<no hash>'} rejected: {fee_info.describe()}",
            details={"txhash": response.txhash, "code": response.code},
        )
        self.fee_info = fee_info
        self.response = response


class TransactionFailed(TxSubmitError):
    """The ledger reported a failure, or confirmation ran out of time.

    Attributes:
        response: Best-known response. The node's executed record when the
            failure was observed while polling, otherwise the provisional
            broadcast response.
        elapsed: Seconds spent waiting. 0.0 for a synchronous broadcast
            failure, the configured timeout when the budget ran out.
        timed_out: True when no terminal status was seen before the budget
            expired. The transaction may still land later.
        last_error: The last query error seen while polling, if any.
    """

    error_code = "TRANSACTION_FAILED"

    def __init__(
        self,
        response: TxResponse,
        elapsed: float = 0.0,
        *,
        timed_out: bool = False,
        last_error: BaseException | None = None,
    ) -> None:
        if timed_out:
            message = f"transaction {response.txhash} not confirmed within {elapsed:.1f}s"
        else:
            message = (
                f"transaction {response.txhash} failed after {elapsed:.1f}s "
                f"(code={response.code}): {response.raw_log}"
            )
        super().__init__(
            message,
            details={"txhash": response.txhash, "code": response.code, "elapsed": elapsed},
        )
        self.response = response
        self.elapsed = elapsed
        self.timed_out = timed_out
        self.last_error = last_error


class PollCancelled(TransactionFailed):
    """The caller's cancel event fired before a terminal status was seen."""

    error_code = "POLL_CANCELLED"

    def __init__(
        self,
        response: TxResponse,
        elapsed: float = 0.0,
        *,
        last_error: BaseException | None = None,
    ) -> None:
        super().__init__(response, elapsed, last_error=last_error)
        self.args = (f"confirmation of {response.txhash} cancelled after {elapsed:.1f}s",)
