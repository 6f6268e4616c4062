"""
txsubmit: submit signed transactions to a ledger node and confirm their outcome.

Broadcast is fire-once; only the confirmation query is retried, and only
while the node says the transaction is not yet visible.
"""

from txsubmit.classify import (
    Classification,
    Verdict,
    check_tx_response,
    classify,
    determine_min_fees_and_gas,
    is_absent_status,
    parse_coins,
)
from txsubmit.client import GatewayClient, TxServiceClient
from txsubmit.config import ClientConfig, load_config
from txsubmit.errors import (
    GrpcCode,
    InsufficientFees,
    MalformedResponse,
    PollCancelled,
    RequestError,
    TransactionFailed,
    TransportError,
    TxSubmitError,
)
from txsubmit.poller import DEFAULT_POLL_INTERVAL, wait_for_tx
from txsubmit.sender import (
    broadcast,
    classify_broadcast,
    send_and_wait,
    send_transaction,
    simulate,
    simulate_tx,
)
from txsubmit.transport import HttpxTransport, RestTransport
from txsubmit.types import (
    Accepted,
    BroadcastMode,
    BroadcastOutcome,
    Coin,
    FeeInfo,
    GasInfo,
    InsufficientFee,
    Rejected,
    TxEnvelope,
    TxResponse,
)

__all__ = [
    # Data model
    "Accepted",
    "BroadcastMode",
    "BroadcastOutcome",
    "Coin",
    "FeeInfo",
    "GasInfo",
    "InsufficientFee",
    "Rejected",
    "TxEnvelope",
    "TxResponse",
    # Classification
    "Classification",
    "Verdict",
    "check_tx_response",
    "classify",
    "determine_min_fees_and_gas",
    "is_absent_status",
    "parse_coins",
    # Operations
    "DEFAULT_POLL_INTERVAL",
    "broadcast",
    "classify_broadcast",
    "send_and_wait",
    "send_transaction",
    "simulate",
    "simulate_tx",
    "wait_for_tx",
    # Network boundary
    "GatewayClient",
    "HttpxTransport",
    "RestTransport",
    "TxServiceClient",
    # Configuration
    "ClientConfig",
    "load_config",
    # Errors
    "GrpcCode",
    "InsufficientFees",
    "MalformedResponse",
    "PollCancelled",
    "RequestError",
    "TransactionFailed",
    "TransportError",
    "TxSubmitError",
]

__version__ = "0.1.0"
