"""
Status classification — maps node responses to typed outcomes.

Pure functions only. No I/O, no state: the same response always yields
the same classification.

Two tables live here:

    - Transaction results: a ``TxResponse`` is SUCCESS, FAILED or
      INSUFFICIENT_FEE. The fee check runs first because a fee rejection
      is caller-actionable (re-fee and re-broadcast), not permanent.

    - Query statuses: the transaction query service reports an absent
      transaction as NOT_FOUND, but depending on node version also as
      UNKNOWN or INVALID_ARGUMENT. Those three mean "not yet visible";
      every other status is fatal for polling.

Fee rejections are recognised by the core ("sdk") error codes:
    - 13 insufficient fee: ``insufficient fees; got: 1stake required: 200stake: insufficient fee``
    - 11 out of gas: ``out of gas in location: ...; gasWanted: 200000, gasUsed: 200123: out of gas``
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from txsubmit.errors import GrpcCode
from txsubmit.types import Coin, FeeInfo, TxResponse

SDK_CODESPACE = "sdk"
ERR_OUT_OF_GAS = 11
ERR_INSUFFICIENT_FEE = 13

ABSENT_STATUS_CODES: frozenset[int] = frozenset(
    {GrpcCode.NOT_FOUND, GrpcCode.UNKNOWN, GrpcCode.INVALID_ARGUMENT}
)

_REQUIRED_RE = re.compile(r"required:\s*(\S+)")
_GAS_USED_RE = re.compile(r"gasUsed:\s*(\d+)")


class Verdict(StrEnum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    INSUFFICIENT_FEE = "INSUFFICIENT_FEE"


@dataclass(frozen=True)
class Classification:
    """Result of ``classify``. ``fee_info`` is set only for INSUFFICIENT_FEE."""

    verdict: Verdict
    fee_info: FeeInfo | None = None


def parse_coins(text: str) -> tuple[Coin, ...]:
    """Parse a comma-separated coin list (``"200stake,5uatom"``).

    Raises:
        ValueError: If any entry is not a coin.
    """
    return tuple(Coin.parse(part) for part in text.split(",") if part.strip())


def _is_core_error(response: TxResponse) -> bool:
    # Older nodes leave codespace empty; module codespaces reuse small codes.
    return response.codespace in ("", SDK_CODESPACE)


def determine_min_fees_and_gas(response: TxResponse) -> FeeInfo | None:
    """Extract the node's fee/gas requirement from a rejection, if any.

    Returns None when the response is not a fee or gas rejection. When it
    is one but the log cannot be parsed, returns an empty FeeInfo rather
    than dropping the signal.
    """
    if response.code == 0 or not _is_core_error(response):
        return None

    if response.code == ERR_INSUFFICIENT_FEE:
        match = _REQUIRED_RE.search(response.raw_log)
        if match is None:
            return FeeInfo()
        try:
            return FeeInfo(min_fees=parse_coins(match.group(1).rstrip(":;")))
        except ValueError:
            return FeeInfo()

    if response.code == ERR_OUT_OF_GAS:
        match = _GAS_USED_RE.search(response.raw_log)
        if match is not None:
            return FeeInfo(min_gas=int(match.group(1)))
        return FeeInfo(min_gas=response.gas_used or None)

    return None


def check_tx_response(response: TxResponse) -> bool:
    """True if the node reports the transaction as successful."""
    return response.code == 0


def classify(response: TxResponse) -> Classification:
    """Classify a node response. Fee rejections win over everything else."""
    fee_info = determine_min_fees_and_gas(response)
    if fee_info is not None:
        return Classification(Verdict.INSUFFICIENT_FEE, fee_info)
    if check_tx_response(response):
        return Classification(Verdict.SUCCESS)
    return Classification(Verdict.FAILED)


def is_absent_status(code: int) -> bool:
    """True if a query status means "transaction not (yet) visible"."""
    return code in ABSENT_STATUS_CODES
