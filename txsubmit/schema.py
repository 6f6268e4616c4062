"""
JSON schemas for gateway replies.

A reply that does not match is a protocol violation by the node and is
reported as MalformedResponse. Schemas are deliberately loose: they pin
down only the fields this package reads.
"""

from __future__ import annotations

from typing import Any, Dict

import jsonschema  # type: ignore[import-untyped]

from txsubmit.errors import MalformedResponse

_INT64 = {"type": ["string", "integer"], "pattern": r"^-?\d+$"}

TX_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["txhash"],
    "properties": {
        "txhash": {"type": "string"},
        "code": {"type": "integer", "minimum": 0},
        "codespace": {"type": "string"},
        "raw_log": {"type": "string"},
        "height": _INT64,
        "gas_wanted": _INT64,
        "gas_used": _INT64,
    },
}

BROADCAST_REPLY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["tx_response"],
    "properties": {"tx_response": TX_RESPONSE_SCHEMA},
}

GET_TX_REPLY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "tx_response": {"anyOf": [{"type": "null"}, TX_RESPONSE_SCHEMA]},
    },
}

SIMULATE_REPLY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["gas_info"],
    "properties": {
        "gas_info": {
            "type": "object",
            "required": ["gas_used"],
            "properties": {"gas_wanted": _INT64, "gas_used": _INT64},
        },
    },
}


def validate_reply(instance: Dict[str, Any], schema: Dict[str, Any], what: str) -> None:
    """Validate a reply, raising MalformedResponse on mismatch."""
    try:
        jsonschema.validate(instance=instance, schema=schema)
    except jsonschema.ValidationError as exc:
        path = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        raise MalformedResponse(
            f"malformed {what} reply at {path}: {exc.message}",
            details={"path": path},
        ) from exc
