"""Client configuration: TOML file plus environment overrides.

Example ``txsubmit.toml``::

    [node]
    url = "http://localhost:1317"
    request_timeout = 30.0

    [confirm]
    poll_interval = 1.0
    wait_timeout = 60.0     # 0 disables waiting
    broadcast_mode = "sync"

Environment variables win over the file: TXSUBMIT_URL,
TXSUBMIT_REQUEST_TIMEOUT, TXSUBMIT_POLL_INTERVAL, TXSUBMIT_WAIT_TIMEOUT,
TXSUBMIT_BROADCAST_MODE.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

from txsubmit.types import BroadcastMode

DEFAULT_CONFIG_FILE = Path("txsubmit.toml")
ENV_PREFIX = "TXSUBMIT_"


@dataclass(frozen=True)
class ClientConfig:
    url: str = "http://localhost:1317"
    request_timeout: float = 30.0
    poll_interval: float = 1.0
    wait_timeout: float | None = 60.0
    broadcast_mode: BroadcastMode = BroadcastMode.SYNC

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("url must be non-empty")
        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be > 0, got: {self.request_timeout}")
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be > 0, got: {self.poll_interval}")
        if self.wait_timeout is not None and self.wait_timeout < 0:
            raise ValueError(f"wait_timeout must be >= 0 or None, got: {self.wait_timeout}")


def _wait_timeout(value: Any) -> float | None:
    seconds = float(value)
    return seconds if seconds > 0 else None


def _from_tables(cfg: dict[str, Any]) -> dict[str, Any]:
    node = cfg.get("node", {})
    confirm = cfg.get("confirm", {})
    fields: dict[str, Any] = {}
    if "url" in node:
        fields["url"] = str(node["url"])
    if "request_timeout" in node:
        fields["request_timeout"] = float(node["request_timeout"])
    if "poll_interval" in confirm:
        fields["poll_interval"] = float(confirm["poll_interval"])
    if "wait_timeout" in confirm:
        fields["wait_timeout"] = _wait_timeout(confirm["wait_timeout"])
    if "broadcast_mode" in confirm:
        fields["broadcast_mode"] = BroadcastMode.parse(str(confirm["broadcast_mode"]))
    return fields


def _from_env(environ: Mapping[str, str]) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    if url := environ.get(ENV_PREFIX + "URL"):
        fields["url"] = url
    if value := environ.get(ENV_PREFIX + "REQUEST_TIMEOUT"):
        fields["request_timeout"] = float(value)
    if value := environ.get(ENV_PREFIX + "POLL_INTERVAL"):
        fields["poll_interval"] = float(value)
    if value := environ.get(ENV_PREFIX + "WAIT_TIMEOUT"):
        fields["wait_timeout"] = _wait_timeout(value)
    if value := environ.get(ENV_PREFIX + "BROADCAST_MODE"):
        fields["broadcast_mode"] = BroadcastMode.parse(value)
    return fields


def load_config(
    path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> ClientConfig:
    """Load configuration.

    Reads ``path`` (or ``txsubmit.toml`` in the working directory if it
    exists), then applies environment overrides. A missing explicit path
    is an error; a missing default file is not.
    """
    if environ is None:
        environ = os.environ

    config = ClientConfig()
    config_file = Path(path) if path is not None else DEFAULT_CONFIG_FILE
    if path is not None or config_file.exists():
        cfg = tomllib.loads(config_file.read_text(encoding="utf-8"))
        config = replace(config, **_from_tables(cfg))

    return replace(config, **_from_env(environ))
