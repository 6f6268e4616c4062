"""
Transport protocol for gateway REST calls.

Defines the seam where concrete HTTP implementations plug in. The gateway
client depends on this protocol, not on httpx directly, so the transport
can be swapped for test fakes without changing parsing logic.

Concrete implementations:
    - HttpxTransport (default, uses httpx.AsyncClient)
    - FakeTransport (tests, returns canned responses)

Error contract for every implementation:
    - 2xx with a JSON object body → returned as a dict.
    - non-2xx with a gRPC status body ``{"code": N, "message": ...}`` →
      RequestError(N, message). This is how the gateway reports gRPC
      failures such as NOT_FOUND.
    - anything else (connection refused, timeout, TLS, non-JSON body) →
      TransportError, chained to the underlying exception.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from txsubmit.errors import MalformedResponse, RequestError, TransportError

if TYPE_CHECKING:
    import httpx

log = logging.getLogger("txsubmit.transport")


@runtime_checkable
class RestTransport(Protocol):
    """Async transport for gateway requests."""

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON body and return the parsed JSON reply.

        Raises:
            RequestError: The node answered with a gRPC status.
            TransportError: The node could not be reached or replied
                with something that is not a gRPC status.
        """
        ...

    async def get_json(self, url: str) -> dict[str, Any]:
        """GET a resource and return the parsed JSON reply. Same errors as post_json."""
        ...


class HttpxTransport:
    """Default transport using httpx.AsyncClient.

    Opens a fresh client per call: connections are not pooled or reused
    across calls.

    Lazily imports httpx — it is only needed when actually making network
    calls.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Send a JSON POST via httpx."""
        import httpx

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers={"Accept": "application/json"},
                )
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"POST {url} timed out after {self._timeout}s",
                details={"url": url, "timeout_s": self._timeout},
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"POST {url} failed: {exc}", details={"url": url}) from exc
        return _decode(response)

    async def get_json(self, url: str) -> dict[str, Any]:
        """Send a GET via httpx."""
        import httpx

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url, headers={"Accept": "application/json"})
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"GET {url} timed out after {self._timeout}s",
                details={"url": url, "timeout_s": self._timeout},
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"GET {url} failed: {exc}", details={"url": url}) from exc
        return _decode(response)


def _decode(response: httpx.Response) -> dict[str, Any]:
    """Turn an HTTP response into a dict or one of the contract errors."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if response.is_success:
        if not isinstance(body, dict):
            raise MalformedResponse(
                f"expected a JSON object from {response.url}",
                details={"status_code": response.status_code},
            )
        return body

    if isinstance(body, dict) and isinstance(body.get("code"), int):
        log.debug("gateway status %s from %s: %s", body["code"], response.url, body.get("message"))
        raise RequestError(body["code"], str(body.get("message", "")))

    raise TransportError(
        f"HTTP {response.status_code} from {response.url}",
        details={"status_code": response.status_code},
    )
