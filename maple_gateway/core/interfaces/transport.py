"""
Transport Protocol

The access facade performs upstream calls through a Transport. A transport
returns the decoded response body on success and raises TransportFailure
otherwise; it never classifies, retries or rate-limits on its own.

Architectural Decision: Protocol-based abstraction
- The production transport (httpx) and scripted test transports are
  interchangeable
- Classification stays in one place (ErrorClassifier)

Author: System Architect
Date: 2026-09-28
"""

from typing import Any, Protocol, runtime_checkable


class TransportFailure(Exception):
    """
    Raw failure reported by a transport.

    Attributes:
        status: HTTP status code, None when no response was received
        body: Decoded response body (dict) or raw text, if any
        network_error: Short description of the network failure
            ("timeout", "connection refused", ...) when status is None
        timed_out: True when the request hit the transport timeout
    """

    def __init__(
        self,
        status: int | None = None,
        body: Any = None,
        network_error: str | None = None,
        timed_out: bool = False,
    ):
        self.status = status
        self.body = body
        self.network_error = network_error
        self.timed_out = timed_out
        if status is not None:
            summary = f"HTTP {status}"
        else:
            summary = f"network failure: {network_error or 'unknown'}"
        super().__init__(summary)

    def __repr__(self) -> str:
        return (
            f"TransportFailure(status={self.status}, network_error={self.network_error!r}, "
            f"timed_out={self.timed_out})"
        )


@runtime_checkable
class Transport(Protocol):
    """
    Upstream call interface.

    Usage:
        async def load(transport: Transport) -> dict:
            return await transport.perform_call("character.ocid", {"character_name": "Hero"})
    """

    async def perform_call(self, endpoint: str, params: dict[str, Any]) -> Any:
        """
        Perform one upstream call.

        Raises:
            TransportFailure: On any non-success outcome
        """
        ...
