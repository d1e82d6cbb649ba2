"""
Transport Test Factory

Scripted Transport implementations for exercising the retry controller and
the access service without any network.
"""

import copy
from collections import deque
from typing import Any

from maple_gateway.core.interfaces import TransportFailure


class ScriptedTransport:
    """
    Transport that replays a script of outcomes.

    Each outcome is either a value (returned, deep-copied) or an exception
    instance (raised). When the script is exhausted `default` is used.
    """

    def __init__(self, *outcomes: Any, default: Any = None):
        self._script = deque(outcomes)
        self.default = default
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def push(self, *outcomes: Any) -> None:
        self._script.extend(outcomes)

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def perform_call(self, endpoint: str, params: dict[str, Any]) -> Any:
        self.calls.append((endpoint, dict(params)))
        outcome = self._script.popleft() if self._script else self.default
        if isinstance(outcome, BaseException):
            raise outcome
        return copy.deepcopy(outcome)


class TransportTestFactory:
    """Factory for common transport scripts."""

    @staticmethod
    def always_ok(body: Any = None) -> ScriptedTransport:
        return ScriptedTransport(default=body if body is not None else {"ok": True})

    @staticmethod
    def always_status(status: int, body: Any = None) -> ScriptedTransport:
        return ScriptedTransport(default=TransportFailure(status=status, body=body))

    @staticmethod
    def fail_then_succeed(failures: list[TransportFailure], body: Any) -> ScriptedTransport:
        return ScriptedTransport(*failures, default=body)
