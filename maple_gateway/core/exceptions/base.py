"""
Gateway Error Root

MapleGatewayError is the root of every exception this package raises on
purpose. Classified upstream failures (DomainError and its subclasses) live
in `domain.py`; misconfiguration is reported with ConfigurationError.

Author: System Architect
Date: 2026-09-28
"""

from typing import Any


class MapleGatewayError(Exception):
    """
    Root gateway exception.

    Callers can catch this one type at the facade boundary and log
    `to_dict()` as a structured event.

    Attributes:
        message: Human-readable summary
        details: Diagnostic fields (a private copy of what was passed in)

    Example:
        raise ConfigurationError(
            "NEXON_API_KEY is not set",
            details={"setting": "NEXON_API_KEY"}
        )
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = dict(details or {})
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Structured form for log events and tool responses."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "details": dict(self.details),
        }

    def __repr__(self) -> str:
        if not self.details:
            return f"{type(self).__name__}(message={self.message!r})"
        return f"{type(self).__name__}(message={self.message!r}, details={dict(self.details)!r})"


class ConfigurationError(MapleGatewayError):
    """Missing or invalid gateway configuration (API key, endpoint identifier)."""
