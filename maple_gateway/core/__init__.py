"""
Core Module

Foundational components: configuration, logging, exceptions, protocols and
resilience primitives.
"""

from .exceptions import (
    ConfigurationError,
    DomainError,
    ErrorKind,
    MapleGatewayError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationFailedError,
)
from .logging import (
    clear_request_id,
    get_logger,
    get_request_id,
    log_stage,
    set_request_id,
    setup_logging,
)

__all__ = [
    "ConfigurationError",
    "DomainError",
    "ErrorKind",
    "MapleGatewayError",
    "NotFoundError",
    "ServiceUnavailableError",
    "ValidationFailedError",
    "clear_request_id",
    "get_logger",
    "get_request_id",
    "log_stage",
    "set_request_id",
    "setup_logging",
]
