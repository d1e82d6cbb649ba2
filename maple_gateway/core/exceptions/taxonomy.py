"""
Error Taxonomy

The closed set of error kinds, their sub-kinds, the retryability table and
the user-facing message templates.

RETRYABILITY is the single source of truth for "should this be retried":
the retry controller and any caller-facing query both go through
`is_retryable()`.

Author: System Architect
Date: 2026-09-28
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Classified upstream failure kinds."""

    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    VALIDATION_FAILED = "validation_failed"
    SERVER_ERROR = "server_error"
    SERVICE_UNAVAILABLE = "service_unavailable"
    GATEWAY_TIMEOUT = "gateway_timeout"
    CONNECTION_FAILED = "connection_failed"
    UNKNOWN = "unknown"


class UnauthorizedReason(str, Enum):
    EXPIRED = "expired"
    MISSING = "missing"
    INVALID = "invalid"


class ResourceKind(str, Enum):
    """Resource families a NOT_FOUND can refer to."""

    CHARACTER = "character"
    GUILD = "guild"
    RANKING = "ranking"
    UNION = "union"
    RESOURCE = "resource"


class QuotaScope(str, Enum):
    DAILY = "daily"
    CONCURRENT = "concurrent"


class UnavailableReason(str, Enum):
    MAINTENANCE = "maintenance"
    GENERIC = "generic"
    QUEUE_TIMEOUT = "queue_timeout"


class ConnectionFailure(str, Enum):
    TIMEOUT = "timeout"
    NETWORK = "network"
    GATEWAY = "gateway"


def sub_kind_value(sub_kind: str | Enum | None) -> str | None:
    """Normalise a sub-kind to its plain string value."""
    if isinstance(sub_kind, Enum):
        return sub_kind.value
    return sub_kind


# (kind, sub_kind) -> retryable. A (kind, None) row is the default for the kind.
RETRYABILITY: dict[tuple[ErrorKind, str | None], bool] = {
    (ErrorKind.UNAUTHORIZED, None): False,
    (ErrorKind.FORBIDDEN, None): False,
    (ErrorKind.NOT_FOUND, None): False,
    (ErrorKind.RATE_LIMITED, None): True,
    (ErrorKind.QUOTA_EXCEEDED, None): False,
    (ErrorKind.QUOTA_EXCEEDED, QuotaScope.DAILY.value): False,
    (ErrorKind.QUOTA_EXCEEDED, QuotaScope.CONCURRENT.value): True,
    (ErrorKind.VALIDATION_FAILED, None): False,
    (ErrorKind.SERVER_ERROR, None): True,
    (ErrorKind.SERVICE_UNAVAILABLE, None): True,
    (ErrorKind.SERVICE_UNAVAILABLE, UnavailableReason.GENERIC.value): True,
    (ErrorKind.SERVICE_UNAVAILABLE, UnavailableReason.MAINTENANCE.value): False,
    (ErrorKind.SERVICE_UNAVAILABLE, UnavailableReason.QUEUE_TIMEOUT.value): False,
    (ErrorKind.GATEWAY_TIMEOUT, None): True,
    (ErrorKind.CONNECTION_FAILED, None): False,
    (ErrorKind.CONNECTION_FAILED, ConnectionFailure.TIMEOUT.value): True,
    (ErrorKind.CONNECTION_FAILED, ConnectionFailure.NETWORK.value): True,
    (ErrorKind.CONNECTION_FAILED, ConnectionFailure.GATEWAY.value): False,
    (ErrorKind.UNKNOWN, None): False,
}


def is_retryable(kind: ErrorKind, sub_kind: str | Enum | None = None) -> bool:
    """
    Look up the retry verdict for a kind/sub-kind pair.

    Falls back to the kind's default row, and to False for anything unlisted.
    """
    key = (kind, sub_kind_value(sub_kind))
    if key in RETRYABILITY:
        return RETRYABILITY[key]
    return RETRYABILITY.get((kind, None), False)


# One stable template per kind. Placeholders come from the error context
# plus `sub_kind`; upstream wording never reaches the rendered message.
MESSAGE_TEMPLATES: dict[ErrorKind, str] = {
    ErrorKind.UNAUTHORIZED: (
        "The NEXON API key was rejected ({sub_kind}). Check the configured API key."
    ),
    ErrorKind.FORBIDDEN: "The configured API key is not allowed to access this resource.",
    ErrorKind.NOT_FOUND: (
        "The requested {sub_kind} could not be found. Check the spelling and try again."
    ),
    ErrorKind.RATE_LIMITED: (
        "The NEXON API rate limit was exceeded. Please wait a moment before retrying."
    ),
    ErrorKind.QUOTA_EXCEEDED: (
        "The {sub_kind} request quota is exhausted. Please wait before making more requests."
    ),
    ErrorKind.VALIDATION_FAILED: "Invalid value for '{field}': {requirement}.",
    ErrorKind.SERVER_ERROR: (
        "The NEXON API reported an internal error. Please try again later."
    ),
    ErrorKind.SERVICE_UNAVAILABLE: (
        "The NEXON API is currently unavailable ({sub_kind}). Please try again later."
    ),
    ErrorKind.GATEWAY_TIMEOUT: "The NEXON API gateway timed out. Please try again shortly.",
    ErrorKind.CONNECTION_FAILED: (
        "Could not reach the NEXON API ({sub_kind}). Check network connectivity."
    ),
    ErrorKind.UNKNOWN: "An unexpected error occurred while contacting the NEXON API.",
}


class _TemplateValues(dict):
    def __missing__(self, key: str) -> str:
        return "unknown"


def render_message(
    kind: ErrorKind,
    sub_kind: str | Enum | None = None,
    context: Mapping[str, Any] | None = None,
) -> str:
    """Render the stable user-facing message for a kind."""
    values = _TemplateValues(context or {})
    sub = sub_kind_value(sub_kind)
    if sub is not None:
        values["sub_kind"] = sub
    return MESSAGE_TEMPLATES[kind].format_map(values)
