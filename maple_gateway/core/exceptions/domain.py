"""
Classified Upstream Errors

Every transport failure is turned into exactly one DomainError subclass
before it crosses the access facade. A DomainError is immutable once
constructed: the retry controller, the logs and the caller all see the same
kind, sub-kind, retry verdict and context.

Author: System Architect
Date: 2026-09-28
"""

from enum import Enum
from types import MappingProxyType
from typing import Any

from maple_gateway.core.exceptions.base import MapleGatewayError
from maple_gateway.core.exceptions.taxonomy import (
    ConnectionFailure,
    ErrorKind,
    QuotaScope,
    ResourceKind,
    UnauthorizedReason,
    UnavailableReason,
    is_retryable,
    render_message,
    sub_kind_value,
)
from maple_gateway.core.logging.redaction import redact_mapping


class DomainError(MapleGatewayError):
    """
    Base class for classified upstream failures.

    Attributes:
        kind: ErrorKind of the failure
        sub_kind: Optional refinement (e.g. "character" for NOT_FOUND)
        http_status: Upstream HTTP status, None for transport-level failures
        retryable: Verdict from the retryability table
        context: Redacted diagnostic context (endpoint, params, attempt, ...)

    Example:
        raise NotFoundError(
            ResourceKind.CHARACTER,
            http_status=404,
            context={"endpoint": "character.basic", "params": {"ocid": "..."}}
        )
    """

    kind: ErrorKind = ErrorKind.UNKNOWN
    default_sub_kind: str | None = None

    _FROZEN_ATTRS = frozenset(
        {"kind", "sub_kind", "http_status", "retryable", "message", "details"}
    )

    def __init__(
        self,
        sub_kind: str | Enum | None = None,
        *,
        http_status: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        sub = sub_kind_value(sub_kind) or self.default_sub_kind
        safe_context = redact_mapping(context)

        self.sub_kind = sub
        self.http_status = http_status
        self.retryable = is_retryable(self.kind, sub)
        super().__init__(render_message(self.kind, sub, safe_context), details=safe_context)
        self.details = MappingProxyType(dict(self.details))
        self._sealed = True

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self._FROZEN_ATTRS and getattr(self, "_sealed", False):
            raise AttributeError(f"{type(self).__name__} is immutable")
        super().__setattr__(name, value)

    def __reduce__(self):
        # Rebuild through __init__: args holds the rendered message, not sub_kind.
        return (
            _rebuild_domain_error,
            (type(self), self.sub_kind, self.http_status, dict(self.details)),
        )

    @property
    def context(self) -> dict[str, Any]:
        """Copy of the diagnostic context."""
        return dict(self.details)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            kind=self.kind.value,
            sub_kind=self.sub_kind,
            http_status=self.http_status,
            retryable=self.retryable,
        )
        return data

    def __repr__(self) -> str:
        sub = f"{{{self.sub_kind}}}" if self.sub_kind else ""
        return (
            f"{self.__class__.__name__}(kind={self.kind.value}{sub}, "
            f"http_status={self.http_status}, retryable={self.retryable})"
        )


def _rebuild_domain_error(
    cls: type[DomainError],
    sub_kind: str | None,
    http_status: int | None,
    context: dict[str, Any],
) -> DomainError:
    return cls(sub_kind, http_status=http_status, context=context)


class UnauthorizedError(DomainError):
    """401: missing, expired or invalid API key."""

    kind = ErrorKind.UNAUTHORIZED
    default_sub_kind = UnauthorizedReason.INVALID.value


class ForbiddenError(DomainError):
    """403: the key may not access the resource."""

    kind = ErrorKind.FORBIDDEN


class NotFoundError(DomainError):
    """404 for a character, guild, ranking, union or other resource."""

    kind = ErrorKind.NOT_FOUND
    default_sub_kind = ResourceKind.RESOURCE.value


class RateLimitedError(DomainError):
    """
    429 without a quota hint.

    Common causes:
    - Too many requests in the upstream's per-second window
    - Another process sharing the same API key
    """

    kind = ErrorKind.RATE_LIMITED


class QuotaExceededError(DomainError):
    """429 that names a daily or concurrent quota."""

    kind = ErrorKind.QUOTA_EXCEEDED
    default_sub_kind = QuotaScope.DAILY.value


class ValidationFailedError(DomainError):
    """
    400, or a pre-flight parameter check.

    The context always carries `field`, `value` and `requirement`.
    """

    kind = ErrorKind.VALIDATION_FAILED

    @property
    def field(self) -> str | None:
        return self.details.get("field")

    @property
    def requirement(self) -> str | None:
        return self.details.get("requirement")


class ServerError(DomainError):
    """500 from the upstream API."""

    kind = ErrorKind.SERVER_ERROR


class ServiceUnavailableError(DomainError):
    """
    503, a transient 404, or an admission ticket that waited too long.

    Sub-kinds: maintenance (not retried), generic, queue_timeout (not retried).
    """

    kind = ErrorKind.SERVICE_UNAVAILABLE
    default_sub_kind = UnavailableReason.GENERIC.value


class GatewayTimeoutError(DomainError):
    """504 from the upstream gateway."""

    kind = ErrorKind.GATEWAY_TIMEOUT


class ConnectionFailedError(DomainError):
    """Transport-level timeout or network failure, or a 502 from the gateway."""

    kind = ErrorKind.CONNECTION_FAILED
    default_sub_kind = ConnectionFailure.NETWORK.value


class UnknownApiError(DomainError):
    """Anything the classifier could not match."""

    kind = ErrorKind.UNKNOWN


ERROR_CLASSES: dict[ErrorKind, type[DomainError]] = {
    cls.kind: cls
    for cls in (
        UnauthorizedError,
        ForbiddenError,
        NotFoundError,
        RateLimitedError,
        QuotaExceededError,
        ValidationFailedError,
        ServerError,
        ServiceUnavailableError,
        GatewayTimeoutError,
        ConnectionFailedError,
        UnknownApiError,
    )
}


def create_domain_error(
    kind: ErrorKind,
    sub_kind: str | Enum | None = None,
    *,
    http_status: int | None = None,
    context: dict[str, Any] | None = None,
) -> DomainError:
    """Build the DomainError subclass registered for `kind`."""
    return ERROR_CLASSES[kind](sub_kind, http_status=http_status, context=context)
