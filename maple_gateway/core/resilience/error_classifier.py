"""
Error Classifier

Maps a raw transport outcome (status, body, endpoint, params) to exactly one
DomainError. Rules are evaluated in a fixed order and the first match wins,
so identical inputs always produce the same kind and sub-kind.

STAGE-4: Error classification

Rules:
- 401 -> Unauthorized{expired|missing|invalid} from the upstream message
- 403 -> Forbidden
- 404 -> NotFound{ranking|guild|union|character|resource} from the endpoint,
         or ServiceUnavailable{generic} when the message reads as transient
- 429 -> QuotaExceeded{daily|concurrent} when the message names a quota,
         RateLimited otherwise
- 400 -> ValidationFailed for the first parameter rule the request breaks,
         or a generic ValidationFailed when none does
- 500 -> ServerError
- 502 -> ConnectionFailed{gateway}
- 503 -> ServiceUnavailable{maintenance|generic}
- 504 -> GatewayTimeout
- no status -> ConnectionFailed{timeout|network}
- anything else -> Unknown

Author: System Architect
Date: 2026-09-28
"""

from collections.abc import Mapping
from typing import Any

import orjson

from maple_gateway.application.validators.param_validator import ParamValidator
from maple_gateway.core.config.constants import Stage
from maple_gateway.core.exceptions import (
    ConnectionFailedError,
    ConnectionFailure,
    DomainError,
    ForbiddenError,
    GatewayTimeoutError,
    NotFoundError,
    QuotaExceededError,
    QuotaScope,
    RateLimitedError,
    ResourceKind,
    ServerError,
    ServiceUnavailableError,
    UnauthorizedError,
    UnauthorizedReason,
    UnavailableReason,
    UnknownApiError,
    ValidationFailedError,
)
from maple_gateway.core.interfaces import TransportFailure
from maple_gateway.core.logging import get_logger, log_stage, redact_text

logger = get_logger(__name__)

# Checked in order: "ranking.guild" is a ranking, not a guild
_RESOURCE_MARKERS: tuple[tuple[str, ResourceKind], ...] = (
    ("ranking", ResourceKind.RANKING),
    ("guild", ResourceKind.GUILD),
    ("union", ResourceKind.UNION),
    ("character", ResourceKind.CHARACTER),
)

_TRANSIENT_HINTS = ("unavailable", "temporar")
_MAINTENANCE_HINTS = ("maintenance", "점검")
# NEXON error codes for game / API maintenance
_MAINTENANCE_CODES = frozenset({"OPENAPI00010", "OPENAPI00011"})
_TIMEOUT_HINTS = ("timeout", "timed out")


def extract_upstream_error(body: Any) -> tuple[str | None, str]:
    """
    Pull (error code, message) out of a response body.

    Handles the NEXON shape {"error": {"name": ..., "message": ...}},
    a flat {"message": ...}, JSON text or bytes, and plain text.
    """
    if body is None:
        return None, ""

    if isinstance(body, (bytes, bytearray, str)):
        try:
            body = orjson.loads(body)
        except orjson.JSONDecodeError:
            text = body.decode("utf-8", "replace") if isinstance(body, (bytes, bytearray)) else body
            return None, text.strip()

    if isinstance(body, Mapping):
        error = body.get("error")
        if isinstance(error, Mapping):
            return error.get("name"), str(error.get("message") or "")
        if isinstance(error, str):
            return None, error
        return None, str(body.get("message") or "")

    return None, str(body)


class ErrorClassifier:
    """
    Deterministic transport-outcome classifier.

    Usage:
        classifier = ErrorClassifier()

        error = classifier.classify(404, "", "character.basic", {"ocid": "..."})
        # NotFoundError(kind=not_found{character}, http_status=404, retryable=False)
    """

    def __init__(self, param_validator: ParamValidator | None = None):
        self._param_validator = param_validator or ParamValidator()

    def classify_failure(
        self,
        failure: TransportFailure,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        attempt: int | None = None,
    ) -> DomainError:
        """Classify a TransportFailure raised by a transport."""
        return self.classify(
            failure.status,
            failure.body,
            endpoint,
            params,
            network_error=failure.network_error,
            timed_out=failure.timed_out,
            attempt=attempt,
        )

    def classify(
        self,
        status: int | None,
        body: Any,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        *,
        network_error: str | None = None,
        timed_out: bool = False,
        attempt: int | None = None,
    ) -> DomainError:
        """
        Classify one transport outcome.

        Args:
            status: HTTP status, None when no response was received
            body: Response body (dict, JSON text/bytes or plain text)
            endpoint: Endpoint identifier or path
            params: Request parameters
            network_error: Description of a transport-level failure
            timed_out: True when the transport hit its timeout
            attempt: 1-based attempt number, recorded in the context

        Returns:
            DomainError: The classified error (never raised here)
        """
        code, upstream_message = extract_upstream_error(body)
        context: dict[str, Any] = {
            "endpoint": endpoint,
            "params": dict(params or {}),
        }
        if attempt is not None:
            context["attempt"] = attempt
        if upstream_message:
            context["upstream_message"] = redact_text(upstream_message)
        if code:
            context["upstream_code"] = code
        if network_error:
            context["network_error"] = network_error

        error = self._match(status, code, upstream_message.lower(), endpoint, params, context, timed_out)

        log_stage(
            logger,
            Stage.CLASSIFICATION,
            "Transport failure classified",
            level="debug",
            endpoint=endpoint,
            http_status=status,
            kind=error.kind.value,
            sub_kind=error.sub_kind,
            retryable=error.retryable,
        )
        return error

    def _match(
        self,
        status: int | None,
        code: str | None,
        text: str,
        endpoint: str,
        params: Mapping[str, Any] | None,
        context: dict[str, Any],
        timed_out: bool,
    ) -> DomainError:
        if status is None:
            network = (context.get("network_error") or "").lower()
            if timed_out or any(hint in network for hint in _TIMEOUT_HINTS):
                return ConnectionFailedError(ConnectionFailure.TIMEOUT, context=context)
            return ConnectionFailedError(ConnectionFailure.NETWORK, context=context)

        if status == 401:
            return UnauthorizedError(self._unauthorized_reason(text), http_status=status, context=context)

        if status == 403:
            return ForbiddenError(http_status=status, context=context)

        if status == 404:
            if any(hint in text for hint in _TRANSIENT_HINTS):
                return ServiceUnavailableError(
                    UnavailableReason.GENERIC, http_status=status, context=context
                )
            return NotFoundError(self.resource_kind(endpoint), http_status=status, context=context)

        if status == 429:
            if "daily" in text or "per day" in text:
                return QuotaExceededError(QuotaScope.DAILY, http_status=status, context=context)
            if "concurrent" in text:
                return QuotaExceededError(QuotaScope.CONCURRENT, http_status=status, context=context)
            return RateLimitedError(http_status=status, context=context)

        if status == 400:
            return self._validation_error(params, context)

        if status == 500:
            return ServerError(http_status=status, context=context)

        if status == 502:
            return ConnectionFailedError(ConnectionFailure.GATEWAY, http_status=status, context=context)

        if status == 503:
            if code in _MAINTENANCE_CODES or any(hint in text for hint in _MAINTENANCE_HINTS):
                reason = UnavailableReason.MAINTENANCE
            else:
                reason = UnavailableReason.GENERIC
            return ServiceUnavailableError(reason, http_status=status, context=context)

        if status == 504:
            return GatewayTimeoutError(http_status=status, context=context)

        return UnknownApiError(http_status=status, context=context)

    @staticmethod
    def resource_kind(endpoint: str) -> ResourceKind:
        lowered = endpoint.lower()
        for marker, kind in _RESOURCE_MARKERS:
            if marker in lowered:
                return kind
        return ResourceKind.RESOURCE

    @staticmethod
    def _unauthorized_reason(text: str) -> UnauthorizedReason:
        if "expired" in text:
            return UnauthorizedReason.EXPIRED
        if "missing" in text or "required" in text:
            return UnauthorizedReason.MISSING
        return UnauthorizedReason.INVALID

    def _validation_error(
        self, params: Mapping[str, Any] | None, context: dict[str, Any]
    ) -> ValidationFailedError:
        violation = self._param_validator.find_violation(dict(params or {}))
        if violation is not None:
            return violation.to_error(http_status=400, **context)
        return ValidationFailedError(
            http_status=400,
            context={
                **context,
                "field": "params",
                "value": None,
                "requirement": "the request parameters were rejected by the API",
            },
        )
