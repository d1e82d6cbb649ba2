"""
Request Parameter Validator

Structural rules for NEXON request parameters:

- world_name: one of the SEA worlds
- character_name: 2-13 letters or digits
- guild_name: 2-20 characters, letters, digits and spaces
- ocid / oguild_id: non-empty, at least 10 characters
- date: YYYY-MM-DD, not in the future, not before 2003-04-29
- endpoint: a registered identifier or a raw path starting with "/"

The same rules serve two callers: the error classifier, which turns an
upstream 400 into the specific ValidationFailedError, and the access
service's optional pre-flight check.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from maple_gateway.application.validators.base import BaseValidator
from maple_gateway.core.config.constants import (
    CHARACTER_NAME_MAX_LENGTH,
    CHARACTER_NAME_MIN_LENGTH,
    GUILD_NAME_MAX_LENGTH,
    GUILD_NAME_MIN_LENGTH,
    ENDPOINTS,
    MIN_QUERY_DATE,
    WORLDS,
)
from maple_gateway.core.exceptions import ValidationFailedError
from maple_gateway.infrastructure.cache.cache_keys import sanitize_identifier

CHARACTER_NAME_PATTERN = re.compile(r"[A-Za-z0-9가-힣]+")
GUILD_NAME_PATTERN = re.compile(r"[A-Za-z0-9가-힣 ]+")
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
MIN_ID_LENGTH = 10


@dataclass(frozen=True)
class ParamViolation:
    """The first rule a parameter set breaks."""

    field: str
    value: Any
    requirement: str

    def to_error(self, http_status: int | None = None, **context) -> ValidationFailedError:
        return ValidationFailedError(
            http_status=http_status,
            context={"field": self.field, "value": self.value, "requirement": self.requirement, **context}
        )


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class ParamValidator(BaseValidator):
    """
    Validates NEXON request parameters.

    Usage:
        validator = ParamValidator()

        violation = validator.find_violation({"world_name": "Nowhere"})
        # ParamViolation(field="world_name", value="Nowhere", requirement="must be one of ...")

        validator.validate({"character_name": "Hero"})  # raises on violation
    """

    def __init__(self, today: Callable[[], date] = _utc_today):
        self._today = today

    def validate(self, params: dict[str, Any]) -> None:
        """
        Check params against every rule, in a fixed field order.

        Raises:
            ValidationFailedError: On the first violated rule
        """
        if not params:
            return
        if "world_name" in params:
            self.validate_world(params["world_name"])
        for field_name in ("character_name", "name"):
            if field_name in params:
                self.validate_character_name(params[field_name], field_name)
        if "guild_name" in params:
            self.validate_guild_name(params["guild_name"])
        for field_name in ("ocid", "oguild_id"):
            if field_name in params:
                self.validate_identifier(params[field_name], field_name)
        if "date" in params and params["date"] is not None:
            self.validate_date(params["date"])

    def find_violation(self, params: dict[str, Any] | None) -> ParamViolation | None:
        """Return the first violation as a value instead of raising."""
        try:
            self.validate(params or {})
        except ValidationFailedError as e:
            return ParamViolation(field=e.field, value=e.details.get("value"), requirement=e.requirement)
        return None

    def validate_world(self, value: Any) -> None:
        self.validate_not_empty(value, "world_name")
        self.validate_whitelist(value.strip(), WORLDS, "world_name")

    def validate_character_name(self, value: Any, field_name: str = "character_name") -> None:
        self.validate_not_empty(value, field_name)
        name = sanitize_identifier(value)
        self.validate_length(name, field_name, CHARACTER_NAME_MIN_LENGTH, CHARACTER_NAME_MAX_LENGTH)
        self.validate_pattern(
            name, CHARACTER_NAME_PATTERN, field_name, "may only contain letters and numbers"
        )

    def validate_guild_name(self, value: Any) -> None:
        self.validate_not_empty(value, "guild_name")
        name = sanitize_identifier(value)
        self.validate_length(name, "guild_name", GUILD_NAME_MIN_LENGTH, GUILD_NAME_MAX_LENGTH)
        self.validate_pattern(
            name, GUILD_NAME_PATTERN, "guild_name", "may only contain letters, numbers and spaces"
        )

    def validate_identifier(self, value: Any, field_name: str) -> None:
        self.validate_not_empty(value, field_name)
        self.validate_length(value.strip(), field_name, min_length=MIN_ID_LENGTH)

    def validate_date(self, value: Any) -> None:
        self.validate_not_empty(value, "date")
        self.validate_pattern(value, DATE_PATTERN, "date", "must be in YYYY-MM-DD format")
        try:
            parsed = date.fromisoformat(value)
        except ValueError:
            self.fail("date", value, "must be a valid calendar date")
        if parsed > self._today():
            self.fail("date", value, "cannot be in the future")
        if parsed < date.fromisoformat(MIN_QUERY_DATE):
            self.fail("date", value, f"cannot be before {MIN_QUERY_DATE}")

    def validate_endpoint(self, endpoint: Any) -> None:
        """Accept a registered endpoint identifier or a raw API path."""
        self.validate_not_empty(endpoint, "endpoint")
        if not endpoint.startswith("/") and endpoint not in ENDPOINTS:
            self.fail("endpoint", endpoint, "must be a known endpoint identifier or an API path")
