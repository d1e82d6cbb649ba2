"""
Base Validator Module

Abstract base class and common validation utilities.

PATTERN: Template Method
------------------------
BaseValidator provides the reusable field checks; subclasses decide which
fields to check and in what order. Every failed check raises the same
ValidationFailedError the error classifier produces for an upstream 400,
carrying `field`, `value` and a human-readable `requirement`.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from re import Pattern
from typing import Any

from maple_gateway.core.exceptions import ValidationFailedError
from maple_gateway.core.logging import get_logger

logger = get_logger(__name__)


class BaseValidator(ABC):
    """
    Abstract base validator with common validation utilities.

    Provides:
    - Required/empty checks
    - Length validation
    - Pattern matching
    - Whitelist checking
    """

    def fail(self, field_name: str, value: Any, requirement: str) -> None:
        """Raise a ValidationFailedError for field_name."""
        raise ValidationFailedError(
            context={"field": field_name, "value": value, "requirement": requirement}
        )

    def validate_not_empty(self, value: Any, field_name: str) -> None:
        if not isinstance(value, str) or not value.strip():
            self.fail(field_name, value, "is required and cannot be empty")

    def validate_length(
        self,
        value: str,
        field_name: str,
        min_length: int | None = None,
        max_length: int | None = None,
    ) -> None:
        """
        Validate string length is within bounds.

        Example:
            validator.validate_length(name, "character_name", min_length=2, max_length=13)
        """
        length = len(value)
        if (min_length is not None and length < min_length) or (
            max_length is not None and length > max_length
        ):
            if min_length is not None and max_length is not None:
                requirement = f"must be between {min_length} and {max_length} characters"
            elif min_length is not None:
                requirement = f"must be at least {min_length} characters"
            else:
                requirement = f"cannot exceed {max_length} characters"
            self.fail(field_name, value, requirement)

    def validate_pattern(
        self, value: str, pattern: str | Pattern, field_name: str, requirement: str | None = None
    ) -> None:
        """Validate string fully matches a regex pattern."""
        if isinstance(pattern, str):
            pattern = re.compile(pattern)

        if not pattern.fullmatch(value):
            self.fail(field_name, value, requirement or "has an invalid format")

    def validate_whitelist(
        self, value: str, allowed_values: Iterable[str], field_name: str, case_sensitive: bool = True
    ) -> None:
        """
        Validate value is in allowed set (whitelist).

        The requirement lists the allowed values in their declared order.
        """
        allowed = list(allowed_values)
        check_value = value if case_sensitive else value.lower()
        check_set = set(allowed) if case_sensitive else {v.lower() for v in allowed}

        if check_value not in check_set:
            self.fail(field_name, value, f"must be one of {', '.join(allowed)}")

    @abstractmethod
    def validate(self, params: dict[str, Any]) -> None:
        """
        Validate input data.

        Raises:
            ValidationFailedError: On the first violated rule
        """
        pass
