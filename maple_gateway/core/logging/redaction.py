"""
Sensitive Value Redaction

Shared by the structlog processor chain and by DomainError construction, so a
credential can neither be logged nor serialized with an error.
"""

import re
from collections.abc import Mapping
from typing import Any

from maple_gateway.core.config.constants import REDACTED, SENSITIVE_KEY_PATTERN

_SENSITIVE_KEY = re.compile(SENSITIVE_KEY_PATTERN, re.IGNORECASE)

# NEXON keys are "test_"/"live_" prefixed hex strings
_API_KEY_TEXT = re.compile(r"\b(?:test|live)_[0-9a-f]{16,}\b", re.IGNORECASE)


def is_sensitive_key(key: Any) -> bool:
    return isinstance(key, str) and bool(_SENSITIVE_KEY.search(key))


def redact_value(value: Any) -> Any:
    """Recursively redact sensitive keys inside mappings and sequences."""
    if isinstance(value, Mapping):
        return redact_mapping(value)
    if isinstance(value, (list, tuple)):
        return type(value)(redact_value(item) for item in value)
    if isinstance(value, str):
        return redact_text(value)
    return value


def redact_mapping(data: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Return a copy of `data` with sensitive keys masked.

    Example:
        >>> redact_mapping({"character_name": "Hero", "api_key": "live_abc"})
        {'character_name': 'Hero', 'api_key': '[REDACTED]'}
    """
    if not data:
        return {}
    return {
        key: REDACTED if is_sensitive_key(key) else redact_value(value)
        for key, value in data.items()
    }


def redact_text(text: str) -> str:
    """Mask API-key-looking substrings in free text."""
    return _API_KEY_TEXT.sub(REDACTED, text)
