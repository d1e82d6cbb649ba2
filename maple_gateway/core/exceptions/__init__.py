"""
Exception Module

Structured exception hierarchy for the NEXON access gateway.

Module Structure:
-----------------
- **base.py**: MapleGatewayError base class + ConfigurationError
- **taxonomy.py**: ErrorKind, sub-kinds, retryability table, message templates
- **domain.py**: DomainError and one subclass per ErrorKind

Usage:
------
```python
from maple_gateway.core.exceptions import DomainError, NotFoundError, ErrorKind

try:
    data = await service.fetch("character.basic", {"ocid": ocid})
except NotFoundError as e:
    print(e.sub_kind)  # "character"
except DomainError as e:
    if e.retryable:
        ...
```

Author: System Architect
Date: 2026-09-28
"""

from maple_gateway.core.exceptions.base import ConfigurationError, MapleGatewayError
from maple_gateway.core.exceptions.domain import (
    ERROR_CLASSES,
    ConnectionFailedError,
    DomainError,
    ForbiddenError,
    GatewayTimeoutError,
    NotFoundError,
    QuotaExceededError,
    RateLimitedError,
    ServerError,
    ServiceUnavailableError,
    UnauthorizedError,
    UnknownApiError,
    ValidationFailedError,
    create_domain_error,
)
from maple_gateway.core.exceptions.taxonomy import (
    MESSAGE_TEMPLATES,
    RETRYABILITY,
    ConnectionFailure,
    ErrorKind,
    QuotaScope,
    ResourceKind,
    UnauthorizedReason,
    UnavailableReason,
    is_retryable,
    render_message,
)

__all__ = [
    # Base
    "MapleGatewayError",
    "ConfigurationError",
    # Taxonomy
    "ErrorKind",
    "UnauthorizedReason",
    "ResourceKind",
    "QuotaScope",
    "UnavailableReason",
    "ConnectionFailure",
    "RETRYABILITY",
    "MESSAGE_TEMPLATES",
    "is_retryable",
    "render_message",
    # Domain errors
    "DomainError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "RateLimitedError",
    "QuotaExceededError",
    "ValidationFailedError",
    "ServerError",
    "ServiceUnavailableError",
    "GatewayTimeoutError",
    "ConnectionFailedError",
    "UnknownApiError",
    "ERROR_CLASSES",
    "create_domain_error",
]
