"""
Core Interfaces Module

Protocols for the components the access facade is wired from, enabling
dependency injection and virtual-time testing.

Components:
-----------
- **clock.py**: Clock protocol + SystemClock
- **transport.py**: Transport protocol + TransportFailure

Author: System Architect
Date: 2026-09-28
"""

from maple_gateway.core.interfaces.clock import Clock, SystemClock
from maple_gateway.core.interfaces.transport import Transport, TransportFailure

__all__ = [
    "Clock",
    "SystemClock",
    "Transport",
    "TransportFailure",
]
