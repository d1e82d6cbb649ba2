"""
Test Fixtures Package

Shared test utilities and helpers for consistent testing across all modules.
"""

from .clock_factory import FakeClock, SchedulingClock
from .transport_factory import ScriptedTransport, TransportTestFactory

__all__ = ["FakeClock", "SchedulingClock", "ScriptedTransport", "TransportTestFactory"]
