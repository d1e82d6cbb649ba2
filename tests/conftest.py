"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import random
import sys

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from maple_gateway.core.config.settings import Settings  # noqa: E402
from tests.test_fixtures import FakeClock, ScriptedTransport  # noqa: E402


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def make_settings():
    """
    Factory for Settings with test-friendly defaults.

    Queue timeout is disabled and the API key is a dummy; any field can be
    overridden by keyword.
    """

    def _make(**overrides) -> Settings:
        values = {
            "NEXON_API_KEY": "test_0123456789abcdef0123",
            "RATE_LIMIT_QUEUE_TIMEOUT_MS": 0,
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


# ============================================================================
# Time and Randomness
# ============================================================================


@pytest.fixture
def fake_clock():
    """Virtual clock starting at t=0."""
    return FakeClock()


@pytest.fixture
def seeded_rng():
    """Deterministic jitter source."""
    return random.Random(1234)


# ============================================================================
# Transport Fixtures
# ============================================================================


@pytest.fixture
def scripted_transport():
    """Transport returning a small character payload unless scripted otherwise."""
    return ScriptedTransport(default={"character_name": "Hero", "world_name": "Aquila"})


@pytest.fixture
def access_service(settings, scripted_transport, fake_clock, seeded_rng):
    """AccessService wired with the scripted transport and virtual clock."""
    from maple_gateway.application.services import build_access_service

    return build_access_service(
        settings,
        transport=scripted_transport,
        clock=fake_clock,
        rng=seeded_rng,
    )
