"""
Unit Tests for Configuration Settings

Tests the settings loading, validation, unit conversion and default values.
"""

import pytest
from pydantic import ValidationError

from maple_gateway.core.config.constants import API_BASE_URL, ENDPOINTS, WORLDS, RateCategory, Stage
from maple_gateway.core.config.settings import Settings, get_settings, reload_settings


@pytest.mark.unit
class TestSettingsDefaults:
    """Test Settings defaults match the upstream rate contract."""

    def test_settings_can_be_created(self):
        """Test that Settings can be instantiated without any API key."""
        settings = Settings(NEXON_API_KEY=None)
        assert settings is not None
        assert settings.NEXON_API_KEY is None

    def test_rate_limit_defaults(self):
        """Test that rate limits default to 8 rps / 500 rpm / burst 12 and heavy 5 rps."""
        settings = Settings()

        assert settings.rate_limit.RATE_LIMIT_REQUESTS_PER_SECOND == 8
        assert settings.rate_limit.RATE_LIMIT_REQUESTS_PER_MINUTE == 500
        assert settings.rate_limit.RATE_LIMIT_BURST == 12
        assert settings.rate_limit.RATE_LIMIT_HEAVY_REQUESTS_PER_SECOND == 5
        assert settings.rate_limit.RATE_LIMIT_HEAVY_MARKERS == ["ranking"]

    def test_retry_defaults(self):
        """Test that retry defaults are 3 retries, 1 s base, 30 s cap, factor 2, 10% jitter."""
        settings = Settings()

        assert settings.retry.RETRY_MAX_RETRIES == 3
        assert settings.retry_base_delay_seconds == 1.0
        assert settings.retry_max_delay_seconds == 30.0
        assert settings.retry.RETRY_BACKOFF_FACTOR == 2.0
        assert settings.retry.RETRY_JITTER_FACTOR == 0.1

    def test_cache_and_transport_defaults(self):
        """Test that cache and transport defaults convert to seconds."""
        settings = Settings()

        assert settings.cache.CACHE_MAX_ENTRIES == 1000
        assert settings.cache_default_ttl_seconds == 300.0
        assert settings.nexon_timeout_seconds == 10.0
        assert settings.NEXON_BASE_URL == API_BASE_URL

    def test_queue_timeout_zero_disables(self):
        """Test that a zero queue timeout maps to None."""
        assert Settings(RATE_LIMIT_QUEUE_TIMEOUT_MS=0).queue_timeout_seconds is None
        assert Settings(RATE_LIMIT_QUEUE_TIMEOUT_MS=1500).queue_timeout_seconds == 1.5


@pytest.mark.unit
class TestSettingsValidation:
    """Test fail-fast validation of configuration values."""

    @pytest.mark.parametrize(
        "field",
        ["RATE_LIMIT_REQUESTS_PER_SECOND", "RATE_LIMIT_BURST", "CACHE_MAX_ENTRIES"],
    )
    def test_non_positive_limits_rejected(self, field):
        """Test that rates, bursts and sizes below 1 are rejected."""
        with pytest.raises(ValidationError):
            Settings(**{field: 0})

    def test_negative_retries_rejected(self):
        """Test that a negative retry count is rejected."""
        with pytest.raises(ValidationError):
            Settings(RETRY_MAX_RETRIES=-1)

    def test_backoff_factor_below_one_rejected(self):
        """Test that a shrinking backoff factor is rejected."""
        with pytest.raises(ValidationError):
            Settings(RETRY_BACKOFF_FACTOR=0.5)

    def test_jitter_factor_out_of_range_rejected(self):
        """Test that jitter outside [0, 1] is rejected."""
        with pytest.raises(ValidationError):
            Settings(RETRY_JITTER_FACTOR=1.5)

    def test_max_delay_below_base_rejected(self):
        """Test that a delay ceiling below the base delay is rejected."""
        with pytest.raises(ValidationError):
            Settings(RETRY_BASE_DELAY_MS=5000, RETRY_MAX_DELAY_MS=1000)

    def test_log_level_normalized(self):
        """Test that LOG_LEVEL is upper-cased and validated."""
        assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"
        with pytest.raises(ValidationError):
            Settings(LOG_LEVEL="verbose")


@pytest.mark.unit
class TestSettingsSingleton:
    """Test the global settings accessor."""

    def test_get_settings_returns_same_instance(self):
        """Test that get_settings caches its instance."""
        assert get_settings() is get_settings()

    def test_reload_settings_replaces_instance(self):
        """Test that reload_settings builds a fresh instance."""
        before = get_settings()
        after = reload_settings()
        assert after is not before
        assert get_settings() is after


@pytest.mark.unit
class TestConstants:
    """Test system constants."""

    def test_worlds_are_sea_worlds(self):
        assert WORLDS == ("Aquila", "Bootes", "Cassiopeia", "Delphinus")

    def test_endpoints_are_absolute_paths(self):
        """Test that every endpoint identifier maps to a SEA path."""
        for identifier, path in ENDPOINTS.items():
            assert path.startswith("/maplestorysea/v1/"), identifier

    def test_enum_values_are_strings(self):
        assert RateCategory.HEAVY.value == "heavy"
        assert Stage.ADMISSION.value.startswith("2.0")
