#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
access gateway. All tunables of the admission queue, the retry controller,
the cache and the HTTP transport are declared here.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing: build a Settings(...) with overrides and inject it

Durations use the millisecond option names of the upstream rate contract.
The `*_seconds` helpers convert them once for the runtime components.

Author: System Architect
Date: 2026-09-28
"""

from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from maple_gateway.core.config.constants import API_BASE_URL


class RateLimitSettings(BaseSettings):
    """
    Admission queue configuration.

    STAGE-2: Rate limiting thresholds

    Architectural Decision: one independent queue per category
    - DEFAULT category: 8 req/s, 500 req/min, 12 calls in flight
    - HEAVY category (rankings): 5 req/s
    """

    RATE_LIMIT_REQUESTS_PER_SECOND: int = Field(default=8, description="Default category requests per second")
    RATE_LIMIT_REQUESTS_PER_MINUTE: int = Field(default=500, description="Requests per rolling minute, per category")
    RATE_LIMIT_BURST: int = Field(default=12, description="Maximum in-flight calls for the default category")
    RATE_LIMIT_HEAVY_REQUESTS_PER_SECOND: int = Field(default=5, description="Heavy category requests per second")
    RATE_LIMIT_HEAVY_BURST: int = Field(default=5, description="Maximum in-flight calls for the heavy category")
    RATE_LIMIT_HEAVY_MARKERS: list[str] = Field(
        default=["ranking"],
        description="Endpoint substrings that place a call in the heavy category"
    )
    RATE_LIMIT_QUEUE_TIMEOUT_MS: int = Field(default=30000, description="Maximum queue wait (0 disables)")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class RetrySettings(BaseSettings):
    """
    Retry controller configuration.

    STAGE-R: Retry/backoff policy

    delay(attempt) = base(kind) * BACKOFF_FACTOR ** (attempt - 1) + jitter,
    capped at RETRY_MAX_DELAY_MS.
    """

    RETRY_MAX_RETRIES: int = Field(default=3, description="Retries after the first attempt")
    RETRY_BASE_DELAY_MS: int = Field(default=1000, description="Base retry delay")
    RETRY_MAX_DELAY_MS: int = Field(default=30000, description="Retry delay ceiling")
    RETRY_BACKOFF_FACTOR: float = Field(default=2.0, description="Exponential backoff multiplier")
    RETRY_JITTER_FACTOR: float = Field(default=0.1, description="Maximum jitter as a fraction of the delay")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class CacheSettings(BaseSettings):
    """
    In-memory TTL cache configuration.

    STAGE-1: Cache sizing
    """

    CACHE_MAX_ENTRIES: int = Field(default=1000, description="Soft cap that triggers a cleanup pass")
    CACHE_DEFAULT_TTL_MS: int = Field(default=300000, description="TTL used when none is given (5 minutes)")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class NexonApiSettings(BaseSettings):
    """
    NEXON Open API transport configuration.

    STAGE-3: Transport configuration
    """

    NEXON_API_KEY: str | None = Field(default=None, description="NEXON Open API key")
    NEXON_BASE_URL: str = Field(default=API_BASE_URL, description="NEXON Open API base URL")
    NEXON_TIMEOUT_MS: int = Field(default=10000, description="Per-request timeout")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    STAGE-L: Logging configuration

    Architectural Decision: structlog for production-grade logging
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    STAGE-0: Centralized configuration initialization

    Usage:
        from maple_gateway.core.config.settings import get_settings

        settings = get_settings()
        rps = settings.rate_limit.RATE_LIMIT_REQUESTS_PER_SECOND
        base_delay = settings.retry_base_delay_seconds
    """

    # Rate limiting
    RATE_LIMIT_REQUESTS_PER_SECOND: int = Field(default=8, description="Default category requests per second")
    RATE_LIMIT_REQUESTS_PER_MINUTE: int = Field(default=500, description="Requests per rolling minute, per category")
    RATE_LIMIT_BURST: int = Field(default=12, description="Maximum in-flight calls for the default category")
    RATE_LIMIT_HEAVY_REQUESTS_PER_SECOND: int = Field(default=5, description="Heavy category requests per second")
    RATE_LIMIT_HEAVY_BURST: int = Field(default=5, description="Maximum in-flight calls for the heavy category")
    RATE_LIMIT_HEAVY_MARKERS: list[str] = Field(
        default=["ranking"],
        description="Endpoint substrings that place a call in the heavy category"
    )
    RATE_LIMIT_QUEUE_TIMEOUT_MS: int = Field(default=30000, description="Maximum queue wait (0 disables)")

    # Retry
    RETRY_MAX_RETRIES: int = Field(default=3, description="Retries after the first attempt")
    RETRY_BASE_DELAY_MS: int = Field(default=1000, description="Base retry delay")
    RETRY_MAX_DELAY_MS: int = Field(default=30000, description="Retry delay ceiling")
    RETRY_BACKOFF_FACTOR: float = Field(default=2.0, description="Exponential backoff multiplier")
    RETRY_JITTER_FACTOR: float = Field(default=0.1, description="Maximum jitter as a fraction of the delay")

    # Cache
    CACHE_MAX_ENTRIES: int = Field(default=1000, description="Soft cap that triggers a cleanup pass")
    CACHE_DEFAULT_TTL_MS: int = Field(default=300000, description="TTL used when none is given (5 minutes)")

    # NEXON API
    NEXON_API_KEY: str | None = Field(default=None, description="NEXON Open API key")
    NEXON_BASE_URL: str = Field(default=API_BASE_URL, description="NEXON Open API base URL")
    NEXON_TIMEOUT_MS: int = Field(default=10000, description="Per-request timeout")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator(
        "RATE_LIMIT_REQUESTS_PER_SECOND",
        "RATE_LIMIT_REQUESTS_PER_MINUTE",
        "RATE_LIMIT_BURST",
        "RATE_LIMIT_HEAVY_REQUESTS_PER_SECOND",
        "RATE_LIMIT_HEAVY_BURST",
        "CACHE_MAX_ENTRIES",
    )
    @classmethod
    def validate_positive(cls, v, info):
        """Rates, bursts and sizes must be at least 1."""
        if v < 1:
            raise ValueError(f"{info.field_name} must be >= 1")
        return v

    @field_validator("RETRY_MAX_RETRIES", "RETRY_BASE_DELAY_MS", "RATE_LIMIT_QUEUE_TIMEOUT_MS")
    @classmethod
    def validate_non_negative(cls, v, info):
        """Counts and delays cannot be negative."""
        if v < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return v

    @field_validator("RETRY_BACKOFF_FACTOR")
    @classmethod
    def validate_backoff_factor(cls, v):
        """A factor below 1 would shrink delays between attempts."""
        if v < 1.0:
            raise ValueError("RETRY_BACKOFF_FACTOR must be >= 1.0")
        return v

    @field_validator("RETRY_JITTER_FACTOR")
    @classmethod
    def validate_jitter_factor(cls, v):
        """Validate jitter fraction."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("RETRY_JITTER_FACTOR must be within [0, 1]")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @model_validator(mode="after")
    def validate_delay_ceiling(self):
        """The delay ceiling cannot sit below the base delay."""
        if self.RETRY_MAX_DELAY_MS < self.RETRY_BASE_DELAY_MS:
            raise ValueError("RETRY_MAX_DELAY_MS must be >= RETRY_BASE_DELAY_MS")
        return self

    # Nested configuration objects
    @property
    def rate_limit(self) -> "RateLimitSettings":
        """Get rate limit settings."""
        return RateLimitSettings(
            RATE_LIMIT_REQUESTS_PER_SECOND=self.RATE_LIMIT_REQUESTS_PER_SECOND,
            RATE_LIMIT_REQUESTS_PER_MINUTE=self.RATE_LIMIT_REQUESTS_PER_MINUTE,
            RATE_LIMIT_BURST=self.RATE_LIMIT_BURST,
            RATE_LIMIT_HEAVY_REQUESTS_PER_SECOND=self.RATE_LIMIT_HEAVY_REQUESTS_PER_SECOND,
            RATE_LIMIT_HEAVY_BURST=self.RATE_LIMIT_HEAVY_BURST,
            RATE_LIMIT_HEAVY_MARKERS=self.RATE_LIMIT_HEAVY_MARKERS,
            RATE_LIMIT_QUEUE_TIMEOUT_MS=self.RATE_LIMIT_QUEUE_TIMEOUT_MS
        )

    @property
    def retry(self) -> "RetrySettings":
        """Get retry settings."""
        return RetrySettings(
            RETRY_MAX_RETRIES=self.RETRY_MAX_RETRIES,
            RETRY_BASE_DELAY_MS=self.RETRY_BASE_DELAY_MS,
            RETRY_MAX_DELAY_MS=self.RETRY_MAX_DELAY_MS,
            RETRY_BACKOFF_FACTOR=self.RETRY_BACKOFF_FACTOR,
            RETRY_JITTER_FACTOR=self.RETRY_JITTER_FACTOR
        )

    @property
    def cache(self) -> "CacheSettings":
        """Get cache settings."""
        return CacheSettings(
            CACHE_MAX_ENTRIES=self.CACHE_MAX_ENTRIES,
            CACHE_DEFAULT_TTL_MS=self.CACHE_DEFAULT_TTL_MS
        )

    @property
    def nexon(self) -> "NexonApiSettings":
        """Get NEXON API settings."""
        return NexonApiSettings(
            NEXON_API_KEY=self.NEXON_API_KEY,
            NEXON_BASE_URL=self.NEXON_BASE_URL,
            NEXON_TIMEOUT_MS=self.NEXON_TIMEOUT_MS
        )

    @property
    def logging(self) -> "LoggingSettings":
        """Get logging settings."""
        return LoggingSettings(
            LOG_LEVEL=self.LOG_LEVEL,
            LOG_FORMAT=self.LOG_FORMAT
        )

    # Unit conversions
    @property
    def queue_timeout_seconds(self) -> float | None:
        """Queue timeout in seconds, or None when disabled."""
        if self.RATE_LIMIT_QUEUE_TIMEOUT_MS == 0:
            return None
        return self.RATE_LIMIT_QUEUE_TIMEOUT_MS / 1000

    @property
    def retry_base_delay_seconds(self) -> float:
        return self.RETRY_BASE_DELAY_MS / 1000

    @property
    def retry_max_delay_seconds(self) -> float:
        return self.RETRY_MAX_DELAY_MS / 1000

    @property
    def cache_default_ttl_seconds(self) -> float:
        return self.CACHE_DEFAULT_TTL_MS / 1000

    @property
    def nexon_timeout_seconds(self) -> float:
        return self.NEXON_TIMEOUT_MS / 1000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Ignore extra environment variables
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Returns:
        Settings: Global settings instance

    Components never call this implicitly; the service factory passes the
    instance down, so tests can inject their own Settings.
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
