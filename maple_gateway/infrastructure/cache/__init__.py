"""
Cache Infrastructure

In-memory TTL cache and cache key derivation.
"""

from .cache_keys import (
    api_key,
    api_prefix,
    character_key,
    guild_basic_key,
    guild_id_key,
    normalize_identifier,
    normalize_params,
    ocid_key,
    ranking_key,
    sanitize_identifier,
)
from .ttl_cache import CacheEntry, CacheLookup, TTLCache

__all__ = [
    "CacheEntry",
    "CacheLookup",
    "TTLCache",
    "api_key",
    "api_prefix",
    "character_key",
    "guild_basic_key",
    "guild_id_key",
    "normalize_identifier",
    "normalize_params",
    "ocid_key",
    "ranking_key",
    "sanitize_identifier",
]
