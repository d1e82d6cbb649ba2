"""
Cache Key Derivation

Pure functions turning (resource, identifying fields) into cache keys.

Identifier-bearing values (character, guild and world names) go through the
same sanitizer the parameter validator applies, then are case-folded and
stripped of whitespace, so "TestChar", "testchar" and " Test Char " share one
key. Keys for arbitrary endpoints hash the sorted parameters, so insertion
order never matters.
"""

import hashlib
import unicodedata
from collections.abc import Mapping
from typing import Any

import orjson

from maple_gateway.core.config.constants import IDENTIFIER_PARAMS

LATEST = "latest"


def sanitize_identifier(value: str) -> str:
    """Trim and NFC-normalize a caller-supplied identifier."""
    return unicodedata.normalize("NFC", value.strip())


def normalize_identifier(value: Any) -> str:
    """Sanitize, then remove all whitespace and case-fold."""
    return "".join(sanitize_identifier(str(value)).split()).casefold()


def normalize_params(params: Mapping[str, Any] | None) -> dict[str, Any]:
    """Normalize identifier params; other values are left as given."""
    if not params:
        return {}
    return {
        key: normalize_identifier(value) if key in IDENTIFIER_PARAMS and value is not None else value
        for key, value in params.items()
        if value is not None
    }


def api_key(endpoint: str, params: Mapping[str, Any] | None = None) -> str:
    """
    Cache key for any endpoint call.

    STAGE-1.1: Cache key generation

    Format: "api:{endpoint}:{md5 of sorted normalized params}"
    """
    payload = orjson.dumps(normalize_params(params), option=orjson.OPT_SORT_KEYS, default=str)
    digest = hashlib.md5(payload).hexdigest()
    return f"{api_prefix(endpoint)}{digest}"


def api_prefix(endpoint: str) -> str:
    """Prefix shared by every api_key() of one endpoint."""
    return f"api:{endpoint}:"


def ocid_key(character_name: str) -> str:
    return f"ocid:{normalize_identifier(character_name)}"


def character_key(ocid: str, resource: str = "basic", date: str | None = None) -> str:
    return f"character:{resource}:{ocid.strip()}:{date or LATEST}"


def guild_id_key(guild_name: str, world_name: str) -> str:
    return f"guild:id:{normalize_identifier(world_name)}:{normalize_identifier(guild_name)}"


def guild_basic_key(oguild_id: str, date: str | None = None) -> str:
    return f"guild:basic:{oguild_id.strip()}:{date or LATEST}"


def ranking_key(
    ranking_type: str,
    date: str,
    world_name: str | None = None,
    page: int | None = None,
) -> str:
    world = normalize_identifier(world_name) if world_name else "all"
    return f"ranking:{ranking_type}:{world}:{date}:{page or 1}"
