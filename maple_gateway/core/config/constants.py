"""
System Constants and Enumerations

This module defines system-wide constants and enumerations used across
the NEXON access gateway.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for endpoint paths, worlds and TTLs
- Type-safe enums for stages and rate-limit categories
- Easy to update when the upstream API adds resources

Author: System Architect
Date: 2026-09-28
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for logging)
# ============================================================================


class Stage(str, Enum):
    """
    Request processing stages for structured logging.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}

    Every log line emitted while a fetch is in progress carries one of these
    values so that a single request can be followed through the logs.
    """

    CACHE_LOOKUP = "1.0_CACHE_LOOKUP"
    VALIDATION = "1.5_PARAM_VALIDATION"
    ADMISSION = "2.0_ADMISSION"
    TRANSPORT = "3.0_TRANSPORT_CALL"
    CLASSIFICATION = "4.0_ERROR_CLASSIFICATION"
    RETRY = "R_RETRY_LOGIC"
    CACHE_WRITE = "5.0_CACHE_WRITE"


# ============================================================================
# Rate Limit Categories
# ============================================================================


class RateCategory(str, Enum):
    """
    Rate-limit categories.

    DEFAULT: Everything not designated heavy
    HEAVY: Endpoints with a stricter upstream contract (rankings)
    """

    DEFAULT = "default"
    HEAVY = "heavy"


# ============================================================================
# NEXON Open API
# ============================================================================

API_BASE_URL = "https://open.api.nexon.com"
API_KEY_HEADER = "x-nxopen-api-key"
USER_AGENT = "maple-gateway/1.0.0"

# Logical endpoint identifiers -> MapleStory SEA paths
ENDPOINTS: dict[str, str] = {
    # Character
    "character.ocid": "/maplestorysea/v1/id",
    "character.basic": "/maplestorysea/v1/character/basic",
    "character.popularity": "/maplestorysea/v1/character/popularity",
    "character.stat": "/maplestorysea/v1/character/stat",
    "character.hyper_stat": "/maplestorysea/v1/character/hyper-stat",
    "character.propensity": "/maplestorysea/v1/character/propensity",
    "character.ability": "/maplestorysea/v1/character/ability",
    "character.item_equipment": "/maplestorysea/v1/character/item-equipment",
    "character.cashitem_equipment": "/maplestorysea/v1/character/cashitem-equipment",
    "character.symbol_equipment": "/maplestorysea/v1/character/symbol-equipment",
    "character.set_effect": "/maplestorysea/v1/character/set-effect",
    "character.skill": "/maplestorysea/v1/character/skill",
    "character.link_skill": "/maplestorysea/v1/character/link-skill",
    "character.hexamatrix": "/maplestorysea/v1/character/hexamatrix",
    "character.dojang": "/maplestorysea/v1/character/dojang",
    # Union
    "union.basic": "/maplestorysea/v1/user/union",
    "union.raider": "/maplestorysea/v1/user/union-raider",
    "union.artifact": "/maplestorysea/v1/user/union-artifact",
    # Guild
    "guild.id": "/maplestorysea/v1/guild/id",
    "guild.basic": "/maplestorysea/v1/guild/basic",
    # Ranking
    "ranking.overall": "/maplestorysea/v1/ranking/overall",
    "ranking.union": "/maplestorysea/v1/ranking/union",
    "ranking.guild": "/maplestorysea/v1/ranking/guild",
    "ranking.dojang": "/maplestorysea/v1/ranking/dojang",
    "ranking.theseed": "/maplestorysea/v1/ranking/theseed",
    "ranking.achievement": "/maplestorysea/v1/ranking/achievement",
}

# MapleStory SEA worlds
WORLDS: tuple[str, ...] = ("Aquila", "Bootes", "Cassiopeia", "Delphinus")

# Earliest date the upstream API can be asked about (MapleStory launch)
MIN_QUERY_DATE = "2003-04-29"

# Identifier bounds
CHARACTER_NAME_MIN_LENGTH = 2
CHARACTER_NAME_MAX_LENGTH = 13
GUILD_NAME_MIN_LENGTH = 2
GUILD_NAME_MAX_LENGTH = 20

# Parameters whose values identify a resource by human-entered name.
# They are case-folded and whitespace-stripped when deriving cache keys.
IDENTIFIER_PARAMS = frozenset({"character_name", "guild_name", "world_name", "name"})

# Parameter/context keys that must never be logged or serialized verbatim
SENSITIVE_KEY_PATTERN = r"key|token|secret|password|authorization"
REDACTED = "[REDACTED]"

# ============================================================================
# Cache TTLs (seconds)
# ============================================================================

CACHE_TTL: dict[str, float] = {
    "character.ocid": 7200,  # OCIDs very rarely change
    "character.basic": 1800,
    "character.stat": 900,  # stats follow equipment changes
    "character.hyper_stat": 1800,
    "character.ability": 1800,
    "character.item_equipment": 600,  # equipment changes often during play
    "union.basic": 1800,
    "union.raider": 1800,
    "union.artifact": 3600,
    "guild.id": 3600,
    "guild.basic": 3600,
    "ranking": 1800,
}

# ============================================================================
# Rate Limiting
# ============================================================================

RATE_WINDOW_SECONDS = 1.0
RATE_MINUTE_WINDOW_SECONDS = 60.0

