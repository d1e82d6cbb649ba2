"""
Application Services Package
=============================

The access service is the boundary the tool/resource layer calls into.

USAGE:
------
    from maple_gateway.application.services import build_access_service

    async with build_access_service() as service:
        data = await service.fetch("character.ocid", {"character_name": "Hero"})
"""

from maple_gateway.application.services.access_service import (
    AccessService,
    build_access_service,
    ttl_for,
)

__all__ = [
    "AccessService",
    "build_access_service",
    "ttl_for",
]
