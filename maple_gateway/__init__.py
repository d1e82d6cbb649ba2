"""
maple_gateway - resilient access layer for the NEXON MapleStory SEA Open API.

Admission control, error classification, retry with backoff and a TTL cache
in front of a pluggable transport.
"""

__version__ = "1.0.0"
