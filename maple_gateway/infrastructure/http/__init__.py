"""
HTTP Infrastructure

httpx transport for the NEXON Open API.
"""

from .nexon_transport import NexonHttpTransport, decode_body, resolve_path

__all__ = [
    "NexonHttpTransport",
    "decode_body",
    "resolve_path",
]
