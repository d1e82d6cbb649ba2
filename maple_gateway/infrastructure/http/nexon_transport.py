"""
NEXON Open API HTTP Transport

httpx-based implementation of the Transport protocol.

RESPONSIBILITIES:
-----------------
- Resolve endpoint identifiers ("character.basic") to API paths
- Attach the `x-nxopen-api-key` header
- Decode JSON bodies with orjson
- Map every non-success outcome to TransportFailure:
  * 4xx/5xx -> TransportFailure(status, body)
  * timeouts -> TransportFailure(network_error="timeout", timed_out=True)
  * connection/protocol errors -> TransportFailure(network_error=...)

NOT RESPONSIBLE FOR:
--------------------
- Retries, rate limiting, caching or classification (access service layers)

HTTPX CLIENT CONFIGURATION:
---------------------------
- timeout: Per-request timeout (connection + read combined)
- limits: Connection pool sized for the default burst limit
"""

from typing import Any

import httpx
import orjson

from maple_gateway.core.config.constants import API_BASE_URL, API_KEY_HEADER, ENDPOINTS, USER_AGENT
from maple_gateway.core.config.settings import Settings
from maple_gateway.core.exceptions import ConfigurationError
from maple_gateway.core.interfaces import TransportFailure
from maple_gateway.core.logging import get_logger

logger = get_logger(__name__)


def resolve_path(endpoint: str) -> str:
    """
    Map a logical endpoint identifier to its API path.

    Raw paths (starting with "/") pass through unchanged.

    Raises:
        ConfigurationError: For an unknown identifier
    """
    if endpoint.startswith("/"):
        return endpoint
    try:
        return ENDPOINTS[endpoint]
    except KeyError:
        raise ConfigurationError(
            f"Unknown endpoint identifier: {endpoint}",
            details={"endpoint": endpoint},
        ) from None


def decode_body(content: bytes) -> Any:
    """Decode a response body as JSON, falling back to text."""
    if not content:
        return None
    try:
        return orjson.loads(content)
    except orjson.JSONDecodeError:
        return content.decode("utf-8", "replace")


class NexonHttpTransport:
    """
    Transport performing real HTTP calls against the NEXON Open API.

    Usage:
        async with NexonHttpTransport(api_key="live_...") as transport:
            data = await transport.perform_call("character.ocid", {"character_name": "Hero"})

    A preconfigured httpx.AsyncClient can be injected (tests pass one built on
    httpx.MockTransport); an injected client is not closed by aclose().
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = API_BASE_URL,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        max_connections: int = 20,
    ):
        if not api_key:
            raise ConfigurationError(
                "NEXON_API_KEY is not set",
                details={"setting": "NEXON_API_KEY"},
            )
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max_connections // 2,
            ),
        )
        self._headers = {
            API_KEY_HEADER: api_key,
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.AsyncClient | None = None) -> "NexonHttpTransport":
        return cls(
            api_key=settings.NEXON_API_KEY,
            base_url=settings.NEXON_BASE_URL,
            timeout=settings.nexon_timeout_seconds,
            client=client,
            max_connections=max(settings.RATE_LIMIT_BURST, settings.RATE_LIMIT_HEAVY_BURST) * 2,
        )

    async def __aenter__(self) -> "NexonHttpTransport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
            logger.debug("HTTP client closed")

    async def perform_call(self, endpoint: str, params: dict[str, Any]) -> Any:
        """
        Perform one GET request.

        STAGE-3.1: Upstream HTTP call

        Returns:
            Decoded JSON body

        Raises:
            TransportFailure: On HTTP error status, timeout or network failure
        """
        url = f"{self._base_url}{resolve_path(endpoint)}"
        query = {key: value for key, value in params.items() if value is not None}

        try:
            response = await self._client.get(url, params=query, headers=self._headers)
        except httpx.TimeoutException as e:
            raise TransportFailure(network_error="timeout", timed_out=True) from e
        except httpx.TransportError as e:
            raise TransportFailure(network_error=f"{type(e).__name__}: {e}") from e

        body = decode_body(response.content)
        if response.is_success:
            return body
        raise TransportFailure(status=response.status_code, body=body)
