"""
Access Service
==============

WHAT IS THIS SERVICE?
---------------------
AccessService is the single entry point callers use to read from the NEXON
Open API. One `fetch` composes:

1. Endpoint check (an unknown identifier fails before any ticket is taken)
2. Cache lookup (a hit returns immediately, no admission ticket taken)
3. Optional pre-flight parameter validation
4. Retry controller: admission ticket -> transport call -> classification
   -> backoff -> next ticket
5. Cache write of the successful result

Transport failures never cross this boundary raw: callers only ever see a
value or a DomainError.

ARCHITECTURE:
-------------
Caller → AccessService → TTLCache
                      → RetryController → AdmissionController → Transport
                                        → ErrorClassifier
                                        → Attempt middleware

Every collaborator is passed in; `build_access_service()` wires the default
production graph from Settings.
"""

import random
import uuid
from collections.abc import Mapping, Sequence
from typing import Any

import structlog

from maple_gateway.application.middleware import (
    AttemptMiddleware,
    MetricsMiddleware,
    default_middleware,
)
from maple_gateway.application.validators import ParamValidator
from maple_gateway.core.config.constants import CACHE_TTL, Stage
from maple_gateway.core.config.settings import Settings, get_settings
from maple_gateway.core.exceptions import ValidationFailedError
from maple_gateway.core.interfaces import Clock, SystemClock, Transport
from maple_gateway.core.logging import clear_request_id, get_request_id, log_stage, set_request_id
from maple_gateway.core.resilience.backoff import BackoffPolicy
from maple_gateway.core.resilience.error_classifier import ErrorClassifier
from maple_gateway.core.resilience.retry_controller import RetryController
from maple_gateway.infrastructure.cache import TTLCache, api_key
from maple_gateway.infrastructure.http import NexonHttpTransport
from maple_gateway.rate_limiting import AdmissionController

logger = structlog.get_logger(__name__)


def ttl_for(endpoint: str, default: float) -> float:
    """
    Cache TTL (seconds) for an endpoint.

    Exact identifier first, then the resource family ("ranking.overall" ->
    "ranking"), then the default.
    """
    if endpoint in CACHE_TTL:
        return CACHE_TTL[endpoint]
    family = endpoint.split(".", 1)[0]
    return CACHE_TTL.get(family, default)


class AccessService:
    """
    Cache-fronted, rate-limited, retrying access to the upstream API.

    USAGE:
    ------
    service = build_access_service()

    ocid = await service.fetch("character.ocid", {"character_name": "Hero"})
    basic = await service.fetch("character.basic", {"ocid": ocid["ocid"]}, cache_ttl=1800)

    await service.invalidate("api:character.basic:")
    await service.aclose()
    """

    def __init__(
        self,
        transport: Transport,
        *,
        cache: TTLCache,
        admission: AdmissionController,
        retry: RetryController,
        validator: ParamValidator | None = None,
        metrics: MetricsMiddleware | None = None,
    ):
        self._transport = transport
        self.cache = cache
        self.admission = admission
        self.retry = retry
        self._validator = validator or ParamValidator()
        self.metrics = metrics

    async def fetch(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        cache_ttl: float | None = None,
        *,
        validate_params: bool = False,
        use_cache: bool = True,
    ) -> Any:
        """
        Fetch a resource.

        Args:
            endpoint: Endpoint identifier ("character.basic") or raw API path
            params: Query parameters
            cache_ttl: Seconds to keep the result (endpoint default when None,
                       0 to skip the cache write)
            validate_params: Check params before spending an admission ticket
            use_cache: False bypasses both cache read and cache write

        Returns:
            The decoded response body (a private copy when served from cache)

        Raises:
            ValidationFailedError: Unknown endpoint identifier (field "endpoint")
            DomainError: Classified terminal failure
        """
        params = dict(params or {})
        owns_request_id = get_request_id() is None
        if owns_request_id:
            set_request_id(uuid.uuid4().hex[:12])

        try:
            self._check_endpoint(endpoint)
            key = api_key(endpoint, params)

            if use_cache:
                lookup = await self.cache.lookup(key)
                if lookup.hit:
                    log_stage(logger, Stage.CACHE_LOOKUP, "Cache hit", level="debug", endpoint=endpoint, cache_key=key)
                    return lookup.value
                log_stage(logger, Stage.CACHE_LOOKUP, "Cache miss", level="debug", endpoint=endpoint, cache_key=key)

            if validate_params:
                self._preflight(endpoint, params)

            result = await self.retry.execute(
                lambda: self._transport.perform_call(endpoint, dict(params)),
                endpoint=endpoint,
                params=params,
            )

            ttl = ttl_for(endpoint, self.cache.default_ttl) if cache_ttl is None else cache_ttl
            if use_cache and ttl > 0:
                await self.cache.set(key, result, ttl)
                log_stage(
                    logger,
                    Stage.CACHE_WRITE,
                    "Response cached",
                    level="debug",
                    endpoint=endpoint,
                    cache_key=key,
                    ttl_seconds=ttl,
                )
            return result
        finally:
            if owns_request_id:
                clear_request_id()

    def _check_endpoint(self, endpoint: str) -> None:
        try:
            self._validator.validate_endpoint(endpoint)
        except ValidationFailedError as error:
            log_stage(
                logger,
                Stage.VALIDATION,
                "Unknown endpoint",
                level="warning",
                endpoint=endpoint,
                requirement=error.requirement,
            )
            raise

    def _preflight(self, endpoint: str, params: dict[str, Any]) -> None:
        violation = self._validator.find_violation(params)
        if violation is None:
            return
        error: ValidationFailedError = violation.to_error(endpoint=endpoint, params=params)
        log_stage(
            logger,
            Stage.VALIDATION,
            "Parameter validation failed",
            level="info",
            endpoint=endpoint,
            field=error.field,
            requirement=error.requirement,
        )
        raise error

    async def invalidate(self, key_or_prefix: str) -> int:
        """
        Drop cached entries.

        An exact cache key removes that entry; anything else is treated as a
        key prefix (e.g. "api:character.basic:" or "ocid:").

        Returns:
            Number of entries removed
        """
        if await self.cache.delete(key_or_prefix):
            removed = 1
        else:
            removed = await self.cache.invalidate_prefix(key_or_prefix)
        logger.info("Cache invalidated", target=key_or_prefix, removed=removed)
        return removed

    def stats(self) -> dict[str, Any]:
        """Cache, admission and attempt statistics."""
        return {
            "cache": self.cache.stats(),
            "admission": self.admission.stats(),
            "attempts": self.metrics.snapshot() if self.metrics else None,
        }

    async def aclose(self) -> None:
        close = getattr(self._transport, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "AccessService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


def build_access_service(
    settings: Settings | None = None,
    transport: Transport | None = None,
    clock: Clock | None = None,
    rng: random.Random | None = None,
    middleware: Sequence[AttemptMiddleware] | None = None,
) -> AccessService:
    """
    Wire an AccessService from settings.

    Args:
        settings: Configuration (process settings when None)
        transport: Upstream transport (NexonHttpTransport when None)
        clock: Time source shared by cache, admission and retry
        rng: Random source for backoff jitter
        middleware: Attempt middleware (logging + metrics when None)
    """
    settings = settings or get_settings()
    clock = clock or SystemClock()
    transport = transport or NexonHttpTransport.from_settings(settings)
    middleware = list(default_middleware() if middleware is None else middleware)

    validator = ParamValidator()
    admission = AdmissionController.from_settings(settings, clock)
    retry = RetryController(
        admission,
        classifier=ErrorClassifier(validator),
        policy=BackoffPolicy.from_settings(settings),
        clock=clock,
        max_retries=settings.RETRY_MAX_RETRIES,
        rng=rng,
        middleware=middleware,
    )
    cache: TTLCache[Any] = TTLCache(
        max_entries=settings.CACHE_MAX_ENTRIES,
        default_ttl=settings.cache_default_ttl_seconds,
        clock=clock,
    )
    metrics = next((mw for mw in middleware if isinstance(mw, MetricsMiddleware)), None)

    logger.info(
        "access_service_initialized",
        max_retries=settings.RETRY_MAX_RETRIES,
        cache_max_entries=settings.CACHE_MAX_ENTRIES,
        middleware=[type(mw).__name__ for mw in middleware],
    )
    return AccessService(
        transport,
        cache=cache,
        admission=admission,
        retry=retry,
        validator=validator,
        metrics=metrics,
    )
