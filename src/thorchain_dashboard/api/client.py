"""Multi-provider HTTP client with failover, response caching, and health tracking."""

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

import httpx

from thorchain_dashboard.api.cache import ResponseCache
from thorchain_dashboard.api.errors import (
    AllProvidersFailedError,
    ProviderError,
    ProviderHTTPError,
    ProviderParseError,
    ProviderTransportError,
)
from thorchain_dashboard.api.providers import DEFAULT_MAX_FAILURES, Provider, ProviderHealth, ProviderRegistry
from thorchain_dashboard.api.request import FetchRequest, ParseMode

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class FailoverClient:
    """
    Executes requests against an ordered list of providers.

    Each call first consults the response cache. On a miss, providers are
    tried one at a time in the order chosen by the registry until one answers
    with a 2xx status and a parseable body. Consecutive failures per provider
    are tracked and fed back into provider selection.

    Parameters
    ----------
    registry : ProviderRegistry
        Providers for this API
    ttl : float | None
        Cache time-to-live in seconds. Optional when ``cache`` is given, and
        must match the cache TTL if both are passed.
    name : str
        Client name used in log messages
    timeout : float
        Per-provider request timeout in seconds
    max_failures_before_demotion : int
        Consecutive failures after which a provider is tried last
    cache : ResponseCache | None
        Cache implementation. A new unbounded cache is created if None.
    http_client : httpx.Client | None
        HTTP client to use. An owned client is created if None.
    clock : Callable[[], float]
        Time source shared with the default cache

    Raises
    ------
    ValueError
        If neither ``ttl`` nor ``cache`` is given, or they disagree

    """

    def __init__(
        self,
        registry: ProviderRegistry,
        ttl: float | None = None,
        *,
        name: str = "api",
        timeout: float = DEFAULT_TIMEOUT,
        max_failures_before_demotion: int = DEFAULT_MAX_FAILURES,
        cache: ResponseCache | None = None,
        http_client: httpx.Client | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if cache is None:
            if ttl is None:
                msg = "Either ttl or cache must be given"
                raise ValueError(msg)
            cache = ResponseCache(ttl, clock=clock)
        elif ttl is not None and ttl != cache.ttl:
            msg = f"ttl {ttl} does not match the cache TTL {cache.ttl}"
            raise ValueError(msg)

        self.registry = registry
        self.name = name
        self.timeout = timeout
        self.cache = cache
        self._clock = clock
        self._owns_http_client = http_client is None
        self.http_client = http_client if http_client is not None else httpx.Client(timeout=timeout)
        self._health = {p.name: ProviderHealth(max_failures_before_demotion) for p in registry}
        self._health_lock = threading.Lock()

    @property
    def ttl(self) -> float:
        return self.cache.ttl

    def execute(self, request: FetchRequest) -> Any:
        """
        Execute a request with caching and provider failover.

        Parameters
        ----------
        request : FetchRequest
            Request to execute

        Returns
        -------
        Any
            Parsed JSON payload or response text

        Raises
        ------
        AllProvidersFailedError
            If every selected provider failed
        ProviderConfigurationError
            If no configured provider can serve the request

        """
        cache_key = request.cache_key

        if request.cacheable and not request.bypass_cache:
            entry = self.cache.lookup(cache_key)
            if entry is not None:
                logger.debug("%s cache hit for %s", self.name, cache_key)
                return entry.value
            logger.debug("%s cache miss for %s", self.name, cache_key)

        providers = self.registry.select_providers(request, self.health())
        errors: list[ProviderError] = []

        for provider in providers:
            try:
                data = self._attempt(provider, request)
            except ProviderError as e:
                errors.append(e)
                self._record_failure(provider, e)
                logger.warning("%s fetch failed for %s%s: %s", self.name, provider.name, request.path, e.message)
                continue

            self._record_success(provider)
            if errors:
                logger.info("%s served %s from fallback provider %s", self.name, request.path, provider.name)
            if request.cacheable:
                self.cache.set(cache_key, data)
            return data

        logger.error("%s: all providers failed for %s", self.name, request.path)
        raise AllProvidersFailedError(request.path, errors)

    def build_url(self, provider: Provider, request: FetchRequest) -> str:
        """
        Build the full URL for a request on a provider.

        Parameters
        ----------
        provider : Provider
            Target provider
        request : FetchRequest
            Request being served

        Returns
        -------
        str
            Absolute URL, including the height parameter for archive queries

        """
        url = f"{provider.base_url.rstrip('/')}{request.path}"
        if request.target_height is not None and provider.supports_height_query:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}height={request.target_height}"
        return url

    def _attempt(self, provider: Provider, request: FetchRequest) -> Any:
        url = self.build_url(provider, request)
        headers = {**provider.extra_headers, **request.headers}

        try:
            response = self.http_client.request(request.method, url, headers=headers, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise ProviderTransportError(provider.name, request.path, f"Request timeout: {e}") from e
        except httpx.HTTPError as e:
            raise ProviderTransportError(provider.name, request.path, f"HTTP request failed: {e}") from e

        if not response.is_success:
            raise ProviderHTTPError(provider.name, request.path, response.status_code, response.reason_phrase)

        if request.parse_as == ParseMode.TEXT:
            return response.text

        try:
            return response.json()
        except ValueError as e:
            raise ProviderParseError(provider.name, request.path, f"Invalid JSON: {e}") from e

    def _record_success(self, provider: Provider) -> None:
        with self._health_lock:
            self._health[provider.name].record_success(self._clock())

    def _record_failure(self, provider: Provider, error: ProviderError) -> None:
        with self._health_lock:
            self._health[provider.name].record_failure(error.message, self._clock())

    def health(self) -> dict[str, ProviderHealth]:
        """
        Snapshot of provider health.

        Returns
        -------
        dict[str, ProviderHealth]
            Copies of the health state keyed by provider name

        """
        with self._health_lock:
            return {name: health.copy() for name, health in self._health.items()}

    def clear_cache(self) -> None:
        """Drop every cached response."""
        self.cache.clear()

    def reset_failure_counters(self) -> None:
        """Reset consecutive-failure counters for every provider."""
        with self._health_lock:
            for health in self._health.values():
                health.reset()

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            self.http_client.close()

    def __enter__(self) -> "FailoverClient":
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: object | None,
    ) -> None:
        """Context manager exit."""
        self.close()
