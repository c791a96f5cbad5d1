"""Base class for endpoint-level API clients built on the failover client."""

import time
from collections.abc import Callable
from typing import Any, ClassVar
from urllib.parse import quote, urlencode

import httpx

from thorchain_dashboard.api.cache import ResponseCache
from thorchain_dashboard.api.client import FailoverClient
from thorchain_dashboard.api.providers import ProviderHealth
from thorchain_dashboard.api.request import FetchRequest, ParseMode
from thorchain_dashboard.data import build_registry, get_api_config


def quote_segment(value: str) -> str:
    """Percent-encode a value used as a single path segment."""
    return quote(value, safe="")


def with_query(path: str, params: dict[str, Any] | None) -> str:
    """
    Append query parameters to a path.

    Parameters
    ----------
    path : str
        Endpoint path
    params : dict[str, Any] | None
        Query parameters, None values are dropped

    Returns
    -------
    str
        Path with an encoded query string, or the path unchanged

    """
    if not params:
        return path
    query = urlencode({k: v for k, v in params.items() if v is not None})
    return f"{path}?{query}" if query else path


class BaseAPIClient:
    """
    Base class for THORChain API clients.

    Subclasses add one method per endpoint and route every call through a
    shared :class:`FailoverClient`, so callers never talk to providers
    directly.

    Attributes
    ----------
    api_name : str
        Name of the API section in providers.yaml (must be set in subclass)

    """

    api_name: ClassVar[str] = ""

    def __init__(self, failover: FailoverClient) -> None:
        if not self.api_name:
            msg = f"{self.__class__.__name__} must define 'api_name' attribute"
            raise ValueError(msg)
        self.failover = failover

    @classmethod
    def from_config(
        cls,
        http_client: httpx.Client | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Build a client from the packaged provider configuration.

        Parameters
        ----------
        http_client : httpx.Client | None
            HTTP client to share (a new one is created if None)
        clock : Callable[[], float]
            Time source for the response cache

        Returns
        -------
        BaseAPIClient
            Client wired to this API's providers and cache settings

        """
        config = get_api_config(cls.api_name)
        ttl = float(config["cache_ttl_seconds"])
        cache = ResponseCache(ttl, max_entries=config.get("max_cache_entries"), clock=clock)
        failover = FailoverClient(
            build_registry(cls.api_name),
            ttl,
            name=cls.api_name,
            timeout=float(config.get("timeout_seconds", 10)),
            max_failures_before_demotion=int(config.get("max_failures_before_demotion", 3)),
            cache=cache,
            http_client=http_client,
            clock=clock,
        )
        return cls(failover)

    def fetch(
        self,
        path: str,
        *,
        height: int | None = None,
        prefer_secondary: bool = False,
        cache: bool = True,
        bypass_cache: bool = False,
        parse_as: ParseMode = ParseMode.JSON,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Fetch an endpoint through the failover client.

        Parameters
        ----------
        path : str
            Endpoint path (e.g., '/thorchain/network')
        height : int | None
            Block height for historical reads
        prefer_secondary : bool
            Prefer the more stable secondary provider
        cache : bool
            Allow cached responses and cache the result
        bypass_cache : bool
            Fetch fresh data but still cache it
        parse_as : ParseMode
            Body parsing mode
        headers : dict[str, str] | None
            Extra request headers

        Returns
        -------
        Any
            Response payload

        """
        request = FetchRequest(
            path=path,
            headers=headers or {},
            cacheable=cache,
            bypass_cache=bypass_cache,
            target_height=height,
            prefer_secondary=prefer_secondary,
            parse_as=parse_as,
        )
        return self.failover.execute(request)

    def execute(self, request: FetchRequest) -> Any:
        return self.failover.execute(request)

    def health(self) -> dict[str, ProviderHealth]:
        return self.failover.health()

    def clear_cache(self) -> None:
        """Drop every cached response."""
        self.failover.clear_cache()

    def reset_failure_counters(self) -> None:
        """Reset provider failure counters after a known upstream incident."""
        self.failover.reset_failure_counters()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self.failover.close()

    def __enter__(self):
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
