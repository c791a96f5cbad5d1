"""Fetch layer with provider selection, failover, and response caching."""

from thorchain_dashboard.api.cache import CacheEntry, ResponseCache
from thorchain_dashboard.api.client import FailoverClient
from thorchain_dashboard.api.errors import (
    AllProvidersFailedError,
    FetchError,
    PricingError,
    ProviderConfigurationError,
    ProviderError,
    ProviderHTTPError,
    ProviderParseError,
    ProviderTransportError,
)
from thorchain_dashboard.api.providers import Provider, ProviderHealth, ProviderRegistry
from thorchain_dashboard.api.request import FetchRequest, ParseMode

__all__ = [
    "AllProvidersFailedError",
    "CacheEntry",
    "FailoverClient",
    "FetchError",
    "FetchRequest",
    "ParseMode",
    "PricingError",
    "Provider",
    "ProviderConfigurationError",
    "ProviderError",
    "ProviderHTTPError",
    "ProviderHealth",
    "ProviderParseError",
    "ProviderRegistry",
    "ProviderTransportError",
    "ResponseCache",
]
