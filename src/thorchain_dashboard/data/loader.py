"""Provider and polling configuration loader."""

from pathlib import Path
from typing import Any

import yaml

from thorchain_dashboard.api.errors import ProviderConfigurationError
from thorchain_dashboard.api.providers import Provider, ProviderRegistry

CONFIG_PATH = Path(__file__).parent / "providers.yaml"


def load_config(path: Path = CONFIG_PATH) -> dict[str, Any]:
    """
    Load provider configuration from providers.yaml.

    Parameters
    ----------
    path : Path
        Configuration file to read

    Returns
    -------
    dict[str, Any]
        Configuration including APIs, pollers, and pricing settings

    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f)


def get_supported_apis() -> list[str]:
    """
    Get list of all configured API names.

    Returns
    -------
    list[str]
        API names (e.g., 'thornode', 'midgard')

    """
    return list(load_config()["apis"].keys())


def get_api_config(api: str) -> dict[str, Any]:
    """
    Get configuration for a specific API.

    Parameters
    ----------
    api : str
        API name (e.g., 'thornode', 'midgard')

    Returns
    -------
    dict[str, Any]
        API configuration including providers and cache settings

    Raises
    ------
    KeyError
        If the API is not configured

    """
    return load_config()["apis"][api]


def get_providers(api: str) -> list[Provider]:
    """
    Get provider descriptors for an API.

    Parameters
    ----------
    api : str
        API name

    Returns
    -------
    list[Provider]
        Providers in configuration order

    """
    return [Provider(**entry) for entry in get_api_config(api).get("providers", [])]


def build_registry(api: str) -> ProviderRegistry:
    """
    Build the provider registry for an API.

    Parameters
    ----------
    api : str
        API name

    Returns
    -------
    ProviderRegistry
        Registry of the configured providers

    Raises
    ------
    ProviderConfigurationError
        If the API is unknown or has no providers

    """
    try:
        providers = get_providers(api)
    except KeyError as e:
        msg = f"Unknown API: {api}"
        raise ProviderConfigurationError(msg) from e
    return ProviderRegistry(providers)


def get_poll_interval(poller: str) -> float:
    """
    Get the polling interval for a named poller.

    Parameters
    ----------
    poller : str
        Poller name (e.g., 'rune_price', 'pools')

    Returns
    -------
    float
        Interval in seconds

    """
    return float(load_config()["pollers"][poller]["interval_seconds"])


def get_poller_config(poller: str) -> dict[str, Any]:
    return load_config()["pollers"][poller]


def get_pricing_config(source: str = "coingecko") -> dict[str, Any]:
    return load_config()["pricing"][source]
