"""Provider configuration loading."""

from thorchain_dashboard.data.loader import (
    build_registry,
    get_api_config,
    get_poll_interval,
    get_poller_config,
    get_pricing_config,
    get_providers,
    get_supported_apis,
    load_config,
)

__all__ = [
    "build_registry",
    "get_api_config",
    "get_poll_interval",
    "get_poller_config",
    "get_pricing_config",
    "get_providers",
    "get_supported_apis",
    "load_config",
]
