"""Endpoint-level clients for THORNode and Midgard."""

from thorchain_dashboard.clients.base import BaseAPIClient
from thorchain_dashboard.clients.midgard import MidgardClient
from thorchain_dashboard.clients.thornode import ThorNodeClient

__all__ = [
    "BaseAPIClient",
    "MidgardClient",
    "ThorNodeClient",
]
