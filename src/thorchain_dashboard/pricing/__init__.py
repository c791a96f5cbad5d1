"""Fiat pricing services."""

from thorchain_dashboard.pricing.coingecko import CoinGeckoPricing

__all__ = [
    "CoinGeckoPricing",
]
