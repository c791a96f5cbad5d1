"""Pollers publishing periodically refreshed API data."""

from thorchain_dashboard.stores.poller import Poller, PollerStatus, PollState, Subscription
from thorchain_dashboard.stores.pools import PoolsPoller
from thorchain_dashboard.stores.rune_price import RunePricePoller

__all__ = [
    "PollState",
    "Poller",
    "PollerStatus",
    "PoolsPoller",
    "RunePricePoller",
    "Subscription",
]
