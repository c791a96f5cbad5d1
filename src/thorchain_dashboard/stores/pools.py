"""Pool list poller with derived views."""

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from thorchain_dashboard.clients.thornode import ThorNodeClient
from thorchain_dashboard.core.models import Pool, PoolCounts, PoolStatus
from thorchain_dashboard.data import get_poll_interval
from thorchain_dashboard.stores.poller import Poller, utc_now


class PoolsPoller(Poller[list[Pool]]):
    """
    Polls the THORNode pool list.

    Pools change slowly, so the poller prefers the secondary (Nine Realms)
    provider and refreshes once a minute by default.

    Parameters
    ----------
    thornode : ThorNodeClient
        THORNode client
    interval : float | None
        Seconds between refreshes (default from providers.yaml)
    now : Callable[[], datetime]
        Wall-clock source

    """

    def __init__(
        self,
        thornode: ThorNodeClient,
        interval: float | None = None,
        *,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__(
            "pools",
            lambda: thornode.get_pools(prefer_secondary=True),
            interval or get_poll_interval("pools"),
            now=now,
        )

    @property
    def pools(self) -> list[Pool]:
        return self.state.value or []

    def by_asset(self) -> dict[str, Pool]:
        return {pool.asset: pool for pool in self.pools}

    def get_pool(self, asset: str) -> Pool | None:
        return self.by_asset().get(asset)

    def available(self) -> list[Pool]:
        return [pool for pool in self.pools if pool.status == PoolStatus.AVAILABLE]

    def counts(self) -> PoolCounts:
        """Number of pools per status."""
        pools = self.pools
        return PoolCounts(
            available=sum(1 for p in pools if p.status == PoolStatus.AVAILABLE),
            staged=sum(1 for p in pools if p.status == PoolStatus.STAGED),
            suspended=sum(1 for p in pools if p.status == PoolStatus.SUSPENDED),
            total=len(pools),
        )

    def total_pooled_rune(self) -> Decimal:
        return sum((pool.rune_depth for pool in self.pools), Decimal("0"))

    def total_value_locked_rune(self) -> Decimal:
        """Pooled RUNE counted for both sides of every pool."""
        return self.total_pooled_rune() * 2

    def asset_price(self, asset: str) -> Decimal:
        """USD price of an asset, 0 if the pool is unknown."""
        pool = self.get_pool(asset)
        return pool.usd_price if pool else Decimal("0")
