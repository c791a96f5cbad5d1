"""
Midgard API client.

Midgard serves aggregated and historical data (pool depth history, swaps,
earnings, members). It updates less often than THORNode, so responses are
cached for longer.
"""

from typing import Any

from thorchain_dashboard.clients.base import BaseAPIClient, quote_segment, with_query


class MidgardClient(BaseAPIClient):
    """
    Client for Midgard indexed-history endpoints.

    History methods take a ``params`` mapping of query parameters
    (``interval``, ``count``, ``from``, ``to``, ...). Every method also accepts
    the fetch options of :meth:`BaseAPIClient.fetch`.

    """

    api_name = "midgard"

    def get_stats(self, **options: Any) -> dict[str, Any]:
        """Get overall network stats."""
        return self.fetch("/stats", **options)

    def get_pools(self, **options: Any) -> list[dict[str, Any]]:
        """Get all pools."""
        return self.fetch("/pools", **options)

    def get_pool_stats(self, pool: str, **options: Any) -> dict[str, Any]:
        """Get statistics for a pool."""
        return self.fetch(f"/pool/{quote_segment(pool)}/stats", **options)

    def get_pool_history(self, pool: str, params: dict[str, Any] | None = None, **options: Any) -> dict[str, Any]:
        """
        Get pool depth and price history.

        Parameters
        ----------
        pool : str
            Pool asset identifier
        params : dict[str, Any] | None
            Query parameters (interval, count, from, to)

        Returns
        -------
        dict[str, Any]
            Raw history with ``meta`` and ``intervals``

        """
        return self.fetch(with_query(f"/history/depths/{quote_segment(pool)}", params), **options)

    def get_swap_history(self, params: dict[str, Any] | None = None, **options: Any) -> dict[str, Any]:
        return self.fetch(with_query("/history/swaps", params), **options)

    def get_earnings_history(self, params: dict[str, Any] | None = None, **options: Any) -> dict[str, Any]:
        return self.fetch(with_query("/history/earnings", params), **options)

    def get_rune_history(self, params: dict[str, Any] | None = None, **options: Any) -> dict[str, Any]:
        return self.fetch(with_query("/history/rune", params), **options)

    def get_liquidity_history(self, params: dict[str, Any] | None = None, **options: Any) -> dict[str, Any]:
        return self.fetch(with_query("/history/liquidity_changes", params), **options)

    def get_member(self, address: str, **options: Any) -> dict[str, Any]:
        """Get liquidity member data for an address."""
        return self.fetch(f"/member/{quote_segment(address)}", **options)

    def get_pool_members(self, pool: str, **options: Any) -> list[str]:
        """Get all member addresses of a pool."""
        return self.fetch(with_query("/members", {"pool": pool}), **options)

    def get_actions(self, params: dict[str, Any] | None = None, **options: Any) -> dict[str, Any]:
        """
        Get actions (transactions).

        Parameters
        ----------
        params : dict[str, Any] | None
            Query parameters (txid, address, type, limit, offset)

        Returns
        -------
        dict[str, Any]
            Raw actions page

        """
        return self.fetch(with_query("/actions", params), **options)

    def get_action(self, txid: str, **options: Any) -> dict[str, Any]:
        return self.get_actions({"txid": txid}, **options)

    def get_churns(self, **options: Any) -> list[dict[str, Any]]:
        """Get churn history."""
        return self.fetch("/churns", **options)

    def get_health(self, **options: Any) -> dict[str, Any]:
        """Get Midgard indexer health."""
        return self.fetch("/health", **options)

    def get_tcy_distribution(self, address: str, **options: Any) -> dict[str, Any]:
        """Get TCY distribution for an address."""
        return self.fetch(f"/tcy/distribution/{quote_segment(address)}", **options)
