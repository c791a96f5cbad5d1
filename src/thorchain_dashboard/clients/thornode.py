"""
THORNode API client.

Provider strategy:
- Liquify updates every block (~6 seconds); used for real-time data like prices
- Nine Realms updates about once per minute; more stable, used as fallback and
  for data that changes slowly (pools)
- The Nine Realms archive serves queries pinned to a block height
"""

import logging
from decimal import Decimal
from typing import Any

from thorchain_dashboard.api.request import ParseMode
from thorchain_dashboard.clients.base import BaseAPIClient, quote_segment, with_query
from thorchain_dashboard.core.models import InboundAddress, NetworkInfo, Node, Pool

logger = logging.getLogger(__name__)


class ThorNodeClient(BaseAPIClient):
    """
    Client for THORNode node-state endpoints.

    Every method accepts the fetch options of :meth:`BaseAPIClient.fetch`
    (``height``, ``prefer_secondary``, ``cache``, ``bypass_cache``).

    Examples
    --------
    >>> with ThorNodeClient.from_config() as thornode:
    ...     price = thornode.get_rune_price()
    ...     btc = thornode.get_pool("BTC.BTC", height=19_000_000)

    """

    api_name = "thornode"

    def get_network(self, **options: Any) -> NetworkInfo:
        """Get network data, including the RUNE price."""
        return NetworkInfo.model_validate(self.fetch("/thorchain/network", **options))

    def get_rune_price(self, **options: Any) -> Decimal:
        """
        Get the RUNE price in USD.

        Returns
        -------
        Decimal
            RUNE price

        """
        return self.get_network(**options).rune_price

    def get_pools(self, **options: Any) -> list[Pool]:
        """Get all pools."""
        return [Pool.model_validate(item) for item in self.fetch("/thorchain/pools", **options)]

    def get_pool(self, asset: str, **options: Any) -> Pool:
        """
        Get a specific pool.

        Parameters
        ----------
        asset : str
            Asset identifier (e.g., 'BTC.BTC')

        Returns
        -------
        Pool
            Pool data

        """
        return Pool.model_validate(self.fetch(f"/thorchain/pool/{quote_segment(asset)}", **options))

    def get_nodes(self, **options: Any) -> list[Node]:
        """Get all nodes."""
        return [Node.model_validate(item) for item in self.fetch("/thorchain/nodes", **options)]

    def get_mimir(self, key: str, **options: Any) -> int:
        """
        Get a single Mimir value.

        Parameters
        ----------
        key : str
            Mimir key (e.g., 'CHURNINTERVAL', 'MinimumBondInRune')

        Returns
        -------
        int
            Mimir value, 0 if the node returns a non-numeric body

        """
        options.setdefault("parse_as", ParseMode.TEXT)
        text = self.fetch(f"/thorchain/mimir/key/{quote_segment(key)}", **options)
        try:
            return int(str(text).strip())
        except ValueError:
            logger.debug("Non-numeric mimir value for %s: %r", key, text)
            return 0

    def get_mimir_values(self, keys: list[str], **options: Any) -> dict[str, int]:
        """
        Get several Mimir values.

        Parameters
        ----------
        keys : list[str]
            Mimir keys

        Returns
        -------
        dict[str, int]
            Mapping of keys to values

        """
        return {key: self.get_mimir(key, **options) for key in keys}

    def get_all_mimir(self, **options: Any) -> dict[str, Any]:
        """Get all Mimir values."""
        return self.fetch("/thorchain/mimir", **options)

    def get_balance(self, address: str, **options: Any) -> dict[str, Any]:
        """Get bank balances for a THORChain address."""
        return self.fetch(f"/cosmos/bank/v1beta1/balances/{quote_segment(address)}", **options)

    def get_liquidity_provider(self, pool: str, address: str, **options: Any) -> dict[str, Any]:
        """
        Get a liquidity provider position.

        Parameters
        ----------
        pool : str
            Pool asset identifier
        address : str
            LP address

        Returns
        -------
        dict[str, Any]
            Raw liquidity provider record

        """
        path = f"/thorchain/pool/{quote_segment(pool)}/liquidity_provider/{quote_segment(address)}"
        return self.fetch(path, **options)

    def get_vaults(self, **options: Any) -> list[dict[str, Any]]:
        """Get Asgard vaults."""
        return self.fetch("/thorchain/vaults/asgard", **options)

    def get_inbound_addresses(self, **options: Any) -> list[InboundAddress]:
        """Get inbound addresses for every connected chain."""
        return [InboundAddress.model_validate(item) for item in self.fetch("/thorchain/inbound_addresses", **options)]

    def get_inbound_address(self, chain: str, **options: Any) -> InboundAddress | None:
        """
        Get inbound address data for one chain.

        Parameters
        ----------
        chain : str
            Chain identifier (e.g., 'BTC', 'ETH')

        Returns
        -------
        InboundAddress | None
            Inbound data or None if the chain is not listed

        """
        for inbound in self.get_inbound_addresses(**options):
            if inbound.chain == chain:
                return inbound
        return None

    def get_active_chains(self, **options: Any) -> list[InboundAddress]:
        """Get inbound data for chains that are not halted."""
        return [inbound for inbound in self.get_inbound_addresses(**options) if not inbound.halted]

    def get_outbound_fees(self, **options: Any) -> list[dict[str, Any]]:
        """Get outbound fees for every asset."""
        return self.fetch("/thorchain/outbound_fees", **options)

    def get_constants(self, **options: Any) -> dict[str, Any]:
        """Get protocol constants."""
        return self.fetch("/thorchain/constants", **options)

    def get_status(self, **options: Any) -> dict[str, Any]:
        """Get node sync status."""
        return self.fetch("/status", **options)

    def get_last_block_height(self, **options: Any) -> int:
        """
        Get the current THORChain block height.

        Returns
        -------
        int
            Latest THORChain height, 0 if no chain reports one

        """
        for item in self.fetch("/thorchain/lastblock", **options):
            if item.get("thorchain"):
                return int(item["thorchain"])
        return 0

    def get_swap_quote(self, params: dict[str, Any], **options: Any) -> dict[str, Any]:
        """
        Get a swap quote.

        Parameters
        ----------
        params : dict[str, Any]
            Quote parameters (from_asset, to_asset, amount, ...)

        Returns
        -------
        dict[str, Any]
            Raw quote

        """
        return self.fetch(with_query("/thorchain/quote/swap", params), **options)
