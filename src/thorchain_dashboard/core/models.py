"""Response schemas for THORNode, Midgard, and pricing data."""

from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, Field

THOR_BASE = Decimal(10**8)


def from_base_unit(amount: str | int | Decimal | None) -> Decimal:
    """
    Convert a THORChain base-unit amount (1e8) to a human readable amount.

    Parameters
    ----------
    amount : str | int | Decimal | None
        Amount in base units, as returned by the APIs

    Returns
    -------
    Decimal
        Amount in whole units, 0 for missing values

    """
    if amount is None or amount == "":
        return Decimal("0")
    return Decimal(str(amount)) / THOR_BASE


class PoolStatus(StrEnum):
    """Pool lifecycle status."""

    AVAILABLE = "Available"
    STAGED = "Staged"
    SUSPENDED = "Suspended"


class PriceDirection(StrEnum):
    """Direction of the latest price move."""

    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"


class NetworkInfo(BaseModel):
    """
    Network-wide values from /thorchain/network.

    Attributes
    ----------
    rune_price_in_tor : str
        RUNE price in TOR (USD) base units
    bond_reward_rune : str | None
        Bond rewards accrued in the current churn
    total_bond_units : str | None
        Sum of bond units

    """

    rune_price_in_tor: str
    bond_reward_rune: str | None = None
    total_bond_units: str | None = None

    @property
    def rune_price(self) -> Decimal:
        return from_base_unit(self.rune_price_in_tor)


class Pool(BaseModel):
    """
    Liquidity pool from /thorchain/pools.

    Attributes
    ----------
    asset : str
        Pool asset identifier (e.g., 'BTC.BTC')
    status : str
        Pool status
    balance_rune : str
        RUNE depth in base units
    balance_asset : str
        Asset depth in base units
    asset_tor_price : str | None
        Asset USD price in base units
    pool_apr : str | None
        Pool APR in basis points

    """

    asset: str
    status: str
    balance_rune: str = "0"
    balance_asset: str = "0"
    asset_tor_price: str | None = None
    pool_apr: str | None = None

    @property
    def rune_depth(self) -> Decimal:
        return from_base_unit(self.balance_rune)

    @property
    def asset_depth(self) -> Decimal:
        return from_base_unit(self.balance_asset)

    @property
    def usd_price(self) -> Decimal:
        return from_base_unit(self.asset_tor_price)

    @property
    def apr(self) -> Decimal:
        """APR as a percentage."""
        return Decimal(self.pool_apr) / 100 if self.pool_apr else Decimal("0")


class PoolCounts(BaseModel):
    """Number of pools per status."""

    available: int = 0
    staged: int = 0
    suspended: int = 0
    total: int = 0


class Node(BaseModel):
    """
    Node operator entry from /thorchain/nodes.

    Attributes
    ----------
    node_address : str
        Node THOR address
    status : str
        Node status (Active, Standby, ...)
    total_bond : str
        Total bond in base units
    version : str | None
        Software version
    ip_address : str | None
        Advertised IP address

    """

    node_address: str
    status: str
    total_bond: str = "0"
    version: str | None = None
    ip_address: str | None = None

    @property
    def bond(self) -> Decimal:
        return from_base_unit(self.total_bond)


class InboundAddress(BaseModel):
    """
    Per-chain vault information from /thorchain/inbound_addresses.

    Attributes
    ----------
    chain : str
        Chain identifier (e.g., 'BTC', 'ETH')
    address : str | None
        Vault address
    router : str | None
        Router contract (EVM chains only)
    halted : bool
        Whether inbound transactions are halted
    gas_rate : str | None
        Current gas rate
    gas_rate_units : str | None
        Units of the gas rate
    outbound_fee : str | None
        Outbound fee in base units of the chain's native token

    """

    chain: str
    address: str | None = None
    router: str | None = None
    halted: bool = False
    gas_rate: str | None = None
    gas_rate_units: str | None = None
    outbound_fee: str | None = None


class PricePoint(BaseModel):
    """A RUNE price observation."""

    price: Decimal
    timestamp: datetime


class PriceChange(BaseModel):
    """
    Change between the two latest price observations.

    Attributes
    ----------
    absolute : Decimal
        Price difference
    percentage : Decimal
        Relative change in percent
    direction : PriceDirection
        Direction of the move

    """

    absolute: Decimal = Decimal("0")
    percentage: Decimal = Decimal("0")
    direction: PriceDirection = PriceDirection.NEUTRAL


class ExchangeRates(BaseModel):
    """
    RUNE price in several fiat currencies.

    Attributes
    ----------
    rates : dict[str, Decimal]
        Mapping of currency code (e.g., 'USD') to RUNE price

    """

    rates: dict[str, Decimal] = Field(default_factory=dict)

    def convert(self, value_usd: Decimal, currency: str) -> Decimal | None:
        """
        Convert a USD value into another currency.

        Parameters
        ----------
        value_usd : Decimal
            Value in USD
        currency : str
            Target currency code

        Returns
        -------
        Decimal | None
            Converted value, or None if either rate is unknown

        """
        usd = self.rates.get("USD")
        target = self.rates.get(currency.upper())
        if not usd or not target:
            return None
        return value_usd * (target / usd)
