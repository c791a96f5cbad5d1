"""Response schemas and unit conversion."""

from thorchain_dashboard.core.models import (
    ExchangeRates,
    InboundAddress,
    NetworkInfo,
    Node,
    Pool,
    PoolCounts,
    PoolStatus,
    PriceChange,
    PriceDirection,
    PricePoint,
    from_base_unit,
)

__all__ = [
    "ExchangeRates",
    "InboundAddress",
    "NetworkInfo",
    "Node",
    "Pool",
    "PoolCounts",
    "PoolStatus",
    "PriceChange",
    "PriceDirection",
    "PricePoint",
    "from_base_unit",
]
