from .config import MarketsConfig
from .discovery import MarketDiscovery
from .errors import (
    InsufficientLiquidity,
    InvalidAsset,
    MarketError,
    SyncError,
    SyncMismatch,
    SyncTimeout,
    UnknownAsset,
    ZeroReserves,
)
from .grouping import (
    drop_single_market_groups,
    filter_by_liquidity,
    flatten_groups,
    group_by_token,
    group_markets,
)
from .market import Market, MultipleCallData, get_amount_in, get_amount_out
from .pipeline import GroupedMarkets, MarketLoader
from .sync import ReserveSynchronizer

__all__ = [
    "Market",
    "MultipleCallData",
    "get_amount_in",
    "get_amount_out",
    "MarketsConfig",
    "MarketDiscovery",
    "ReserveSynchronizer",
    "MarketLoader",
    "GroupedMarkets",
    "group_by_token",
    "drop_single_market_groups",
    "filter_by_liquidity",
    "flatten_groups",
    "group_markets",
    "MarketError",
    "UnknownAsset",
    "InvalidAsset",
    "ZeroReserves",
    "InsufficientLiquidity",
    "SyncError",
    "SyncMismatch",
    "SyncTimeout",
]
