"""Grouping stages that turn a flat market list into the routable index.

Pass one runs before reserves are known and only drops tokens with a single
market. Pass two runs after sync and drops markets whose quote-token reserve
is not above the liquidity threshold, then regroups.
"""

from __future__ import annotations

from typing import Iterable, Optional

from core.base_types import Address

from .market import Market

MarketsByToken = dict[Address, list[Market]]


def non_quote_token(market: Market, quote_token: Address) -> Address:
    token0, token1 = market.tokens
    return token1 if token0 == quote_token else token0


def group_by_token(markets: Iterable[Market], quote_token: Address) -> MarketsByToken:
    grouped: MarketsByToken = {}
    for market in markets:
        grouped.setdefault(non_quote_token(market, quote_token), []).append(market)
    return grouped


def drop_single_market_groups(grouped: MarketsByToken) -> MarketsByToken:
    return {token: markets for token, markets in grouped.items() if len(markets) > 1}


def flatten_groups(grouped: MarketsByToken) -> list[Market]:
    return [market for markets in grouped.values() for market in markets]


def filter_by_liquidity(
    markets: Iterable[Market], quote_token: Address, min_liquidity: int
) -> list[Market]:
    return [m for m in markets if m.reserve_of(quote_token) > min_liquidity]


def group_markets(
    markets: Iterable[Market],
    quote_token: Address,
    min_liquidity: Optional[int] = None,
) -> MarketsByToken:
    """Pass one when `min_liquidity` is None, pass two otherwise."""
    if min_liquidity is None:
        return drop_single_market_groups(group_by_token(markets, quote_token))
    liquid = filter_by_liquidity(markets, quote_token, min_liquidity)
    return group_by_token(liquid, quote_token)
