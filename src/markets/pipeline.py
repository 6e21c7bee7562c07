from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from chain.client import ChainClient
from chain.lookup import FlashQueryContract

from .config import MarketsConfig
from .discovery import MarketDiscovery
from .grouping import MarketsByToken, flatten_groups, group_markets
from .market import Market
from .sync import ReserveSynchronizer

logger = logging.getLogger(__name__)


@dataclass
class GroupedMarkets:
    markets_by_token: MarketsByToken
    all_market_pairs: list[Market]


class MarketLoader:
    """Discovery, grouping and reserve sync wired together."""

    def __init__(self, client: ChainClient, config: MarketsConfig):
        self.config = config
        lookup = FlashQueryContract(client, config.lookup_address)
        self.discovery = MarketDiscovery(lookup, config)
        self.synchronizer = ReserveSynchronizer(lookup)

    async def load_markets_by_token(
        self, sync_timeout: Optional[float] = None
    ) -> GroupedMarkets:
        quote_token = self.config.quote_token
        discovered = await self.discovery.discover_all(self.config.factory_addresses)

        candidates = group_markets(discovered, quote_token)
        all_market_pairs = flatten_groups(candidates)
        logger.info(
            "discovered %d markets, %d across %d tokens with more than one market",
            len(discovered),
            len(all_market_pairs),
            len(candidates),
        )

        await self.synchronizer.sync_async(all_market_pairs, timeout=sync_timeout)

        markets_by_token = group_markets(
            all_market_pairs, quote_token, self.config.min_quote_liquidity
        )
        logger.info(
            "%d tokens routable above %d quote-token liquidity",
            len(markets_by_token),
            self.config.min_quote_liquidity,
        )
        return GroupedMarkets(
            markets_by_token=markets_by_token, all_market_pairs=all_market_pairs
        )

    async def update_reserves(
        self, markets: list[Market], sync_timeout: Optional[float] = None
    ) -> int:
        return await self.synchronizer.sync_async(markets, timeout=sync_timeout)
