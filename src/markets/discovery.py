"""Paginated pair discovery over factory registries."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from chain.lookup import FlashQueryContract
from core.base_types import Address

from .config import MarketsConfig
from .market import Market

logger = logging.getLogger(__name__)


class MarketDiscovery:
    """
    Builds the candidate markets of each factory.

    Only pairs containing the quote token are kept, with their token order
    exactly as the factory reports it.
    """

    def __init__(self, lookup: FlashQueryContract, config: MarketsConfig):
        self.lookup = lookup
        self.config = config

    def discover(self, factory: Address) -> list[Market]:
        batch_size = self.config.batch_size
        markets: list[Market] = []
        for page in range(self.config.batch_count_limit):
            start = page * batch_size
            pairs = self.lookup.get_pairs_by_index_range(
                factory, start, start + batch_size
            )
            for token_a, token_b, pair_address in pairs:
                market = self._build_market(token_a, token_b, pair_address)
                if market is not None:
                    markets.append(market)
            if len(pairs) < batch_size:
                logger.info(
                    "factory %s: %d pages, %d markets", factory, page + 1, len(markets)
                )
                return markets

        logger.warning(
            "factory %s: stopped at batch count limit %d (batch size %d), "
            "markets beyond index %d were not loaded",
            factory,
            self.config.batch_count_limit,
            batch_size,
            self.config.batch_count_limit * batch_size,
        )
        return markets

    async def discover_all(self, factories: Sequence[Address]) -> list[Market]:
        """
        Discover every factory concurrently. If one fails, the others are
        cancelled and the error is raised; no partial result is returned.
        """
        if not factories:
            return []
        tasks = [
            asyncio.ensure_future(asyncio.to_thread(self.discover, factory))
            for factory in factories
        ]
        done, pending = await asyncio.wait(
            tasks, return_when=asyncio.FIRST_EXCEPTION
        )
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        for task in tasks:
            if task in done:
                error = task.exception()
                if error is not None:
                    raise error

        markets: list[Market] = []
        for task in tasks:
            markets.extend(task.result())
        return markets

    def _build_market(
        self, token_a: Address, token_b: Address, pair_address: Address
    ) -> Market | None:
        quote_token = self.config.quote_token
        if token_a == quote_token:
            token = token_b
        elif token_b == quote_token:
            token = token_a
        else:
            return None
        if token in self.config.blacklist_tokens:
            logger.debug("skipping blacklisted token %s in %s", token, pair_address)
            return None
        return Market(pair_address, (token_a, token_b))
