"""Batched reserve synchronization.

This is the only place reserves are read from the chain. One
getReservesByPairs call covers every market, and nothing is written until
the whole response has been checked against the request.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from chain.lookup import FlashQueryContract

from .errors import SyncMismatch, SyncTimeout
from .market import Market

logger = logging.getLogger(__name__)


class ReserveSynchronizer:
    def __init__(self, lookup: FlashQueryContract):
        self.lookup = lookup

    def sync(self, markets: Sequence[Market]) -> int:
        """Fetch and apply reserves; returns how many markets changed."""
        if not markets:
            return 0
        reserves = self._fetch(markets)
        return self._apply(markets, reserves)

    async def sync_async(
        self, markets: Sequence[Market], timeout: Optional[float] = None
    ) -> int:
        """
        sync() off the event loop. When `timeout` expires SyncTimeout is
        raised and no market is touched, even if the read completes later.
        """
        if not markets:
            return 0
        try:
            reserves = await asyncio.wait_for(
                asyncio.to_thread(self._fetch, markets), timeout=timeout
            )
        except asyncio.TimeoutError as exc:
            raise SyncTimeout(
                f"Reserve sync for {len(markets)} markets timed out after {timeout}s"
            ) from exc
        return self._apply(markets, reserves)

    def _fetch(self, markets: Sequence[Market]) -> list[tuple[int, int, int]]:
        addresses = [market.address for market in markets]
        logger.info("Updating markets, count: %d", len(addresses))
        reserves = self.lookup.get_reserves_by_pairs(addresses)
        if len(reserves) != len(addresses):
            raise SyncMismatch(requested=len(addresses), received=len(reserves))
        return reserves

    @staticmethod
    def _apply(
        markets: Sequence[Market], reserves: list[tuple[int, int, int]]
    ) -> int:
        changed = 0
        for market, (reserve0, reserve1, _) in zip(markets, reserves):
            if market.set_reserves((reserve0, reserve1)):
                changed += 1
        logger.debug("reserves changed for %d/%d markets", changed, len(markets))
        return changed
