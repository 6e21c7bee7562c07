"""Exceptions raised by market math, discovery and reserve sync."""

from __future__ import annotations

from chain.errors import ChainError


class MarketError(Exception):
    """Base class for per-market failures."""


class UnknownAsset(MarketError, KeyError):
    """Token is not one of the market's two constituents."""

    def __init__(self, market: object, token: object):
        self.market = market
        self.token = token
        super().__init__(f"Market {market} does not operate on token {token}")

    def __str__(self) -> str:
        return str(self.args[0])


class InvalidAsset(UnknownAsset):
    """Quote or swap referenced a token the market does not trade."""


class ZeroReserves(MarketError, ArithmeticError):
    """Market has no liquidity on at least one side."""


class InsufficientLiquidity(MarketError):
    """Requested output is not strictly below the output reserve."""


class SyncError(ChainError):
    """Batched reserve read could not be applied."""


class SyncMismatch(SyncError):
    """Reserve response length differs from the request length."""

    def __init__(self, requested: int, received: int):
        self.requested = requested
        self.received = received
        super().__init__(
            f"Requested reserves for {requested} markets, received {received}"
        )


class SyncTimeout(SyncError):
    """Reserve read did not complete within the caller's deadline."""
