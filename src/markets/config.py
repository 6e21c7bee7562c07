"""Settings for market discovery, grouping and sync."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from config import get_env
from core.base_types import Address, TokenAmount

WETH_ADDRESS = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
UNISWAP_LOOKUP_CONTRACT_ADDRESS = "0x5EF1009b9FCD4fec3094a5564047e190D72Bd511"
UNISWAP_FACTORY_ADDRESS = "0x5C69bEe701ef814a2B6a3EDD4B1652CB9cc5aA6f"
SUSHISWAP_FACTORY_ADDRESS = "0xC0AEe478e3658e2610c5F7A4A2E1777cE9e4f2Ac"

# Known-bad tokens; skipping them only saves time, gas estimation would
# reject their bundles anyway.
DEFAULT_BLACKLIST = ("0xD75EA151a61d06868E31F8988D28DFE5E9df57B4",)


def _split(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass(frozen=True)
class MarketsConfig:
    quote_token: Address = field(default_factory=lambda: Address(WETH_ADDRESS))
    factory_addresses: tuple[Address, ...] = field(
        default_factory=lambda: (
            Address(UNISWAP_FACTORY_ADDRESS),
            Address(SUSHISWAP_FACTORY_ADDRESS),
        )
    )
    lookup_address: Address = field(
        default_factory=lambda: Address(UNISWAP_LOOKUP_CONTRACT_ADDRESS)
    )
    batch_size: int = 1000
    # Bounds discovery cost; loading every pair of a large factory is slow.
    batch_count_limit: int = 100
    blacklist_tokens: frozenset[Address] = field(
        default_factory=lambda: frozenset(Address(a) for a in DEFAULT_BLACKLIST)
    )
    quote_decimals: int = 18
    # Base units of the quote token; None means one whole quote token.
    min_quote_liquidity: Optional[int] = None

    def __post_init__(self) -> None:
        if self.batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if self.batch_count_limit <= 0:
            raise ValueError("batch_count_limit must be positive")
        if self.quote_decimals < 0:
            raise ValueError("quote_decimals must be non-negative")
        if self.min_quote_liquidity is None:
            object.__setattr__(
                self,
                "min_quote_liquidity",
                TokenAmount.from_human("1", self.quote_decimals).raw,
            )
        if self.min_quote_liquidity < 0:
            raise ValueError("min_quote_liquidity must be non-negative")

    @classmethod
    def from_env(cls) -> "MarketsConfig":
        defaults = cls()
        factories = _split(get_env("FACTORY_ADDRESSES"))
        blacklist = _split(get_env("BLACKLIST_TOKENS"))
        min_liquidity = get_env("MIN_QUOTE_LIQUIDITY")
        quote_decimals = int(get_env("QUOTE_DECIMALS", str(defaults.quote_decimals)))
        return cls(
            quote_token=Address(get_env("WETH_ADDRESS", WETH_ADDRESS)),
            factory_addresses=(
                tuple(Address(a) for a in factories)
                if factories
                else defaults.factory_addresses
            ),
            lookup_address=Address(
                get_env("UNISWAP_LOOKUP_CONTRACT_ADDRESS", UNISWAP_LOOKUP_CONTRACT_ADDRESS)
            ),
            batch_size=int(get_env("UNISWAP_BATCH_SIZE", str(defaults.batch_size))),
            batch_count_limit=int(
                get_env("BATCH_COUNT_LIMIT", str(defaults.batch_count_limit))
            ),
            blacklist_tokens=(
                frozenset(Address(a) for a in blacklist)
                if blacklist
                else defaults.blacklist_tokens
            ),
            quote_decimals=quote_decimals,
            # Human units of the quote token, e.g. "1.5" WETH.
            min_quote_liquidity=(
                TokenAmount.from_human(min_liquidity, quote_decimals).raw
                if min_liquidity
                else None
            ),
        )
