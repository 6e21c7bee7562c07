"""CLI entrypoint for market discovery and quoting."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from chain import ChainClient, ChainError
from config import get_rpc_urls
from core.base_types import big_number_to_decimal
from markets import (
    MarketError,
    MarketLoader,
    MarketsConfig,
    get_amount_in,
    get_amount_out,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Uniswap V2 market loader")
    parser.add_argument(
        "--log-level", default="INFO", help="Logging level (DEBUG, INFO, ...)"
    )
    subparsers = parser.add_subparsers(dest="command")

    discover = subparsers.add_parser(
        "discover", help="Load, sync and group markets from the configured factories"
    )
    discover.add_argument(
        "--timeout", type=float, default=None, help="Reserve sync timeout in seconds"
    )
    discover.add_argument(
        "--top", type=int, default=20, help="Number of tokens to print"
    )

    quote = subparsers.add_parser("quote", help="Quote a swap against explicit reserves")
    quote.add_argument("--reserve-in", type=int, required=True)
    quote.add_argument("--reserve-out", type=int, required=True)
    side = quote.add_mutually_exclusive_group(required=True)
    side.add_argument("--amount-in", type=int, help="Exact input, prints output")
    side.add_argument("--amount-out", type=int, help="Exact output, prints input")

    parser.set_defaults(command="discover", timeout=None, top=20)
    return parser


async def _discover(timeout: float | None, top: int) -> None:
    config = MarketsConfig.from_env()
    client = ChainClient(get_rpc_urls())
    loader = MarketLoader(client, config)
    grouped = await loader.load_markets_by_token(sync_timeout=timeout)

    print(f"markets synced: {len(grouped.all_market_pairs)}")
    print(f"routable tokens: {len(grouped.markets_by_token)}")
    ranked = sorted(
        grouped.markets_by_token.items(),
        key=lambda item: sum(m.reserve_of(config.quote_token) for m in item[1]),
        reverse=True,
    )
    for token, markets in ranked[:top]:
        liquidity = sum(m.reserve_of(config.quote_token) for m in markets)
        quote = big_number_to_decimal(liquidity, base=config.quote_decimals)
        print(f"{token} markets={len(markets)} quote_liquidity={quote}")


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "quote":
            if args.amount_in is not None:
                print(get_amount_out(args.reserve_in, args.reserve_out, args.amount_in))
            else:
                print(get_amount_in(args.reserve_in, args.reserve_out, args.amount_out))
            return

        asyncio.run(_discover(args.timeout, args.top))
    except (MarketError, ChainError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
