from decimal import Decimal

import pytest
from eth_abi import decode

from core.base_types import Address
from markets.errors import (
    InsufficientLiquidity,
    InvalidAsset,
    UnknownAsset,
    ZeroReserves,
)
from markets.market import Market, get_amount_in, get_amount_out

WETH = Address("0x0000000000000000000000000000000000000001")
USDC = Address("0x0000000000000000000000000000000000000002")
DAI = Address("0x0000000000000000000000000000000000000004")
PAIR = Address("0x0000000000000000000000000000000000000003")
NEXT_PAIR = Address("0x0000000000000000000000000000000000000005")
RECIPIENT = Address("0x000000000000000000000000000000000000dead")


def _make_market(reserve0: int, reserve1: int) -> Market:
    market = Market(PAIR, (WETH, USDC))
    market.set_reserves((reserve0, reserve1))
    return market


def test_new_market_has_zero_reserves():
    market = Market(PAIR, [WETH, USDC])
    assert market.tokens == (WETH, USDC)
    assert market.reserve_of(WETH) == 0
    assert market.reserve_of(USDC) == 0


def test_token_order_is_preserved():
    market = Market(PAIR, (USDC, WETH))
    market.set_reserves((5, 7))
    assert market.tokens == (USDC, WETH)
    assert market.reserve_of(USDC) == 5
    assert market.reserve_of(WETH) == 7


def test_same_token_twice_rejected():
    with pytest.raises(ValueError, match="must be different"):
        Market(PAIR, (WETH, WETH))


def test_reserve_of_unknown_token():
    market = _make_market(1, 2)
    with pytest.raises(UnknownAsset):
        market.reserve_of(DAI)


def test_get_amount_out_basic():
    """1000 ETH / 2M USDC pool, buy 1 ETH worth."""
    market = _make_market(
        reserve0=1000 * 10**18,  # 1000 ETH
        reserve1=2_000_000 * 10**6,  # 2M USDC
    )

    usdc_in = 2000 * 10**6
    eth_out = market.get_tokens_out(USDC, WETH, usdc_in)

    # Should get slightly less than 1 ETH due to fee + impact.
    assert eth_out < 1 * 10**18
    assert eth_out > int(0.99 * 10**18)


def test_get_amount_out_matches_solidity():
    market = _make_market(
        reserve0=1000 * 10**18,
        reserve1=2_000_000 * 10**6,
    )
    assert market.get_tokens_out(USDC, WETH, 2000 * 10**6) == 996006981039903216


def test_fee_reduces_output_below_spot():
    assert get_amount_out(1_000_000, 1_000_000, 1_000) == 996


def test_get_amount_in_rounds_up():
    assert get_amount_in(1_000_000, 1_000_000, 996) == 1000


def test_inverse_quote_is_conservative():
    reserves = [(10**6, 10**6), (10**21, 2 * 10**12), (3 * 10**12, 7 * 10**20)]
    amounts = [1, 997, 10**6, 10**9, 10**15]
    for reserve_in, reserve_out in reserves:
        for amount_in in amounts:
            amount_out = get_amount_out(reserve_in, reserve_out, amount_in)
            if amount_out == 0:
                continue
            assert get_amount_in(reserve_in, reserve_out, amount_out) <= amount_in + 1


def test_inverse_quote_exact_division_adds_one():
    # 997e15 * 7e20 divides evenly by 3e15 + 997e15, so the +1 overshoots.
    amount_out = get_amount_out(3 * 10**12, 7 * 10**20, 10**15)
    assert amount_out == 6979 * 10**17
    assert get_amount_in(3 * 10**12, 7 * 10**20, amount_out) == 10**15 + 1


def test_amount_out_monotonic():
    base = get_amount_out(10**12, 10**12, 10**9)
    assert get_amount_out(10**12, 10**12, 2 * 10**9) > base
    assert get_amount_out(10**12, 2 * 10**12, 10**9) > base
    assert get_amount_out(2 * 10**12, 10**12, 10**9) < base


def test_integer_math_no_floats():
    market = _make_market(reserve0=10**30, reserve1=10**30)
    out = market.get_tokens_out(WETH, USDC, 10**25)
    assert isinstance(out, int)


def test_zero_reserves_is_arithmetic_error():
    market = Market(PAIR, (WETH, USDC))
    with pytest.raises(ArithmeticError):
        market.get_tokens_out(WETH, USDC, 1000)
    with pytest.raises(ZeroReserves):
        market.get_tokens_in(WETH, USDC, 1000)


def test_amount_in_insufficient_liquidity():
    market = _make_market(10**6, 10**6)
    with pytest.raises(InsufficientLiquidity):
        market.get_tokens_in(WETH, USDC, 10**6)
    with pytest.raises(InsufficientLiquidity):
        market.get_tokens_in(WETH, USDC, 10**6 + 1)


def test_quote_with_foreign_token():
    market = _make_market(10**6, 10**6)
    with pytest.raises(InvalidAsset):
        market.get_tokens_out(DAI, USDC, 1000)
    with pytest.raises(InvalidAsset):
        market.get_tokens_in(WETH, DAI, 1000)
    with pytest.raises(InvalidAsset):
        market.get_tokens_out(WETH, WETH, 1000)


def test_non_positive_amount_rejected():
    market = _make_market(10**6, 10**6)
    with pytest.raises(ValueError, match="positive"):
        market.get_tokens_out(WETH, USDC, 0)


def test_set_reserves_is_idempotent():
    market = _make_market(10**6, 2 * 10**6)
    assert market.set_reserves((10**6, 2 * 10**6)) is False
    assert market.set_reserves((10**6, 2 * 10**6)) is False
    assert market.reserves == (10**6, 2 * 10**6)
    assert market.set_reserves((10**6, 3 * 10**6)) is True
    assert market.reserve_of(USDC) == 3 * 10**6


def test_set_reserves_rejects_negative_without_change():
    market = _make_market(10, 20)
    with pytest.raises(ValueError):
        market.set_reserves((-1, 5))
    assert market.reserves == (10, 20)


def test_set_reserves_via_matching_array_reorders():
    market = Market(PAIR, (WETH, USDC))
    assert market.set_reserves_via_matching_array([USDC, WETH], [7, 3]) is True
    assert market.reserves == (3, 7)


def test_swap_calldata_writes_other_token_slot():
    market = _make_market(1_000_000, 1_000_000)
    calldata = market.build_swap_calldata(WETH, 1_000, RECIPIENT)

    assert calldata[:4] == bytes.fromhex("022c0d9f")
    amount0_out, amount1_out, to, data = decode(
        ["uint256", "uint256", "address", "bytes"], calldata[4:]
    )
    assert amount0_out == 0
    assert amount1_out == 996
    assert to == RECIPIENT
    assert data == b""


def test_swap_calldata_selling_token1():
    market = _make_market(1_000_000, 1_000_000)
    calldata = market.sell_tokens(USDC, 1_000, RECIPIENT)
    amount0_out, amount1_out, _, _ = decode(
        ["uint256", "uint256", "address", "bytes"], calldata[4:]
    )
    assert amount0_out == 996
    assert amount1_out == 0


def test_swap_calldata_foreign_token_has_no_side_effect():
    market = _make_market(1_000_000, 2_000_000)
    with pytest.raises(InvalidAsset):
        market.build_swap_calldata(DAI, 1_000, RECIPIENT)
    assert market.reserves == (1_000_000, 2_000_000)


def test_sell_tokens_to_next_market_targets_this_pair():
    market = _make_market(1_000_000, 1_000_000)
    next_market = Market(NEXT_PAIR, (USDC, DAI))

    calls = market.sell_tokens_to_next_market(WETH, 1_000, next_market)

    assert calls.targets == [PAIR]
    assert len(calls.data) == 1
    _, _, to, _ = decode(["uint256", "uint256", "address", "bytes"], calls.data[0][4:])
    assert to == NEXT_PAIR


def test_receive_directly_and_prepare_receive():
    market = _make_market(1, 1)
    assert market.receive_directly(WETH) is True
    assert market.receive_directly(DAI) is False
    assert market.prepare_receive(USDC, 10) == []
    with pytest.raises(UnknownAsset):
        market.prepare_receive(DAI, 10)
    with pytest.raises(ValueError, match="Invalid amount"):
        market.prepare_receive(WETH, 0)


def test_spot_price_display():
    market = _make_market(1000 * 10**18, 2_000_000 * 10**6)
    assert market.get_spot_price(WETH) == Decimal("0.000000002")
    assert market.get_spot_price(USDC) == Decimal("500000000")


def test_swap_calldata_rejects_zero_output():
    market = _make_market(10**24, 10**6)
    with pytest.raises(InsufficientLiquidity):
        market.build_swap_calldata(WETH, 1, RECIPIENT)
    assert market.reserves == (10**24, 10**6)


def test_set_reserves_rejects_bool():
    market = _make_market(10, 20)
    with pytest.raises(TypeError):
        market.set_reserves((True, True))
    with pytest.raises(TypeError):
        market.set_reserves((5, False))
    assert market.reserves == (10, 20)
