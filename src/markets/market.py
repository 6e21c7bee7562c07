from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from eth_abi import encode
from eth_utils.crypto import keccak

from core.base_types import Address

from .errors import InsufficientLiquidity, InvalidAsset, UnknownAsset, ZeroReserves

# 0.3% fee taken from the input amount, exactly as UniswapV2Pair.sol applies it.
FEE_NUMERATOR = 997
FEE_DENOMINATOR = 1000

SWAP_SIGNATURE = "swap(uint256,uint256,address,bytes)"
SWAP_SELECTOR = keccak(text=SWAP_SIGNATURE)[:4]


def get_amount_out(reserve_in: int, reserve_out: int, amount_in: int) -> int:
    """
    Maximum output for `amount_in`. Must match Solidity exactly:

    amount_in_with_fee = amount_in * 997
    numerator = amount_in_with_fee * reserve_out
    denominator = reserve_in * 1000 + amount_in_with_fee
    amount_out = numerator // denominator
    """
    if not isinstance(amount_in, int):
        raise TypeError("amount_in must be int")
    if amount_in <= 0:
        raise ValueError("amount_in must be positive")
    if reserve_in <= 0 or reserve_out <= 0:
        raise ZeroReserves("reserves must be positive")

    amount_in_with_fee = amount_in * FEE_NUMERATOR
    numerator = amount_in_with_fee * reserve_out
    denominator = reserve_in * FEE_DENOMINATOR + amount_in_with_fee
    return numerator // denominator


def get_amount_in(reserve_in: int, reserve_out: int, amount_out: int) -> int:
    """
    Minimum input that yields `amount_out`. The trailing +1 covers the floor
    so the pair never under-delivers.
    """
    if not isinstance(amount_out, int):
        raise TypeError("amount_out must be int")
    if amount_out <= 0:
        raise ValueError("amount_out must be positive")
    if reserve_in <= 0 or reserve_out <= 0:
        raise ZeroReserves("reserves must be positive")
    if amount_out >= reserve_out:
        raise InsufficientLiquidity(
            f"amount_out {amount_out} must be less than reserve_out {reserve_out}"
        )

    numerator = reserve_in * amount_out * FEE_DENOMINATOR
    denominator = (reserve_out - amount_out) * FEE_NUMERATOR
    return numerator // denominator + 1


@dataclass
class MultipleCallData:
    """Calls for the bundle builder: `data[i]` is sent to `targets[i]`."""

    targets: list[Address] = field(default_factory=list)
    data: list[bytes] = field(default_factory=list)


class Market:
    """
    A Uniswap-V2-style pair.

    Token order is the pair's own token0/token1 order and is never sorted;
    it decides which output slot a swap writes. Reserves live in a two-slot
    tuple aligned with `tokens` and are only ever replaced as a whole.
    """

    def __init__(
        self,
        address: Address,
        tokens: tuple[Address, Address] | list[Address],
        protocol: str = "",
    ):
        if len(tokens) != 2:
            raise ValueError("a market has exactly two tokens")
        token0, token1 = tokens
        if token0 == token1:
            raise ValueError("token0 and token1 must be different")

        self._address = address
        self._tokens = (token0, token1)
        self._reserves = (0, 0)
        self.protocol = protocol

    @property
    def address(self) -> Address:
        return self._address

    @property
    def tokens(self) -> tuple[Address, Address]:
        return self._tokens

    @property
    def reserves(self) -> tuple[int, int]:
        return self._reserves

    def __repr__(self) -> str:
        return (
            f"Market({self._address}, tokens=({self._tokens[0]}, {self._tokens[1]}), "
            f"reserves={self._reserves})"
        )

    def _index_of(self, token: Address | str, error: type[UnknownAsset]) -> int:
        if token == self._tokens[0]:
            return 0
        if token == self._tokens[1]:
            return 1
        raise error(self._address, token)

    def receive_directly(self, token: Address | str) -> bool:
        """Pairs accept a constituent token by plain transfer, no approval."""
        return token == self._tokens[0] or token == self._tokens[1]

    def prepare_receive(self, token: Address | str, amount_in: int) -> list[bytes]:
        self._index_of(token, UnknownAsset)
        if amount_in <= 0:
            raise ValueError(f"Invalid amount: {amount_in}")
        # No preparation necessary
        return []

    def reserve_of(self, token: Address | str) -> int:
        return self._reserves[self._index_of(token, UnknownAsset)]

    def set_reserves(self, reserves: tuple[int, int] | list[int]) -> bool:
        """
        Replace both reserves, ordered like `tokens`.

        Returns False when the pair is unchanged.
        """
        reserve0, reserve1 = reserves
        for reserve in (reserve0, reserve1):
            if isinstance(reserve, bool) or not isinstance(reserve, int):
                raise TypeError("reserves must be int")
        if reserve0 < 0 or reserve1 < 0:
            raise ValueError("reserves must be non-negative")
        new_reserves = (reserve0, reserve1)
        if new_reserves == self._reserves:
            return False
        self._reserves = new_reserves
        return True

    def set_reserves_via_matching_array(
        self, tokens: list[Address], balances: list[int]
    ) -> bool:
        """Like set_reserves, but `balances[i]` belongs to `tokens[i]` in any order."""
        if len(tokens) != 2 or len(balances) != 2:
            raise ValueError("expected two tokens and two balances")
        ordered = [0, 0]
        seen = set()
        for token, balance in zip(tokens, balances):
            idx = self._index_of(token, UnknownAsset)
            seen.add(idx)
            ordered[idx] = balance
        if len(seen) != 2:
            raise ValueError("tokens must cover both sides of the market")
        return self.set_reserves((ordered[0], ordered[1]))

    def _reserves_for(
        self, token_in: Address | str, token_out: Address | str
    ) -> tuple[int, int]:
        idx_in = self._index_of(token_in, InvalidAsset)
        idx_out = self._index_of(token_out, InvalidAsset)
        if idx_in == idx_out:
            raise InvalidAsset(self._address, token_out)
        reserves = self._reserves
        return reserves[idx_in], reserves[idx_out]

    def get_tokens_out(
        self, token_in: Address | str, token_out: Address | str, amount_in: int
    ) -> int:
        reserve_in, reserve_out = self._reserves_for(token_in, token_out)
        return get_amount_out(reserve_in, reserve_out, amount_in)

    def get_tokens_in(
        self, token_in: Address | str, token_out: Address | str, amount_out: int
    ) -> int:
        reserve_in, reserve_out = self._reserves_for(token_in, token_out)
        return get_amount_in(reserve_in, reserve_out, amount_out)

    def get_spot_price(self, token_in: Address | str) -> Decimal:
        """
        Units of the other token per unit of `token_in` (for display only,
        not calculations).
        """
        idx_in = self._index_of(token_in, InvalidAsset)
        reserve_in = self._reserves[idx_in]
        reserve_out = self._reserves[1 - idx_in]
        if reserve_in == 0:
            raise ZeroReserves("reserve_in is zero")
        return Decimal(reserve_out) / Decimal(reserve_in)

    def build_swap_calldata(
        self, token_in: Address | str, amount_in: int, recipient: Address
    ) -> bytes:
        """
        Calldata for `swap(amount0Out, amount1Out, to, data)` selling
        `amount_in` of `token_in`; the quoted output sits in the other
        token's slot and `data` is empty.
        """
        # function swap(uint amount0Out, uint amount1Out, address to, bytes calldata data)
        idx_in = self._index_of(token_in, InvalidAsset)
        token_out = self._tokens[1 - idx_in]
        amounts_out = [0, 0]
        amount_out = self.get_tokens_out(token_in, token_out, amount_in)
        if amount_out == 0:
            raise InsufficientLiquidity(
                f"amount_in {amount_in} of {token_in} buys nothing from {self._address}"
            )
        amounts_out[1 - idx_in] = amount_out
        return SWAP_SELECTOR + encode(
            ["uint256", "uint256", "address", "bytes"],
            [amounts_out[0], amounts_out[1], recipient.checksum, b""],
        )

    sell_tokens = build_swap_calldata

    def sell_tokens_to_next_market(
        self, token_in: Address | str, amount_in: int, next_market: "Market"
    ) -> MultipleCallData:
        """Swap here and have the pair pay the output straight into `next_market`."""
        data = self.build_swap_calldata(token_in, amount_in, next_market.address)
        return MultipleCallData(targets=[self._address], data=[data])
