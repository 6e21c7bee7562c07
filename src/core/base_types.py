"""Core type definitions shared by the chain and markets packages."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from eth_utils.address import is_address, to_checksum_address


@dataclass(frozen=True)
class Address:
    """Ethereum address, checksummed on construction.

    Compares equal to another Address or to a plain hex string regardless of
    case, and hashes on the lowercase form so it can key dictionaries.
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError("Address value must be a string")
        if not is_address(self.value):
            raise ValueError(f"Invalid Ethereum address: {self.value!r}")
        object.__setattr__(self, "value", to_checksum_address(self.value))

    @classmethod
    def from_string(cls, s: str) -> "Address":
        return cls(s)

    @property
    def checksum(self) -> str:
        return self.value

    @property
    def lower(self) -> str:
        return self.value.lower()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Address):
            return self.lower == other.lower
        if isinstance(other, str):
            return self.lower == other.lower()
        return False

    def __hash__(self) -> int:
        return hash(self.lower)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TokenAmount:
    """
    Token amount in base units with its decimals.

    Only used where a human-readable figure is parsed from configuration;
    the swap math itself works on bare ints.
    """

    raw: int
    decimals: int

    def __post_init__(self) -> None:
        if not isinstance(self.raw, int):
            raise TypeError("raw must be an int")
        if not isinstance(self.decimals, int) or self.decimals < 0:
            raise ValueError("decimals must be a non-negative integer")

    @classmethod
    def from_human(cls, amount: str | Decimal, decimals: int) -> "TokenAmount":
        """Create from a human-readable amount (e.g. '1.5' WETH)."""
        if isinstance(amount, float):
            raise TypeError("amount must be a string or Decimal, not float")
        if isinstance(amount, str):
            decimal_amount = Decimal(amount)
        elif isinstance(amount, Decimal):
            decimal_amount = amount
        else:
            raise TypeError("amount must be a string or Decimal")

        raw_decimal = decimal_amount * (Decimal(10) ** decimals)
        if raw_decimal != raw_decimal.to_integral_value():
            raise ValueError("amount has more precision than decimals allow")
        return cls(raw=int(raw_decimal), decimals=decimals)


@dataclass
class TransactionRequest:
    """A read-only call addressed to a contract."""

    to: Address
    data: bytes

    def to_dict(self) -> dict:
        """Convert to a JSON-RPC call object."""
        return {
            "to": self.to.checksum,
            "data": f"0x{self.data.hex()}",
        }


def big_number_to_decimal(value: int, base: int = 18) -> float:
    """Base units to a display float, truncated to four decimal places."""
    return (value * 10000 // 10**base) / 10000
