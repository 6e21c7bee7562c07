"""Client for the UniswapFlashQuery lookup contract.

The contract answers two bulk questions in a single eth_call each:

    getPairsByIndexRange(address factory, uint256 start, uint256 stop)
        returns (address[3][])   -- [token0, token1, pair] per pair
    getReservesByPairs(address[] pairs)
        returns (uint256[3][])   -- [reserve0, reserve1, blockTimestampLast]
"""

from __future__ import annotations

import logging

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils.crypto import keccak

from core.base_types import Address, TransactionRequest

from .client import ChainClient
from .errors import RPCError

logger = logging.getLogger(__name__)

GET_PAIRS_BY_INDEX_RANGE = "getPairsByIndexRange(address,uint256,uint256)"
GET_RESERVES_BY_PAIRS = "getReservesByPairs(address[])"


def selector(signature: str) -> bytes:
    return keccak(text=signature)[:4]


class FlashQueryContract:
    """Bulk pair and reserve reads against a deployed lookup contract."""

    def __init__(self, client: ChainClient, address: Address):
        self.client = client
        self.address = address

    def get_pairs_by_index_range(
        self, factory: Address, start: int, stop: int
    ) -> list[tuple[Address, Address, Address]]:
        if start < 0 or stop < start:
            raise ValueError("index range must satisfy 0 <= start <= stop")
        data = selector(GET_PAIRS_BY_INDEX_RANGE) + encode(
            ["address", "uint256", "uint256"], [factory.checksum, start, stop]
        )
        raw = self.client.call(TransactionRequest(to=self.address, data=data))
        (rows,) = self._decode(["address[3][]"], raw, GET_PAIRS_BY_INDEX_RANGE)
        return [
            (Address(token_a), Address(token_b), Address(pair))
            for token_a, token_b, pair in rows
        ]

    def get_reserves_by_pairs(
        self, pairs: list[Address]
    ) -> list[tuple[int, int, int]]:
        data = selector(GET_RESERVES_BY_PAIRS) + encode(
            ["address[]"], [[pair.checksum for pair in pairs]]
        )
        raw = self.client.call(TransactionRequest(to=self.address, data=data))
        (rows,) = self._decode(["uint256[3][]"], raw, GET_RESERVES_BY_PAIRS)
        return [(int(r0), int(r1), int(ts)) for r0, r1, ts in rows]

    @staticmethod
    def _decode(types: list[str], raw: bytes, signature: str) -> tuple:
        try:
            return decode(types, raw)
        except DecodingError as exc:
            logger.error("undecodable %s response (%d bytes)", signature, len(raw))
            raise RPCError(f"Malformed {signature} response") from exc
