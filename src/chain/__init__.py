from .client import ChainClient
from .errors import ChainError, ExecutionReverted, RateLimited, RPCError
from .lookup import FlashQueryContract

__all__ = [
    "ChainClient",
    "FlashQueryContract",
    "ChainError",
    "RPCError",
    "ExecutionReverted",
    "RateLimited",
]
