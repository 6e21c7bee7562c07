"""Chain-specific exceptions for RPC and contract-call failures."""

from __future__ import annotations

from typing import Optional


class ChainError(Exception):
    """Base class for chain errors."""


class RPCError(ChainError):
    """RPC request failed or returned something we cannot use."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        data: Optional[object] = None,
    ):
        self.code = code
        self.data = data
        super().__init__(message)


class ExecutionReverted(RPCError):
    """eth_call reverted inside the target contract."""


class RateLimited(RPCError):
    """Node refused the request because of its rate limit."""
