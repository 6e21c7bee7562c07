"""Ethereum JSON-RPC client with retries and error classification."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Optional

import requests

from core.base_types import TransactionRequest

from .errors import ChainError, ExecutionReverted, RateLimited, RPCError

logger = logging.getLogger(__name__)


class ChainClient:
    """
    Read-only Ethereum RPC client.

    Features:
    - Automatic retry with exponential backoff
    - Multiple RPC endpoint fallback
    - Request timing/logging
    - Error classification for reverted and rate-limited calls
    """

    def __init__(
        self,
        rpc_urls: list[str],
        timeout: int = 30,
        max_retries: int = 3,
    ):
        if not rpc_urls:
            raise ValueError("rpc_urls must not be empty")
        self._rpc_urls = rpc_urls
        self._timeout = timeout
        self._max_retries = max_retries
        self._session = requests.Session()

    def call(self, tx: TransactionRequest, block: str = "latest") -> bytes:
        result = self._rpc_call("eth_call", [tx.to_dict(), block])
        return _hex_to_bytes(result)

    def _rpc_call(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        data = self._post(payload, method)
        return data.get("result")

    def _post(self, payload: dict[str, Any], label: str) -> dict[str, Any]:
        """POST with retries; rate limits back off and fall through to the next URL."""
        last_error: Optional[Exception] = None
        for url in self._rpc_urls:
            for attempt in range(self._max_retries):
                start = time.perf_counter()
                try:
                    response = self._session.post(
                        url,
                        json=payload,
                        timeout=self._timeout,
                    )
                    elapsed = time.perf_counter() - start
                    logger.info("rpc %s %s in %.3fs", label, url, elapsed)
                    if response.status_code == 429:
                        raise RateLimited(f"HTTP 429 from {url}", code=429)
                    if response.status_code >= 400:
                        raise RPCError(f"HTTP {response.status_code} from {url}")
                    data = response.json()
                    if not isinstance(data, dict):
                        raise RPCError("Invalid response")
                    if "error" in data:
                        self._raise_rpc_error(data["error"])
                    return data
                except (requests.Timeout, requests.ConnectionError) as exc:
                    last_error = exc
                    self._sleep_backoff(attempt)
                except RateLimited as exc:
                    last_error = exc
                    self._sleep_backoff(attempt)
                except json.JSONDecodeError as exc:
                    last_error = exc
                    self._sleep_backoff(attempt)
            logger.warning("rpc %s giving up on %s", label, url)
        raise ChainError("RPC request failed") from last_error

    def _sleep_backoff(self, attempt: int) -> None:
        delay = 0.5 * (2**attempt)
        time.sleep(delay)

    def _raise_rpc_error(self, error: dict) -> None:
        message = str(error.get("message", "RPC error"))
        code = error.get("code")
        data = error.get("data")
        lowered = message.lower()
        if "execution reverted" in lowered or code == 3:
            raise ExecutionReverted(message, code=code, data=data)
        if "rate limit" in lowered or "too many requests" in lowered:
            raise RateLimited(message, code=code, data=data)
        raise RPCError(message, code=code, data=data)


def _hex_to_bytes(value: str) -> bytes:
    if not isinstance(value, str):
        raise RPCError("Expected hex string result")
    normalized = value[2:] if value.startswith("0x") else value
    if normalized == "":
        return b""
    return bytes.fromhex(normalized)
