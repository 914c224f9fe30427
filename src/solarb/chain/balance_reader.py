"""Token account balance readers.

BalanceReader is the contract the detector consumes. SolanaRpcBalanceReader
implements it with a JSON-RPC ``getTokenAccountBalance`` call:

    POST <rpc_url>
    {"jsonrpc": "2.0", "id": 1, "method": "getTokenAccountBalance", "params": [account]}
    → {"result": {"value": {"amount": "1000", "decimals": 6, ...}}}
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

import aiohttp

from solarb.config import DEFAULT_RPC_URL
from solarb.errors import BalanceReadError
from solarb.models.price import TokenBalance

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10  # seconds


class BalanceReader(Protocol):
    async def get_token_account_balance(self, account: str) -> TokenBalance:
        ...


class SolanaRpcBalanceReader:
    """Async Solana JSON-RPC balance reader.

    Usage:
        async with SolanaRpcBalanceReader(rpc_url) as reader:
            balance = await reader.get_token_account_balance(vault)
    """

    def __init__(
        self,
        rpc_url: str = DEFAULT_RPC_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: aiohttp.ClientSession | None = None,
    ):
        self.rpc_url = rpc_url
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None
        self._request_id = 0

    async def open(self) -> None:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True

    async def close(self) -> None:
        if self._session and not self._session.closed and self._owns_session:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> SolanaRpcBalanceReader:
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def get_token_account_balance(self, account: str) -> TokenBalance:
        """SPL 토큰 계정 잔고 조회. 실패 시 BalanceReadError."""
        result = await self._rpc_call("getTokenAccountBalance", [account], account)
        value = result.get("value") if isinstance(result, dict) else None
        if not isinstance(value, dict):
            raise BalanceReadError(account, "missing result.value")

        amount = value.get("amount")
        decimals = value.get("decimals")
        if not isinstance(amount, str) or isinstance(decimals, bool) or not isinstance(decimals, int):
            raise BalanceReadError(account, f"malformed balance: {value!r}")
        return TokenBalance(raw_amount=amount, decimals=decimals)

    async def _rpc_call(self, method: str, params: list, account: str) -> dict:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }
        try:
            if self._session is None or self._session.closed:
                await self.open()
            async with self._session.post(self.rpc_url, json=payload) as resp:
                if resp.status != 200:
                    raise BalanceReadError(account, f"RPC returned status {resp.status}")
                data = await resp.json(content_type=None)
        except BalanceReadError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise BalanceReadError(account, f"RPC request error: {exc!r}") from exc

        if not isinstance(data, dict):
            raise BalanceReadError(account, "unexpected RPC response shape")
        if data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else error
            raise BalanceReadError(account, f"RPC error: {message}")
        return data.get("result") or {}
