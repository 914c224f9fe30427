"""Shared async HTTP plumbing for price source clients.

Every client follows the same contract:

    async with JupiterPriceClient(api_key=...) as client:
        record = await client.fetch(mint)   # PriceRecord or PriceSourceError

Non-2xx status, malformed bodies, network errors and timeouts all surface as
``PriceSourceError``. When a source only quotes USD, the SOL price is derived
from a second numeraire lookup, falling back to a configured default.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Optional

import aiohttp

from solarb.config import DEFAULT_FALLBACK_SOL_USD, SOL_MINT
from solarb.errors import PriceSourceError
from solarb.models.price import PriceRecord

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10  # seconds


@dataclass
class SourceQuote:
    """소스 응답에서 추출한 원시 시세. price_sol=None이면 USD만 제공."""

    price_usd: float
    price_sol: Optional[float] = None
    volume_24h: float = 0.0
    market_cap: float = 0.0


class PriceSourceClient:
    """Base class for one external pricing API."""

    name = "base"

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        numeraire_id: str = SOL_MINT,
        fallback_numeraire_usd: float = DEFAULT_FALLBACK_SOL_USD,
        session: aiohttp.ClientSession | None = None,
    ):
        self.base_url = base_url
        self.api_key = api_key
        self.numeraire_id = numeraire_id
        self.fallback_numeraire_usd = fallback_numeraire_usd
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Open aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True

    async def close(self) -> None:
        """Close aiohttp session (only if we created it)."""
        if self._session and not self._session.closed and self._owns_session:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> PriceSourceClient:
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            await self.open()
        return self._session

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch(self, mint: str) -> PriceRecord:
        """토큰 가격 조회. 실패 시 PriceSourceError."""
        quote = await self._fetch_quote(mint)
        price_sol = quote.price_sol
        if price_sol is None:
            price_sol = await self._derive_price_sol(mint, quote.price_usd)

        return PriceRecord(
            mint=mint,
            price_usd=quote.price_usd,
            price_sol=price_sol,
            volume_24h=quote.volume_24h,
            market_cap=quote.market_cap,
            timestamp=time.time(),
            source=self.name,
        )

    async def get_numeraire_price_usd(self) -> float:
        """SOL USD 가격. 조회 실패 시 fallback 값."""
        try:
            quote = await self._fetch_quote(self.numeraire_id)
        except PriceSourceError as exc:
            logger.warning(
                "%s numeraire lookup failed (%s), using fallback $%.2f",
                self.name, exc.message, self.fallback_numeraire_usd,
            )
            return self.fallback_numeraire_usd
        if quote.price_usd <= 0:
            logger.warning(
                "%s returned non-positive numeraire price %s, using fallback $%.2f",
                self.name, quote.price_usd, self.fallback_numeraire_usd,
            )
            return self.fallback_numeraire_usd
        return quote.price_usd

    async def _derive_price_sol(self, mint: str, price_usd: float) -> float:
        if mint == self.numeraire_id:
            return 1.0
        numeraire_usd = await self.get_numeraire_price_usd()
        return price_usd / numeraire_usd

    async def _fetch_quote(self, token_id: str) -> SourceQuote:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # HTTP / parsing helpers
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        return {}

    async def _get_json(self, params: dict) -> dict:
        """GET base_url → dict. 모든 실패는 PriceSourceError로 정규화."""
        try:
            session = await self._ensure_session()
            async with session.get(
                self.base_url, params=params, headers=self._headers(),
            ) as resp:
                if not 200 <= resp.status < 300:
                    raise PriceSourceError(
                        self.name, f"API request failed with status: {resp.status}",
                    )
                data = await resp.json(content_type=None)
        except PriceSourceError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise PriceSourceError(self.name, f"request error: {exc!r}") from exc

        if not isinstance(data, dict):
            raise PriceSourceError(self.name, "unexpected response shape (not an object)")
        return data

    def _require_price(self, payload: dict, key: str) -> float:
        """Required numeric price field; rejects missing, non-numeric, negative, NaN."""
        value = payload.get(key) if isinstance(payload, dict) else None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise PriceSourceError(self.name, f"Invalid price format: missing {key}")
        value = float(value)
        if not math.isfinite(value) or value < 0:
            raise PriceSourceError(self.name, f"Invalid price value for {key}: {value}")
        return value

    @staticmethod
    def _optional_number(payload: dict, key: str, default: float = 0.0) -> float:
        value = payload.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return default
        value = float(value)
        return value if math.isfinite(value) else default
