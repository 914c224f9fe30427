"""Price resolver (MarketDataFetcher) — cache first, then every source in order.

resolve(mint):
    1. fresh cache hit → return (no network)
    2. call each configured client, drop failures
    3. no successes → NoPriceDataError (selection never sees an empty list)
    4. selection strategy → one record
    5. cache.put + return
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from solarb.errors import NoPriceDataError, PriceSourceError
from solarb.feeds.base import PriceSourceClient
from solarb.models.price import PriceRecord
from solarb.pricing.price_cache import PriceCache
from solarb.pricing.selection import FirstAvailable, SelectionStrategy

logger = logging.getLogger(__name__)


class MarketDataFetcher:
    """Resolve one PriceRecord per mint from zero or more price sources.

    Args:
        sources: Priority-ordered clients. 빈 리스트면 캐시 미스 시 항상 실패.
        cache: Owned PriceCache (a new one is created when omitted).
        strategy: Source-selection policy (default: first available).
    """

    def __init__(
        self,
        sources: Sequence[PriceSourceClient],
        cache: Optional[PriceCache] = None,
        strategy: Optional[SelectionStrategy] = None,
    ):
        self.sources = list(sources)
        self.cache = cache if cache is not None else PriceCache()
        self.strategy = strategy or FirstAvailable()
        self._locks: dict[str, asyncio.Lock] = {}

    async def resolve(self, mint: str) -> PriceRecord:
        """캐시 → 소스 순회 → 선택 → 캐시 저장. 실패 시 NoPriceDataError."""
        cached = self.cache.get(mint)
        if cached is not None:
            return cached

        # 같은 mint 동시 조회는 직렬화 — 두 번째 호출은 캐시에서 응답
        lock = self._locks.setdefault(mint, asyncio.Lock())
        async with lock:
            cached = self.cache.peek(mint)
            if cached is not None:
                return cached

            logger.debug("Fetching price for mint: %s", mint)
            records = await self._collect(mint)
            if not records:
                raise NoPriceDataError(mint, attempted=len(self.sources))

            best = self.strategy.select(records)
            self.cache.put(mint, best)
            return best

    # alias
    fetch_token_price = resolve

    async def _collect(self, mint: str) -> list[PriceRecord]:
        records: list[PriceRecord] = []
        for client in self.sources:
            try:
                records.append(await client.fetch(mint))
            except PriceSourceError as exc:
                logger.warning("Price source %s failed for %s: %s", client.name, mint, exc.message)
            except Exception as exc:
                logger.warning(
                    "Unexpected error from price source %s for %s: %r",
                    client.name, mint, exc, exc_info=True,
                )
        return records

    def evict_stale(self, now: float | None = None) -> int:
        """만료 캐시 정리. resolve()가 자동으로 호출하지 않음."""
        return self.cache.evict_stale(now)

    def stats(self) -> dict:
        """Market/cache statistics."""
        stats = dict(self.cache.stats)
        stats["sources"] = [client.name for client in self.sources]
        stats["strategy"] = self.strategy.name
        return stats

    async def close(self) -> None:
        for client in self.sources:
            await client.close()

    async def __aenter__(self) -> MarketDataFetcher:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
