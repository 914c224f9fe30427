"""In-memory TTL cache of resolved token prices.

mint → 최신 PriceRecord 저장. 신선도는 레코드의 acquisition timestamp 기준.

- ``get`` returns only fresh records (``now - timestamp < ttl``)
- ``put`` overwrites unconditionally (last writer wins)
- ``evict_stale`` drops every entry whose age reached the TTL
"""

from __future__ import annotations

import logging
import time

from solarb.config import DEFAULT_CACHE_TTL
from solarb.models.price import PriceRecord

logger = logging.getLogger(__name__)


class PriceCache:
    """TTL price cache owned by a single resolver.

    All methods are synchronous, so inside one event loop a read or an
    overwrite never interleaves with another coroutine.
    """

    def __init__(self, ttl: float = DEFAULT_CACHE_TTL):
        if ttl <= 0:
            raise ValueError(f"ttl must be positive: {ttl}")
        self.ttl = ttl
        self._entries: dict[str, PriceRecord] = {}
        self._hits: int = 0
        self._misses: int = 0

    def get(self, mint: str, now: float | None = None) -> PriceRecord | None:
        """신선한 레코드만 반환. 없거나 만료면 None."""
        record = self._entries.get(mint)
        if record is None or not self._is_fresh(record, now):
            self._misses += 1
            return None
        self._hits += 1
        return record

    def peek(self, mint: str, now: float | None = None) -> PriceRecord | None:
        """Like ``get`` but without touching hit/miss statistics."""
        record = self._entries.get(mint)
        if record is None or not self._is_fresh(record, now):
            return None
        return record

    def put(self, mint: str, record: PriceRecord) -> None:
        """레코드 저장 (무조건 덮어쓰기)."""
        self._entries[mint] = record

    def evict_stale(self, now: float | None = None) -> int:
        """Remove every entry with ``now - timestamp >= ttl``.

        Returns:
            Number of entries removed.
        """
        if now is None:
            now = time.time()
        stale = [
            mint for mint, record in self._entries.items()
            if not self._is_fresh(record, now)
        ]
        for mint in stale:
            del self._entries[mint]
        if stale:
            logger.debug("Evicted %d stale price entries", len(stale))
        return len(stale)

    def clear(self) -> None:
        """캐시 초기화."""
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def _is_fresh(self, record: PriceRecord, now: float | None) -> bool:
        return record.age(now) < self.ttl

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, mint: object) -> bool:
        return mint in self._entries

    # ------------------------------------------------------------------
    # Cache statistics
    # ------------------------------------------------------------------

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    @property
    def hit_rate(self) -> float:
        """Cache hit rate (0.0 ~ 1.0)."""
        total = self._hits + self._misses
        return self._hits / total if total > 0 else 0.0

    @property
    def stats(self) -> dict:
        """Return cache statistics."""
        return {
            "cached_prices": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self.hit_rate, 3),
        }
