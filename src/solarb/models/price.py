"""PriceRecord, token balance and pool reserve models."""

from __future__ import annotations

import time
from dataclasses import dataclass


@dataclass(frozen=True)
class PriceRecord:
    """한 토큰의 확정 가격. 새 레코드로 대체될 뿐 수정되지 않음."""

    mint: str
    price_usd: float
    price_sol: float
    volume_24h: float = 0.0
    market_cap: float = 0.0
    timestamp: float = 0.0  # seconds since epoch
    source: str = "unknown"

    def age(self, now: float | None = None) -> float:
        """Seconds since this record was acquired."""
        if now is None:
            now = time.time()
        return now - self.timestamp


@dataclass(frozen=True)
class TokenBalance:
    """Raw SPL token account balance (integer string + decimals)."""

    raw_amount: str
    decimals: int


@dataclass(frozen=True)
class PoolReserves:
    """Base-asset and quote-asset vault balances of one pool."""

    base: TokenBalance
    quote: TokenBalance


@dataclass(frozen=True)
class PoolVaults:
    """Vault accounts of a pool, as returned by a pool data provider."""

    venue: str          # venue type, e.g. "raydium", "pump"
    base_vault: str
    quote_vault: str
    pool_id: str | None = None
