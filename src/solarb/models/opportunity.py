"""OpportunityReport data model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class OpportunityReport:
    """감지된 크로스 베뉴 아비트라지 기회."""

    mint: str
    venue_prices: dict[str, float]  # venue → implied price (SOL)
    best_buy_venue: str
    best_buy_price: float
    best_sell_venue: str
    best_sell_price: float
    spread: float                   # best_sell - best_buy
    profit_pct: float               # spread / best_buy * 100
    detected_at: datetime
