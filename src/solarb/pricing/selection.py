"""Source-selection strategies.

여러 가격 소스 결과 중 하나의 PriceRecord를 고르는 정책.
The resolver calls ``select`` with a non-empty, priority-ordered sequence and
never looks at which strategy is active.
"""

from __future__ import annotations

import logging
import statistics
from typing import Optional, Sequence

from solarb.config import DEFAULT_MAX_DEVIATION_PCT
from solarb.models.price import PriceRecord

logger = logging.getLogger(__name__)


class SelectionStrategy:
    """Base strategy. Subclasses implement ``_select``."""

    name = "base"

    def select(self, records: Sequence[PriceRecord]) -> PriceRecord:
        if not records:
            raise ValueError("Cannot select a price from an empty sequence")
        return self._select(list(records))

    def _select(self, records: list[PriceRecord]) -> PriceRecord:
        raise NotImplementedError


class FirstAvailable(SelectionStrategy):
    """First successful record in client-priority order."""

    name = "first"

    def _select(self, records: list[PriceRecord]) -> PriceRecord:
        return records[0]


class WeightedAverage(SelectionStrategy):
    """Weight-averaged price across sources.

    Args:
        weights: source name → weight. 없는 소스는 1.0.
    """

    name = "weighted_average"

    def __init__(self, weights: Optional[dict[str, float]] = None):
        self.weights = dict(weights or {})

    def _select(self, records: list[PriceRecord]) -> PriceRecord:
        if len(records) == 1:
            return records[0]

        weighted = [(r, self.weights.get(r.source, 1.0)) for r in records]
        weighted = [(r, w) for r, w in weighted if w > 0]
        if not weighted:
            # 모든 가중치가 0 이하 → 균등 가중치
            weighted = [(r, 1.0) for r in records]

        total = sum(w for _, w in weighted)
        price_usd = sum(r.price_usd * w for r, w in weighted) / total
        price_sol = sum(r.price_sol * w for r, w in weighted) / total
        used = [r for r, _ in weighted]

        return PriceRecord(
            mint=used[0].mint,
            price_usd=price_usd,
            price_sol=price_sol,
            volume_24h=max(r.volume_24h for r in used),
            market_cap=max(r.market_cap for r in used),
            timestamp=max(r.timestamp for r in used),
            source="weighted(" + "+".join(r.source for r in used) + ")",
        )


class MedianWithOutlierRejection(SelectionStrategy):
    """Median USD price with outliers dropped.

    Records further than ``max_deviation_pct`` from the median are rejected;
    the surviving record closest to the median wins (ties → priority order).
    """

    name = "median"

    def __init__(self, max_deviation_pct: float = DEFAULT_MAX_DEVIATION_PCT):
        if max_deviation_pct < 0:
            raise ValueError(f"max_deviation_pct must be non-negative: {max_deviation_pct}")
        self.max_deviation_pct = max_deviation_pct

    def _select(self, records: list[PriceRecord]) -> PriceRecord:
        median = statistics.median(r.price_usd for r in records)

        survivors = [r for r in records if self._deviation_pct(r, median) <= self.max_deviation_pct]
        rejected = len(records) - len(survivors)
        if rejected:
            logger.info(
                "Rejected %d outlier price(s) for %s (median $%.6f)",
                rejected, records[0].mint, median,
            )
        if not survivors:
            survivors = records

        # min() keeps the first of equal keys → priority order on ties
        return min(survivors, key=lambda r: abs(r.price_usd - median))

    @staticmethod
    def _deviation_pct(record: PriceRecord, median: float) -> float:
        if median == 0:
            return 0.0 if record.price_usd == 0 else float("inf")
        return abs(record.price_usd - median) / abs(median) * 100.0


STRATEGIES: dict[str, type[SelectionStrategy]] = {
    FirstAvailable.name: FirstAvailable,
    WeightedAverage.name: WeightedAverage,
    MedianWithOutlierRejection.name: MedianWithOutlierRejection,
}


def get_strategy(
    name: str,
    weights: Optional[dict[str, float]] = None,
    max_deviation_pct: float = DEFAULT_MAX_DEVIATION_PCT,
) -> SelectionStrategy:
    """이름으로 전략 생성. 모르는 이름이면 ValueError."""
    if name == WeightedAverage.name:
        return WeightedAverage(weights)
    if name == MedianWithOutlierRejection.name:
        return MedianWithOutlierRejection(max_deviation_pct)
    if name == FirstAvailable.name:
        return FirstAvailable()
    raise ValueError(
        f"Unknown selection strategy: {name!r} (choose from {', '.join(STRATEGIES)})"
    )
