"""Cross-venue arbitrage detector.

한 토큰의 베뉴별 implied price를 비교하여 최저가(매수)/최고가(매도) 베뉴와
스프레드, 수익률을 계산. 수익률이 threshold를 넘을 때만 OpportunityReport.

Tie-break: among venues at the same min (or max) price, the alphabetically
first venue name wins, for both best buy and best sell.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Mapping, Optional

from solarb.arbitrage.pool_price import reserves_price
from solarb.chain.balance_reader import BalanceReader
from solarb.chain.pool_provider import PoolProvider
from solarb.config import DEFAULT_THRESHOLD_PCT
from solarb.errors import BalanceReadError, InvalidReserveError
from solarb.models.opportunity import OpportunityReport
from solarb.models.price import PoolReserves

logger = logging.getLogger(__name__)


class ArbitrageDetector:
    """Detect price discrepancies between venues for one token.

    Args:
        threshold_pct: 최소 수익률 (%). profit_pct가 이 값을 초과해야 리포트.
    """

    def __init__(self, threshold_pct: float = DEFAULT_THRESHOLD_PCT):
        if threshold_pct < 0:
            raise ValueError(f"threshold_pct must be non-negative: {threshold_pct}")
        self.threshold_pct = threshold_pct

    def venue_prices(self, per_venue_reserves: Mapping[str, PoolReserves]) -> dict[str, float]:
        """베뉴별 가격 계산. 계산 실패한 베뉴는 제외."""
        prices: dict[str, float] = {}
        for venue, reserves in per_venue_reserves.items():
            try:
                prices[venue] = reserves_price(reserves)
            except InvalidReserveError as exc:
                logger.debug("Skipping venue %s: %s", venue, exc)
        return prices

    def evaluate(
        self,
        mint: str,
        per_venue_reserves: Mapping[str, PoolReserves],
    ) -> Optional[OpportunityReport]:
        """Reserves → prices → opportunity (or None)."""
        return self.compare(mint, self.venue_prices(per_venue_reserves))

    def compare(self, mint: str, venue_prices: Mapping[str, float]) -> Optional[OpportunityReport]:
        """베뉴 2개 이상 + 수익률 > threshold일 때만 리포트 반환."""
        prices = {
            venue: price for venue, price in venue_prices.items()
            if math.isfinite(price) and price > 0
        }
        if len(prices) < 2:
            return None

        ordered = sorted(prices.items(), key=lambda item: (item[1], item[0]))
        best_buy_venue, best_buy_price = ordered[0]
        best_sell_price = ordered[-1][1]
        best_sell_venue = min(v for v, p in ordered if p == best_sell_price)

        spread = best_sell_price - best_buy_price
        profit_pct = spread / best_buy_price * 100.0
        logger.debug("%s venue prices %s → profit %.4f%%", mint, prices, profit_pct)

        if profit_pct <= self.threshold_pct:
            return None

        return OpportunityReport(
            mint=mint,
            venue_prices=dict(prices),
            best_buy_venue=best_buy_venue,
            best_buy_price=best_buy_price,
            best_sell_venue=best_sell_venue,
            best_sell_price=best_sell_price,
            spread=spread,
            profit_pct=profit_pct,
            detected_at=datetime.now(tz=timezone.utc),
        )

    # ------------------------------------------------------------------
    # Reserve collection (pool provider + balance reader)
    # ------------------------------------------------------------------

    async def collect_reserves(
        self,
        mint: str,
        pool_provider: PoolProvider,
        balance_reader: BalanceReader,
    ) -> dict[str, PoolReserves]:
        """풀 목록 조회 → 볼트 잔고 읽기. 실패한 풀은 건너뜀.

        Venue names: the venue type for the first pool of a type, then
        ``<type>#2``, ``<type>#3`` ... for further pools of the same type.
        """
        try:
            pools_by_venue = await pool_provider.get_pools(mint)
        except Exception as exc:
            logger.warning("Failed to load pool data for mint %s: %s", mint, exc)
            return {}

        reserves: dict[str, PoolReserves] = {}
        for venue_type, pools in pools_by_venue.items():
            for index, pool in enumerate(pools, start=1):
                venue = venue_type if index == 1 else f"{venue_type}#{index}"
                try:
                    base = await balance_reader.get_token_account_balance(pool.base_vault)
                    quote = await balance_reader.get_token_account_balance(pool.quote_vault)
                except BalanceReadError as exc:
                    logger.warning("Skipping %s pool for %s: %s", venue, mint, exc)
                    continue
                reserves[venue] = PoolReserves(base=base, quote=quote)
        return reserves

    async def scan(
        self,
        mint: str,
        pool_provider: PoolProvider,
        balance_reader: BalanceReader,
    ) -> Optional[OpportunityReport]:
        """collect_reserves() + evaluate()."""
        reserves = await self.collect_reserves(mint, pool_provider, balance_reader)
        return self.evaluate(mint, reserves)
