"""Price monitor loop — resolve → detect → log → evict → sleep.

Each cycle resolves every watched mint independently (one mint's failure never
aborts the cycle), runs the arbitrage detector when pool data is configured,
then evicts stale cache entries once. The wait between cycles ends early when
the stop event is set.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from solarb.arbitrage.detector import ArbitrageDetector
from solarb.chain.balance_reader import BalanceReader
from solarb.chain.pool_provider import PoolProvider
from solarb.config import DEFAULT_INTERVAL_MS
from solarb.errors import SolarbError
from solarb.models.opportunity import OpportunityReport
from solarb.models.price import PriceRecord
from solarb.monitoring.report import format_opportunity_line, format_price_line
from solarb.pricing.resolver import MarketDataFetcher

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    """한 사이클 결과."""

    prices: dict[str, PriceRecord] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)
    opportunities: list[OpportunityReport] = field(default_factory=list)
    evicted: int = 0


class PriceMonitor:
    """Drive the resolver and detector for a fixed list of mints.

    Args:
        resolver: MarketDataFetcher owning the price cache.
        mints: Mints to watch, in evaluation order.
        interval_ms: Pause between cycles.
        detector: Optional arbitrage detector; needs pool_provider and
            balance_reader as well to run.
        concurrency: 1 = sequential; >1 = bounded parallel evaluation.
    """

    def __init__(
        self,
        resolver: MarketDataFetcher,
        mints: Sequence[str],
        interval_ms: int = DEFAULT_INTERVAL_MS,
        detector: Optional[ArbitrageDetector] = None,
        pool_provider: Optional[PoolProvider] = None,
        balance_reader: Optional[BalanceReader] = None,
        concurrency: int = 1,
    ):
        self.resolver = resolver
        self.mints = list(mints)
        self.interval_ms = interval_ms
        self.detector = detector
        self.pool_provider = pool_provider
        self.balance_reader = balance_reader
        self.concurrency = max(1, concurrency)
        self.cycles = 0
        self._stop_event = asyncio.Event()

    @property
    def arbitrage_enabled(self) -> bool:
        return (
            self.detector is not None
            and self.pool_provider is not None
            and self.balance_reader is not None
        )

    def stop(self) -> None:
        """다음 대기 지점에서 루프 종료."""
        self._stop_event.set()

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> int:
        """Run cycles until stopped. Returns completed cycle count."""
        if stop_event is None:
            stop_event = self._stop_event
        else:
            self._stop_event = stop_event
        logger.info("Starting price monitoring for %d tokens", len(self.mints))

        while not stop_event.is_set():
            try:
                await self.run_cycle()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Error in monitor cycle %d", self.cycles + 1)

            if stop_event.is_set():
                break
            # Wait for next cycle or shutdown
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval_ms / 1000.0)
            except asyncio.TimeoutError:
                pass  # normal — time to poll again

        logger.info("Price monitoring stopped after %d cycles", self.cycles)
        return self.cycles

    async def run_cycle(self) -> CycleResult:
        """단일 사이클: 모든 mint 평가 → 캐시 정리."""
        result = CycleResult()

        if self.concurrency == 1:
            for mint in self.mints:
                await self._evaluate_mint(mint, result)
        else:
            semaphore = asyncio.Semaphore(self.concurrency)

            async def _bounded(mint: str) -> None:
                async with semaphore:
                    await self._evaluate_mint(mint, result)

            await asyncio.gather(*(_bounded(mint) for mint in self.mints))

        result.evicted = self.resolver.evict_stale()
        self.cycles += 1
        logger.debug(
            "Cycle %d done: %d prices, %d failures, %d opportunities",
            self.cycles, len(result.prices), len(result.failures), len(result.opportunities),
        )
        return result

    async def _evaluate_mint(self, mint: str, result: CycleResult) -> None:
        try:
            record = await self.resolver.resolve(mint)
        except SolarbError as exc:
            result.failures[mint] = str(exc)
            logger.warning("Failed to fetch price for %s: %s", mint, exc)
        except Exception as exc:
            result.failures[mint] = repr(exc)
            logger.exception("Unexpected error resolving %s", mint)
        else:
            result.prices[mint] = record
            logger.info("%s", format_price_line(record))

        if not self.arbitrage_enabled:
            return
        try:
            report = await self.detector.scan(mint, self.pool_provider, self.balance_reader)
        except SolarbError as exc:
            logger.warning("Failed to calculate arbitrage opportunities for %s: %s", mint, exc)
            return
        except Exception:
            logger.exception("Unexpected error scanning pools for %s", mint)
            return
        if report is not None:
            result.opportunities.append(report)
            logger.info("Arbitrage opportunity found:%s", format_opportunity_line(report))
