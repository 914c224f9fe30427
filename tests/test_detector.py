"""Tests for the cross-venue arbitrage detector."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from conftest import BONK_MINT, StubBalanceReader, reserves
from solarb.arbitrage.detector import ArbitrageDetector
from solarb.chain.pool_provider import StaticPoolProvider
from solarb.models.price import PoolVaults, TokenBalance


class TestCompare:
    def test_selection_minimality(self):
        report = ArbitrageDetector(threshold_pct=0.5).compare(BONK_MINT, {"A": 1.0, "B": 1.02})
        assert report is not None
        assert report.best_buy_venue == "A"
        assert report.best_buy_price == 1.0
        assert report.best_sell_venue == "B"
        assert report.best_sell_price == 1.02
        assert report.spread == pytest.approx(0.02)
        assert report.profit_pct == pytest.approx(2.0)
        assert report.venue_prices == {"A": 1.0, "B": 1.02}
        assert report.detected_at.tzinfo is not None

    def test_suppressed_above_threshold(self):
        detector = ArbitrageDetector(threshold_pct=5.0)
        assert detector.compare(BONK_MINT, {"A": 1.0, "B": 1.02}) is None

    def test_single_venue_never_reports(self):
        detector = ArbitrageDetector(threshold_pct=0.0)
        assert detector.compare(BONK_MINT, {"A": 1.0}) is None

    def test_no_venues(self):
        assert ArbitrageDetector().compare(BONK_MINT, {}) is None

    def test_threshold_is_strict(self):
        prices = {"A": 1.0, "B": 1.5}  # exactly 50%
        assert ArbitrageDetector(threshold_pct=50.0).compare(BONK_MINT, prices) is None
        report = ArbitrageDetector(threshold_pct=49.9).compare(BONK_MINT, prices)
        assert report.profit_pct == 50.0

    def test_equal_prices_zero_threshold(self):
        detector = ArbitrageDetector(threshold_pct=0.0)
        assert detector.compare(BONK_MINT, {"A": 1.0, "B": 1.0}) is None

    def test_three_venues(self):
        report = ArbitrageDetector(threshold_pct=0.5).compare(
            BONK_MINT, {"raydium": 1.01, "pump": 0.98, "orca": 1.05},
        )
        assert report.best_buy_venue == "pump"
        assert report.best_sell_venue == "orca"

    def test_tie_break_by_venue_name(self):
        report = ArbitrageDetector(threshold_pct=0.5).compare(
            BONK_MINT, {"zeta": 1.0, "alpha": 1.0, "omega": 1.1, "beta": 1.1},
        )
        assert report.best_buy_venue == "alpha"
        assert report.best_sell_venue == "beta"

    def test_non_positive_and_non_finite_ignored(self):
        report = ArbitrageDetector(threshold_pct=0.5).compare(
            BONK_MINT, {"A": 1.0, "B": 1.1, "C": 0.0, "D": float("inf"), "E": float("nan")},
        )
        assert set(report.venue_prices) == {"A", "B"}

    def test_negative_threshold_invalid(self):
        with pytest.raises(ValueError):
            ArbitrageDetector(threshold_pct=-1)


class TestEvaluate:
    def test_evaluate_from_reserves(self):
        per_venue = {
            "raydium": reserves("1000", 0, "50", 0),   # 0.05
            "pump": reserves("1000", 0, "51", 0),      # 0.051
        }
        report = ArbitrageDetector(threshold_pct=0.5).evaluate(BONK_MINT, per_venue)
        assert report.best_buy_venue == "raydium"
        assert report.best_sell_venue == "pump"
        assert report.profit_pct == pytest.approx(2.0)

    def test_failed_venue_skipped(self):
        per_venue = {
            "raydium": reserves("1000", 0, "50", 0),
            "pump": reserves("0", 0, "51", 0),          # zero reserve
            "orca": reserves("bad", 0, "51", 0),        # malformed
            "meteora": reserves("1000", 0, "52", 0),
        }
        detector = ArbitrageDetector(threshold_pct=0.5)
        assert set(detector.venue_prices(per_venue)) == {"raydium", "meteora"}
        report = detector.evaluate(BONK_MINT, per_venue)
        assert report.best_sell_venue == "meteora"

    def test_oversized_reserve_skipped(self):
        per_venue = {
            "raydium": reserves("1000", 0, "50", 0),
            "pump": reserves("1000", 0, "60", 0),
            "orca": reserves("1", 0, "9" * 400, 0),
        }
        report = ArbitrageDetector(threshold_pct=0.5).evaluate(BONK_MINT, per_venue)
        assert set(report.venue_prices) == {"raydium", "pump"}
        assert report.best_buy_venue == "raydium"
        assert report.best_sell_venue == "pump"

    def test_one_valid_venue_no_report(self):
        per_venue = {
            "raydium": reserves("1000", 0, "50", 0),
            "pump": reserves("0", 0, "51", 0),
        }
        assert ArbitrageDetector(threshold_pct=0.0).evaluate(BONK_MINT, per_venue) is None


def _provider() -> StaticPoolProvider:
    return StaticPoolProvider({
        BONK_MINT: {
            "raydium": [
                PoolVaults("raydium", "ray_base_1", "ray_quote_1"),
                PoolVaults("raydium", "ray_base_2", "ray_quote_2"),
            ],
            "pump": [PoolVaults("pump", "pump_base", "pump_quote")],
        },
    })


class TestScan:
    async def test_collect_reserves_names_venues(self):
        reader = StubBalanceReader({
            "ray_base_1": TokenBalance("1000", 0), "ray_quote_1": TokenBalance("50", 0),
            "ray_base_2": TokenBalance("1000", 0), "ray_quote_2": TokenBalance("52", 0),
            "pump_base": TokenBalance("1000", 0), "pump_quote": TokenBalance("51", 0),
        })
        result = await ArbitrageDetector().collect_reserves(BONK_MINT, _provider(), reader)
        assert set(result) == {"raydium", "raydium#2", "pump"}

    async def test_scan_finds_opportunity(self):
        reader = StubBalanceReader({
            "ray_base_1": TokenBalance("1000", 0), "ray_quote_1": TokenBalance("50", 0),
            "ray_base_2": TokenBalance("1000", 0), "ray_quote_2": TokenBalance("52", 0),
            "pump_base": TokenBalance("1000", 0), "pump_quote": TokenBalance("51", 0),
        })
        report = await ArbitrageDetector(threshold_pct=0.5).scan(BONK_MINT, _provider(), reader)
        assert report.best_buy_venue == "raydium"
        assert report.best_sell_venue == "raydium#2"
        assert report.profit_pct == pytest.approx(4.0)

    async def test_balance_failure_skips_pool(self):
        reader = StubBalanceReader({
            "ray_base_1": TokenBalance("1000", 0), "ray_quote_1": TokenBalance("50", 0),
            "pump_base": TokenBalance("1000", 0), "pump_quote": TokenBalance("51", 0),
        })
        result = await ArbitrageDetector().collect_reserves(BONK_MINT, _provider(), reader)
        assert set(result) == {"raydium", "pump"}

    async def test_provider_failure_returns_empty(self):
        provider = AsyncMock()
        provider.get_pools = AsyncMock(side_effect=RuntimeError("rpc down"))
        reader = StubBalanceReader({})
        detector = ArbitrageDetector()
        assert await detector.collect_reserves(BONK_MINT, provider, reader) == {}
        assert await detector.scan(BONK_MINT, provider, reader) is None

    async def test_unknown_mint_no_pools(self):
        reader = StubBalanceReader({})
        assert await ArbitrageDetector().scan("unknown", _provider(), reader) is None
        assert reader.calls == []
