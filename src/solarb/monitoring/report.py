"""One-line formatters for prices and opportunities."""

from __future__ import annotations

from solarb.models.opportunity import OpportunityReport
from solarb.models.price import PriceRecord


def short_mint(mint: str, keep: int = 4) -> str:
    """'DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263' → 'DezX…B263'."""
    if len(mint) <= keep * 2 + 1:
        return mint
    return f"{mint[:keep]}…{mint[-keep:]}"


def format_price_line(record: PriceRecord) -> str:
    return (
        f"Token {record.mint}: ${record.price_usd:.6f} USD, "
        f"{record.price_sol:.6f} SOL (source: {record.source})"
    )


def format_opportunity_line(report: OpportunityReport) -> str:
    """단일 기회를 한 줄 문자열로 포맷."""
    return (
        f"  {short_mint(report.mint)}: Buy on {report.best_buy_venue} at "
        f"{report.best_buy_price:.6f}, Sell on {report.best_sell_venue} at "
        f"{report.best_sell_price:.6f} | spread: {report.spread:.6f} "
        f"| profit: {report.profit_pct:.2f}% | venues: {len(report.venue_prices)}"
    )
