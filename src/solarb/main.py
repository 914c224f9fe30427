"""Price monitor main loop — resolve → detect → log.

Usage:
    python -m solarb --mints <mint1>,<mint2>
    python -m solarb --interval 2000 --threshold 0.5 --pools-file pools.json
    python -m solarb --once
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
from dataclasses import replace

from dotenv import find_dotenv, load_dotenv

from solarb.arbitrage.detector import ArbitrageDetector
from solarb.chain.balance_reader import SolanaRpcBalanceReader
from solarb.chain.pool_provider import StaticPoolProvider
from solarb.config import PRICE_SOURCES, MonitorConfig
from solarb.feeds.registry import build_price_sources
from solarb.monitoring.price_monitor import CycleResult, PriceMonitor
from solarb.monitoring.report import short_mint
from solarb.pricing.price_cache import PriceCache
from solarb.pricing.resolver import MarketDataFetcher
from solarb.pricing.selection import STRATEGIES, get_strategy

logger = logging.getLogger(__name__)

BANNER = r"""
╔══════════════════════════════════════════════╗
║   solarb — Solana Price & Arbitrage Monitor  ║
║   Multi-source prices · Cross-venue spreads  ║
╚══════════════════════════════════════════════╝
"""


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """커맨드라인 인자 파싱. 지정하지 않은 값은 환경변수 설정 유지."""
    parser = argparse.ArgumentParser(
        prog="solarb",
        description="Solana token price resolver and arbitrage monitor",
    )
    parser.add_argument("--mints", type=str, default=None,
                        help="Comma-separated token mints to watch")
    parser.add_argument("--interval", type=int, default=None,
                        help="Polling interval in milliseconds (default: 2000)")
    parser.add_argument("--threshold", type=float, default=None,
                        help="Minimum profit %% to report an opportunity (default: 0.5)")
    parser.add_argument("--ttl", type=float, default=None,
                        help="Price cache TTL in seconds (default: 30)")
    parser.add_argument("--sources", type=str, default=None,
                        help=f"Comma-separated price sources in priority order ({', '.join(PRICE_SOURCES)})")
    parser.add_argument("--strategy", type=str, default=None, choices=list(STRATEGIES),
                        help="Source-selection strategy (default: first)")
    parser.add_argument("--pools-file", type=str, default=None,
                        help="JSON file with pool vaults per mint/venue (enables arbitrage scan)")
    parser.add_argument("--rpc-url", type=str, default=None,
                        help="Solana RPC URL for vault balance reads")
    parser.add_argument("--concurrency", type=int, default=None,
                        help="Mints evaluated in parallel per cycle (default: 1)")
    parser.add_argument("--once", action="store_true", default=False,
                        help="Run a single cycle and exit")
    parser.add_argument("--log-level", type=str, default=os.environ.get("SOLARB_LOG_LEVEL", "INFO"),
                        help="Logging level (default: INFO)")
    return parser.parse_args(argv)


def apply_args(config: MonitorConfig, args: argparse.Namespace) -> MonitorConfig:
    """CLI 인자로 설정 덮어쓰기."""
    overrides = {}
    if args.mints:
        overrides["mints"] = [m.strip() for m in args.mints.split(",") if m.strip()]
    if args.interval is not None:
        overrides["interval_ms"] = args.interval
    if args.threshold is not None:
        overrides["threshold_pct"] = args.threshold
    if args.ttl is not None:
        overrides["cache_ttl"] = args.ttl
    if args.sources is not None:
        overrides["price_sources"] = [s.strip() for s in args.sources.split(",") if s.strip()]
    if args.strategy is not None:
        overrides["selection_strategy"] = args.strategy
    if args.pools_file is not None:
        overrides["pools_file"] = args.pools_file
    if args.rpc_url is not None:
        overrides["rpc_url"] = args.rpc_url
    if args.concurrency is not None:
        overrides["concurrency"] = args.concurrency
    if not overrides:
        return config
    # replace() → __post_init__ 검증 재실행
    return replace(config, **overrides)


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def build_resolver(config: MonitorConfig) -> MarketDataFetcher:
    """설정 → 소스 클라이언트 + 캐시 + 선택 전략."""
    strategy = get_strategy(
        config.selection_strategy,
        weights=config.source_weights,
        max_deviation_pct=config.max_deviation_pct,
    )
    return MarketDataFetcher(
        sources=build_price_sources(config),
        cache=PriceCache(ttl=config.cache_ttl),
        strategy=strategy,
    )


def build_monitor(
    config: MonitorConfig,
    resolver: MarketDataFetcher,
    balance_reader: SolanaRpcBalanceReader | None = None,
) -> PriceMonitor:
    pool_provider = None
    if config.pools_file:
        pool_provider = StaticPoolProvider.from_file(config.pools_file)
    return PriceMonitor(
        resolver,
        config.mints,
        interval_ms=config.interval_ms,
        detector=ArbitrageDetector(threshold_pct=config.threshold_pct),
        pool_provider=pool_provider,
        balance_reader=balance_reader if pool_provider is not None else None,
        concurrency=config.concurrency,
    )


def log_results(result: CycleResult) -> None:
    """사이클 요약만 출력. 개별 가격/기회 라인은 PriceMonitor가 이미 로깅함."""
    total = len(result.prices) + len(result.failures)
    print(f"Resolved {len(result.prices)}/{total} token prices")
    if result.failures:
        print(f"Failed: {', '.join(short_mint(mint) for mint in result.failures)}")

    if not result.opportunities:
        print("No significant arbitrage opportunities found")
        return
    count = len(result.opportunities)
    noun = "opportunity" if count == 1 else "opportunities"
    print(f"Found {count} arbitrage {noun}")


# ---------------------------------------------------------------------------
# Main loop
# ---------------------------------------------------------------------------


async def main_loop(config: MonitorConfig, once: bool = False) -> None:
    """메인 루프: 주기적 가격 조회 → 아비트라지 감지 → 로깅."""
    print(BANNER)
    print(f"Tokens: {len(config.mints)}")
    print(f"Price sources: {', '.join(config.price_sources) or '(none)'}")
    print(f"Selection: {config.selection_strategy}")
    print(f"Monitoring interval: {config.interval_ms}ms")
    print(f"Price threshold: {config.threshold_pct}% minimum profit")
    print(f"Arbitrage scan: {'ON' if config.pools_file else 'OFF'}")
    print("-" * 60)

    async with build_resolver(config) as resolver:
        async with SolanaRpcBalanceReader(config.rpc_url) as balance_reader:
            monitor = build_monitor(config, resolver, balance_reader)

            if once:
                log_results(await monitor.run_cycle())
                return

            # Graceful shutdown
            stop_event = asyncio.Event()

            def _handle_signal():
                print("\nShutting down gracefully...")
                stop_event.set()

            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                try:
                    loop.add_signal_handler(sig, _handle_signal)
                except NotImplementedError:
                    pass  # Windows

            await monitor.run(stop_event)
            logger.info("Final stats: %s", resolver.stats())

    print("Goodbye!")


def cli_main(argv: list[str] | None = None) -> None:
    """CLI entry point (python -m solarb and the solarb script)."""
    # .env from the working directory; real env vars take precedence
    load_dotenv(find_dotenv(usecwd=True))
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        config = apply_args(MonitorConfig.from_env(), args)
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc

    if not config.mints:
        raise SystemExit("No mints configured (use --mints or SOLARB_MINTS)")

    asyncio.run(main_loop(config, once=args.once))


if __name__ == "__main__":
    cli_main()
