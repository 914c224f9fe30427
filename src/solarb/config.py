"""Monitor configuration — price sources, defaults, env-based config."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Well-known mints
# ---------------------------------------------------------------------------

SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZsaAkJ9"

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_CACHE_TTL = 30.0          # seconds
DEFAULT_INTERVAL_MS = 2000
MIN_INTERVAL_MS = 100
DEFAULT_THRESHOLD_PCT = 0.5       # 최소 수익률 (%)
DEFAULT_FALLBACK_SOL_USD = 150.0  # SOL 가격 조회 실패 시 사용
DEFAULT_MAX_DEVIATION_PCT = 5.0
DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"

# ---------------------------------------------------------------------------
# 가격 소스 정의 — 우선순위 순서
# ---------------------------------------------------------------------------

PRICE_SOURCES: dict = {
    "jupiter": {
        "enabled": True,
        "description": "Jupiter Price API v3 (USD only)",
        "url": "https://api.jup.ag/price/v3",
        "api_key_env": "JUPITER_API_KEY",
        "timeout": 10,
    },
    "birdeye": {
        "enabled": False,
        "description": "Birdeye public price endpoint",
        "url": "https://public-api.birdeye.so/public/price",
        "api_key_env": "BIRDEYE_API_KEY",
        "timeout": 10,
    },
    "coingecko": {
        "enabled": False,
        "description": "CoinGecko simple price (coin ids, not mints)",
        "url": "https://api.coingecko.com/api/v3/simple/price",
        "api_key_env": "COINGECKO_API_KEY",
        "timeout": 10,
    },
}


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _parse_weights(value: str | None) -> dict[str, float]:
    """"jupiter=2,birdeye=1" → {"jupiter": 2.0, "birdeye": 1.0}."""
    weights: dict[str, float] = {}
    for item in _split_csv(value):
        name, sep, raw = item.partition("=")
        if not sep:
            raise ValueError(f"Invalid source weight: {item!r}")
        weights[name.strip()] = float(raw)
    return weights


def _default_sources() -> list[str]:
    return [name for name, cfg in PRICE_SOURCES.items() if cfg.get("enabled")]


# ---------------------------------------------------------------------------
# MonitorConfig — 환경변수 기반 설정
# ---------------------------------------------------------------------------


@dataclass
class MonitorConfig:
    """Price monitor settings. 환경변수 또는 기본값."""

    mints: list[str] = field(default_factory=list)
    interval_ms: int = DEFAULT_INTERVAL_MS
    threshold_pct: float = DEFAULT_THRESHOLD_PCT
    cache_ttl: float = DEFAULT_CACHE_TTL
    fallback_numeraire_usd: float = DEFAULT_FALLBACK_SOL_USD
    numeraire_mint: str = SOL_MINT
    price_sources: list[str] = field(default_factory=_default_sources)
    selection_strategy: str = "first"
    source_weights: dict[str, float] = field(default_factory=dict)
    max_deviation_pct: float = DEFAULT_MAX_DEVIATION_PCT
    rpc_url: str = DEFAULT_RPC_URL
    pools_file: str | None = None
    concurrency: int = 1
    api_keys: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # 최소 폴링 간격 강제
        if self.interval_ms < MIN_INTERVAL_MS:
            self.interval_ms = MIN_INTERVAL_MS
        if self.concurrency < 1:
            self.concurrency = 1
        if self.cache_ttl <= 0:
            raise ValueError(f"cache_ttl must be positive: {self.cache_ttl}")
        if self.threshold_pct < 0:
            raise ValueError(f"threshold_pct must be non-negative: {self.threshold_pct}")
        if self.fallback_numeraire_usd <= 0:
            raise ValueError(
                f"fallback_numeraire_usd must be positive: {self.fallback_numeraire_usd}"
            )
        unknown = [name for name in self.price_sources if name not in PRICE_SOURCES]
        if unknown:
            raise ValueError(f"Unknown price sources: {', '.join(unknown)}")

    @classmethod
    def from_env(cls) -> MonitorConfig:
        """환경변수에서 설정 로드. 없으면 안전한 기본값."""
        env = os.environ
        sources_env = env.get("SOLARB_PRICE_SOURCES")
        api_keys = {
            name: env[cfg["api_key_env"]]
            for name, cfg in PRICE_SOURCES.items()
            if env.get(cfg["api_key_env"])
        }
        return cls(
            mints=_split_csv(env.get("SOLARB_MINTS")),
            interval_ms=int(env.get("SOLARB_INTERVAL_MS", str(DEFAULT_INTERVAL_MS))),
            threshold_pct=float(env.get("SOLARB_THRESHOLD_PCT", str(DEFAULT_THRESHOLD_PCT))),
            cache_ttl=float(env.get("SOLARB_CACHE_TTL", str(DEFAULT_CACHE_TTL))),
            fallback_numeraire_usd=float(
                env.get("SOLARB_FALLBACK_SOL_USD", str(DEFAULT_FALLBACK_SOL_USD))
            ),
            price_sources=(
                _split_csv(sources_env) if sources_env is not None else _default_sources()
            ),
            selection_strategy=env.get("SOLARB_SELECTION", "first"),
            source_weights=_parse_weights(env.get("SOLARB_SOURCE_WEIGHTS")),
            max_deviation_pct=float(
                env.get("SOLARB_MAX_DEVIATION_PCT", str(DEFAULT_MAX_DEVIATION_PCT))
            ),
            rpc_url=env.get("SOLARB_RPC_URL", DEFAULT_RPC_URL),
            pools_file=env.get("SOLARB_POOLS_FILE") or None,
            concurrency=int(env.get("SOLARB_CONCURRENCY", "1")),
            api_keys=api_keys,
        )

    def enabled_sources(self) -> dict:
        """활성화된 가격 소스만 우선순위 순서로 반환."""
        return {name: PRICE_SOURCES[name] for name in self.price_sources}
