"""Build the ordered list of enabled price source clients from config."""

from __future__ import annotations

import logging

from solarb.config import MonitorConfig
from solarb.feeds.base import PriceSourceClient
from solarb.feeds.birdeye import BirdeyePriceClient
from solarb.feeds.coingecko import CoinGeckoPriceClient
from solarb.feeds.jupiter import JupiterPriceClient

logger = logging.getLogger(__name__)

CLIENT_CLASSES: dict[str, type[PriceSourceClient]] = {
    JupiterPriceClient.name: JupiterPriceClient,
    BirdeyePriceClient.name: BirdeyePriceClient,
    CoinGeckoPriceClient.name: CoinGeckoPriceClient,
}


def build_price_sources(config: MonitorConfig) -> list[PriceSourceClient]:
    """설정된 순서대로 활성 클라이언트 생성. 빈 리스트 가능."""
    clients: list[PriceSourceClient] = []
    for name, source_cfg in config.enabled_sources().items():
        cls = CLIENT_CLASSES.get(name)
        if cls is None:
            raise ValueError(f"No client implementation for price source: {name!r}")
        api_key = config.api_keys.get(name)
        if api_key is None:
            logger.info("Price source %s has no API key configured", name)
        kwargs = dict(
            base_url=source_cfg["url"],
            api_key=api_key,
            timeout=source_cfg.get("timeout", 10),
            fallback_numeraire_usd=config.fallback_numeraire_usd,
        )
        # CoinGecko keeps its own coin-id numeraire
        if cls is not CoinGeckoPriceClient:
            kwargs["numeraire_id"] = config.numeraire_mint
        clients.append(cls(**kwargs))
    return clients
