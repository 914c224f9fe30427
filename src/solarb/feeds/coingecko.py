"""CoinGecko simple-price client (disabled by default).

CoinGecko keys prices by coin id (e.g. "bonk"), not by mint address, so the
identifiers configured for this source must be coin ids.
"""

from __future__ import annotations

from solarb.config import PRICE_SOURCES
from solarb.errors import PriceSourceError
from solarb.feeds.base import PriceSourceClient, SourceQuote

COINGECKO_PRICE_URL = PRICE_SOURCES["coingecko"]["url"]
SOL_COIN_ID = "solana"


class CoinGeckoPriceClient(PriceSourceClient):
    """Async client for CoinGecko /simple/price. Reports SOL price directly."""

    name = "coingecko"

    def __init__(self, base_url: str = COINGECKO_PRICE_URL, **kwargs):
        kwargs.setdefault("numeraire_id", SOL_COIN_ID)
        super().__init__(base_url, **kwargs)

    def _headers(self) -> dict[str, str]:
        return {"x-cg-demo-api-key": self.api_key} if self.api_key else {}

    async def _fetch_quote(self, token_id: str) -> SourceQuote:
        data = await self._get_json({
            "ids": token_id,
            "vs_currencies": "usd,sol",
            "include_24hr_vol": "true",
            "include_market_cap": "true",
        })
        coin_data = data.get(token_id)
        if not isinstance(coin_data, dict):
            raise PriceSourceError(self.name, f"Coin not found in CoinGecko response: {token_id}")

        price_sol = self._optional_number(coin_data, "sol", default=-1.0)
        return SourceQuote(
            price_usd=self._require_price(coin_data, "usd"),
            price_sol=price_sol if price_sol >= 0 else None,
            volume_24h=self._optional_number(coin_data, "usd_24h_vol"),
            market_cap=self._optional_number(coin_data, "usd_market_cap"),
        )
