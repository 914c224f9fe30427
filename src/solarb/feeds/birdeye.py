"""Birdeye public price client (disabled by default).

GET https://public-api.birdeye.so/public/price?address=<mint>  (X-API-KEY)

    {"data": {"value": 1.23, "volume24h": ..., "marketCap": ...}, "success": true}
"""

from __future__ import annotations

from solarb.config import PRICE_SOURCES
from solarb.errors import PriceSourceError
from solarb.feeds.base import PriceSourceClient, SourceQuote

BIRDEYE_PRICE_URL = PRICE_SOURCES["birdeye"]["url"]


class BirdeyePriceClient(PriceSourceClient):
    """Async client for Birdeye. Volume/market cap when the API reports them."""

    name = "birdeye"

    def __init__(self, base_url: str = BIRDEYE_PRICE_URL, chain: str = "solana", **kwargs):
        super().__init__(base_url, **kwargs)
        self.chain = chain

    def _headers(self) -> dict[str, str]:
        headers = {"x-chain": self.chain}
        if self.api_key:
            headers["X-API-KEY"] = self.api_key
        return headers

    async def _fetch_quote(self, token_id: str) -> SourceQuote:
        data = await self._get_json({"address": token_id})
        price_data = data.get("data")
        if not isinstance(price_data, dict):
            raise PriceSourceError(self.name, "Invalid Birdeye response format")
        return SourceQuote(
            price_usd=self._require_price(price_data, "value"),
            volume_24h=self._optional_number(price_data, "volume24h"),
            market_cap=self._optional_number(price_data, "marketCap"),
        )
