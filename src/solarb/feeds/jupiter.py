"""Jupiter Price API v3 client.

GET https://api.jup.ag/price/v3?ids=<mint>  (x-api-key header)

Response is an object keyed by mint:
    {"<mint>": {"usdPrice": 1.23, ...}}

USD only — SOL price is derived through the numeraire lookup.
"""

from __future__ import annotations

from solarb.config import PRICE_SOURCES
from solarb.errors import PriceSourceError
from solarb.feeds.base import PriceSourceClient, SourceQuote

JUPITER_PRICE_URL = PRICE_SOURCES["jupiter"]["url"]


class JupiterPriceClient(PriceSourceClient):
    """Async client for the Jupiter price endpoint."""

    name = "jupiter"

    def __init__(self, base_url: str = JUPITER_PRICE_URL, **kwargs):
        super().__init__(base_url, **kwargs)

    def _headers(self) -> dict[str, str]:
        return {"x-api-key": self.api_key} if self.api_key else {}

    async def _fetch_quote(self, token_id: str) -> SourceQuote:
        data = await self._get_json({"ids": token_id})
        price_data = data.get(token_id)
        if not isinstance(price_data, dict):
            raise PriceSourceError(
                self.name, f"Price not found in Jupiter response for mint: {token_id}",
            )
        return SourceQuote(price_usd=self._require_price(price_data, "usdPrice"))
