"""Shared test fixtures for solarb."""

from __future__ import annotations

import time

import pytest

from solarb.errors import BalanceReadError, PriceSourceError
from solarb.models.price import PoolReserves, PriceRecord, TokenBalance

BONK_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
WIF_MINT = "EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm"


def make_record(
    mint: str = BONK_MINT,
    price_usd: float = 0.00002,
    price_sol: float = 0.0000001,
    source: str = "stub",
    timestamp: float | None = None,
    **kwargs,
) -> PriceRecord:
    return PriceRecord(
        mint=mint,
        price_usd=price_usd,
        price_sol=price_sol,
        timestamp=time.time() if timestamp is None else timestamp,
        source=source,
        **kwargs,
    )


def reserves(base_raw: str, base_dec: int, quote_raw: str, quote_dec: int) -> PoolReserves:
    return PoolReserves(
        base=TokenBalance(raw_amount=base_raw, decimals=base_dec),
        quote=TokenBalance(raw_amount=quote_raw, decimals=quote_dec),
    )


class StubSource:
    """Call-counting price source. price_usd=None → always fails."""

    def __init__(self, name: str, price_usd: float | None = 1.0, price_sol: float = 0.01):
        self.name = name
        self.price_usd = price_usd
        self.price_sol = price_sol
        self.calls = 0
        self.closed = False

    async def fetch(self, mint: str) -> PriceRecord:
        self.calls += 1
        if self.price_usd is None:
            raise PriceSourceError(self.name, "stub failure")
        return make_record(mint=mint, price_usd=self.price_usd, price_sol=self.price_sol, source=self.name)

    async def close(self) -> None:
        self.closed = True


class StubBalanceReader:
    """account → TokenBalance. 없는 계정은 BalanceReadError."""

    def __init__(self, balances: dict[str, TokenBalance]):
        self.balances = balances
        self.calls: list[str] = []

    async def get_token_account_balance(self, account: str) -> TokenBalance:
        self.calls.append(account)
        if account not in self.balances:
            raise BalanceReadError(account, "account not found")
        return self.balances[account]


@pytest.fixture
def record() -> PriceRecord:
    return make_record()


@pytest.fixture
def stub_source() -> StubSource:
    return StubSource("stub")
