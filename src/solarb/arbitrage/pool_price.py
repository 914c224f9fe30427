"""Pool reserve → implied price.

price = quote_amount / base_amount, where amount = raw / 10**decimals.
Same formula for every pool type that exposes two vault balances; the AMM
curve does not matter for a spot-price proxy.
"""

from __future__ import annotations

from solarb.errors import InvalidReserveError, ZeroReserveError
from solarb.models.price import PoolReserves, TokenBalance

# SPL token amount is u64, mint decimals u8
MAX_RAW_AMOUNT = 2**64 - 1
MAX_DECIMALS = 255


def to_amount(balance: TokenBalance) -> float:
    """Raw integer string + decimals → real-valued quantity.

    Raises:
        InvalidReserveError: raw amount is not an integer string in u64 range,
            or decimals is outside 0..255.
    """
    raw = balance.raw_amount
    if isinstance(raw, int) and not isinstance(raw, bool):
        raw = str(raw)
    if not isinstance(raw, str) or not raw.isascii() or not raw.isdigit():
        raise InvalidReserveError(raw, "Failed to parse token balance")
    if len(raw.lstrip("0")) > len(str(MAX_RAW_AMOUNT)) or int(raw) > MAX_RAW_AMOUNT:
        raise InvalidReserveError(raw, "Failed to parse token balance")
    decimals = balance.decimals
    if (
        isinstance(decimals, bool)
        or not isinstance(decimals, int)
        or not 0 <= decimals <= MAX_DECIMALS
    ):
        raise InvalidReserveError(decimals, "Invalid decimals")
    return int(raw) / 10 ** decimals


def implied_price(base: TokenBalance, quote: TokenBalance) -> float:
    """Quote-asset cost of one base-asset unit.

    Raises:
        InvalidReserveError: either balance is malformed.
        ZeroReserveError: base reserve is exactly zero.
    """
    base_amount = to_amount(base)
    quote_amount = to_amount(quote)
    if base_amount == 0:
        raise ZeroReserveError(base.raw_amount)
    return quote_amount / base_amount


def reserves_price(reserves: PoolReserves) -> float:
    """implied_price() for a PoolReserves pair."""
    return implied_price(reserves.base, reserves.quote)
