"""Tests for pool reserve → implied price conversion."""

from __future__ import annotations

import math

import pytest

from conftest import reserves
from solarb.arbitrage.pool_price import implied_price, reserves_price, to_amount
from solarb.errors import InvalidReserveError, ZeroReserveError
from solarb.models.price import TokenBalance


class TestToAmount:
    def test_decimals_applied(self):
        assert to_amount(TokenBalance("1500000", 6)) == pytest.approx(1.5)

    def test_zero_decimals(self):
        assert to_amount(TokenBalance("42", 0)) == 42.0

    @pytest.mark.parametrize("raw", ["-1", "1.5", "abc", "", " 10", "１２"])
    def test_invalid_raw(self, raw):
        with pytest.raises(InvalidReserveError) as exc_info:
            to_amount(TokenBalance(raw, 6))
        assert exc_info.value.value == raw

    def test_negative_decimals(self):
        with pytest.raises(InvalidReserveError):
            to_amount(TokenBalance("100", -1))

    def test_u64_max_accepted(self):
        assert to_amount(TokenBalance("18446744073709551615", 0)) == pytest.approx(1.8446744073709552e19)

    def test_leading_zeros_accepted(self):
        assert to_amount(TokenBalance("0" * 30 + "42", 0)) == 42.0

    @pytest.mark.parametrize("raw", ["18446744073709551616", "9" * 400, "1" * 5000])
    def test_above_u64_rejected(self, raw):
        with pytest.raises(InvalidReserveError):
            to_amount(TokenBalance(raw, 0))

    def test_decimals_above_u8_rejected(self):
        with pytest.raises(InvalidReserveError):
            to_amount(TokenBalance("1", 256))

    def test_max_decimals_is_finite(self):
        assert math.isfinite(to_amount(TokenBalance("1", 255)))

    def test_invalid_reserve_is_value_error(self):
        with pytest.raises(ValueError):
            to_amount(TokenBalance("nope", 0))


class TestImpliedPrice:
    def test_price_formula(self):
        price = implied_price(TokenBalance("1000", 0), TokenBalance("50", 0))
        assert price == pytest.approx(0.05)

    def test_mixed_decimals(self):
        # 1,000,000 tokens (6 dp) vs 10 SOL (9 dp) → 0.00001 SOL per token
        price = implied_price(
            TokenBalance("1000000000000", 6),
            TokenBalance("10000000000", 9),
        )
        assert price == pytest.approx(0.00001)

    def test_zero_base_reserve(self):
        with pytest.raises(ZeroReserveError):
            implied_price(TokenBalance("0", 6), TokenBalance("5000", 9))

    @pytest.mark.parametrize("quote", ["0", "1", "18446744073709551615"])
    def test_zero_base_never_nan_or_inf(self, quote):
        with pytest.raises(ZeroReserveError):
            implied_price(TokenBalance("0", 0), TokenBalance(quote, 0))

    def test_zero_base_is_invalid_reserve(self):
        with pytest.raises(InvalidReserveError):
            implied_price(TokenBalance("0", 0), TokenBalance("1", 0))

    def test_zero_quote_is_zero_price(self):
        assert implied_price(TokenBalance("100", 0), TokenBalance("0", 0)) == 0.0

    def test_max_u64(self):
        price = implied_price(TokenBalance("18446744073709551615", 9), TokenBalance("1", 9))
        assert math.isfinite(price)

    def test_reserves_price(self):
        assert reserves_price(reserves("1000", 0, "50", 0)) == pytest.approx(0.05)
