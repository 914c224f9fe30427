"""Exception types raised by price sources, balance reads and reserve math."""

from __future__ import annotations


class SolarbError(Exception):
    """Base class for all solarb errors."""


class PriceSourceError(SolarbError):
    """A single price source produced no record (HTTP, parse or network failure)."""

    def __init__(self, source: str, message: str):
        super().__init__(f"[{source}] {message}")
        self.source = source
        self.message = message


class BalanceReadError(SolarbError):
    """Token account balance could not be read."""

    def __init__(self, account: str, message: str):
        super().__init__(f"balance read failed for {account}: {message}")
        self.account = account
        self.message = message


class NoPriceDataError(SolarbError):
    """Every configured price source failed for a mint."""

    def __init__(self, mint: str, attempted: int = 0):
        super().__init__(
            f"Failed to fetch price from any source for mint: {mint} "
            f"({attempted} sources tried)"
        )
        self.mint = mint
        self.attempted = attempted


class InvalidReserveError(SolarbError, ValueError):
    """Pool reserve could not be turned into a quantity."""

    def __init__(self, value, message: str):
        super().__init__(f"{message}: {value!r}")
        self.value = value


class ZeroReserveError(InvalidReserveError):
    """Base reserve is zero — implied price undefined."""

    def __init__(self, value):
        super().__init__(value, "Token reserve is zero, cannot calculate price")
