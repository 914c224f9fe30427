"""Data models for solarb."""

from solarb.models.opportunity import OpportunityReport
from solarb.models.price import PoolReserves, PoolVaults, PriceRecord, TokenBalance

__all__ = [
    "OpportunityReport",
    "PoolReserves",
    "PoolVaults",
    "PriceRecord",
    "TokenBalance",
]
