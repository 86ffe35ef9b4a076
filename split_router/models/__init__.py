"""Entities and wire types for the split router."""

from split_router.models.entities import (
    PoolSummary,
    PoolSummaryToken,
    Token,
    TradablePool,
    TradeType,
)
from split_router.models.types import Address, Uint256, normalize_address

__all__ = [
    # Types
    "Address",
    "Uint256",
    "normalize_address",
    # Entities
    "PoolSummary",
    "PoolSummaryToken",
    "Token",
    "TradablePool",
    "TradeType",
]
