"""Pydantic models for the quote API request and response."""

from __future__ import annotations

from dataclasses import replace
from fractions import Fraction

from pydantic import BaseModel, Field

from split_router.config import RouterConfig
from split_router.models.entities import TradeType
from split_router.models.types import Address, Uint256
from split_router.routing.types import RouteAmount, SwapRoute


def _amount_str(value: int | Fraction) -> str:
    """Raw token amount as a decimal string (exact values floored)."""
    if isinstance(value, Fraction):
        return str(value.numerator // value.denominator)
    return str(value)


class QuoteRequest(BaseModel):
    """A routing query.

    `amount` is in raw units of token_in for exact input and of token_out for
    exact output. Optional limits override the server's routing config.
    """

    token_in: Address = Field(alias="tokenIn", description="Token sold")
    token_out: Address = Field(alias="tokenOut", description="Token bought")
    amount: Uint256 = Field(description="Raw amount as decimal string")
    trade_type: TradeType = Field(default=TradeType.EXACT_INPUT, alias="tradeType")
    block_number: int | None = Field(default=None, alias="blockNumber", ge=0)
    max_hops: int | None = Field(default=None, alias="maxHops", ge=1)
    max_splits: int | None = Field(default=None, alias="maxSplits", ge=1, le=3)
    distribution_percent: int | None = Field(default=None, alias="distributionPercent", ge=1, le=100)

    model_config = {"populate_by_name": True}

    @property
    def amount_int(self) -> int:
        return int(self.amount)

    def to_config(self, base: RouterConfig) -> RouterConfig:
        """Apply the request's overrides on top of `base`."""
        overrides: dict[str, int] = {}
        if self.block_number is not None:
            overrides["block_number"] = self.block_number
        if self.max_hops is not None:
            overrides["max_swaps_per_path"] = self.max_hops
        if self.max_splits is not None:
            overrides["max_splits"] = self.max_splits
        if self.distribution_percent is not None:
            overrides["distribution_percent"] = self.distribution_percent
        return replace(base, **overrides)  # type: ignore[arg-type]


class RouteLeg(BaseModel):
    """One route of the split and the amount sent through it."""

    percent: int
    amount: Uint256
    quote: Uint256
    quote_gas_adjusted: str = Field(alias="quoteGasAdjusted")
    estimated_gas_used: int = Field(alias="estimatedGasUsed")
    token_path: list[Address] = Field(alias="tokenPath")
    pools: list[Address]
    fees: list[int]
    description: str

    model_config = {"populate_by_name": True}

    @classmethod
    def from_route_amount(cls, route_amount: RouteAmount) -> RouteLeg:
        route = route_amount.route
        return cls(
            percent=route_amount.percentage,
            amount=_amount_str(route_amount.amount),
            quote=_amount_str(route_amount.quote),
            quote_gas_adjusted=_amount_str(route_amount.quote_gas_adjusted),
            estimated_gas_used=route_amount.estimated_gas_used,
            token_path=[token.address for token in route.token_path],
            pools=[pool.address for pool in route.pools],
            fees=[pool.fee for pool in route.pools],
            description=str(route),
        )


class RouteQuote(BaseModel):
    """Serialized SwapRoute."""

    trade_type: TradeType = Field(alias="tradeType")
    amount: Uint256
    quote: Uint256
    quote_gas_adjusted: str = Field(alias="quoteGasAdjusted")
    estimated_gas_used: int = Field(alias="estimatedGasUsed")
    estimated_gas_used_quote_token: str = Field(alias="estimatedGasUsedQuoteToken")
    estimated_gas_used_usd: float = Field(alias="estimatedGasUsedUSD")
    gas_price_wei: Uint256 = Field(alias="gasPriceWei")
    block_number: int | None = Field(default=None, alias="blockNumber")
    routes: list[RouteLeg]

    model_config = {"populate_by_name": True}

    @classmethod
    def from_swap_route(cls, swap_route: SwapRoute) -> RouteQuote:
        return cls(
            trade_type=swap_route.trade_type,
            amount=_amount_str(swap_route.total_amount),
            quote=_amount_str(swap_route.quote),
            quote_gas_adjusted=_amount_str(swap_route.quote_gas_adjusted),
            estimated_gas_used=swap_route.estimated_gas_used,
            estimated_gas_used_quote_token=_amount_str(swap_route.estimated_gas_used_quote_token),
            estimated_gas_used_usd=float(swap_route.estimated_gas_used_usd),
            gas_price_wei=_amount_str(swap_route.gas_price_wei),
            block_number=swap_route.block_number,
            routes=[RouteLeg.from_route_amount(ra) for ra in swap_route.route_amounts],
        )


class QuoteResponse(BaseModel):
    """Response to a quote request. `route` is null when no route exists."""

    route: RouteQuote | None = None

    @classmethod
    def no_route(cls) -> QuoteResponse:
        return cls(route=None)


__all__ = ["QuoteRequest", "QuoteResponse", "RouteLeg", "RouteQuote"]
