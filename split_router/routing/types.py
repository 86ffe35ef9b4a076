"""Type definitions for routing module."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from fractions import Fraction
from typing import TYPE_CHECKING

from split_router.models.entities import Token, TradablePool, TradeType

if TYPE_CHECKING:
    from split_router.providers.base import GasModel


@dataclass(frozen=True)
class Route:
    """An ordered chain of pools from token_in to token_out.

    Consecutive pools share one token. No pool appears twice.
    """

    pools: tuple[TradablePool, ...]
    token_in: Token
    token_out: Token

    @property
    def token_path(self) -> list[Token]:
        """Tokens visited by the route, token_in first."""
        path = [self.token_in]
        for pool in self.pools:
            path.append(pool.other_token(path[-1]))
        return path

    @property
    def pool_addresses(self) -> frozenset[str]:
        return frozenset(pool.address for pool in self.pools)

    @property
    def hops(self) -> int:
        return len(self.pools)

    def __str__(self) -> str:
        return route_to_string(self)


def route_to_string(route: Route) -> str:
    """Render a route as `A -- 0.3% [pool] --> B -- ...`."""
    tokens = route.token_path
    parts = [str(tokens[0])]
    for pool, token in zip(route.pools, tokens[1:], strict=True):
        parts.append(f" -- {float(pool.fee_percent)}% [{pool.address[-8:]}] --> {token}")
    return "".join(parts)


@dataclass(frozen=True)
class RawQuote:
    """One quoter result for one route and one amount.

    Any missing field marks the quote invalid (no liquidity, reverted call);
    invalid quotes are dropped before the split search.
    """

    amount: int
    quote: int | None
    sqrt_price_x96_after_list: tuple[int, ...] | None = None
    initialized_ticks_crossed_list: tuple[int, ...] | None = None
    gas_estimate: int | None = None

    @property
    def is_valid(self) -> bool:
        return (
            self.quote is not None
            and self.sqrt_price_x96_after_list is not None
            and self.initialized_ticks_crossed_list is not None
            and self.gas_estimate is not None
        )


@dataclass(frozen=True)
class QuoteBatch:
    """Result of one batched quote call.

    Each route carries one quote per amount, aligned with the amount ladder.
    """

    routes_with_quotes: list[tuple[Route, list[RawQuote]]]
    block_number: int


@dataclass(frozen=True)
class GasCost:
    """Gas estimate of a route priced into the quote token and USD."""

    gas_estimate: int
    gas_cost_in_token: Fraction
    gas_cost_in_usd: Fraction


@dataclass(frozen=True)
class RouteWithValidQuote:
    """A valid quote bound to its route, ladder percent and gas cost."""

    route: Route
    amount: int
    percent: int
    quote: int
    quote_adjusted_for_gas: Fraction
    gas_estimate: int
    gas_cost_in_token: Fraction
    gas_cost_in_usd: Fraction
    quoter_gas_estimate: int
    sqrt_price_x96_after_list: tuple[int, ...]
    initialized_ticks_crossed_list: tuple[int, ...]
    trade_type: TradeType
    quote_token: Token

    @classmethod
    def from_raw_quote(
        cls,
        route: Route,
        percent: int,
        raw_quote: RawQuote,
        gas_model: GasModel,
        quote_token: Token,
        trade_type: TradeType,
    ) -> RouteWithValidQuote:
        """Price a valid raw quote's gas and derive the gas-adjusted quote.

        For exact input the quote is an output amount, so gas is subtracted.
        For exact output the quote is a required input, so gas is added.

        Raises:
            ValueError: If the raw quote is missing fields
        """
        if not raw_quote.is_valid:
            raise ValueError(f"Cannot build a route quote from an invalid quote for {route}")
        assert raw_quote.quote is not None
        assert raw_quote.gas_estimate is not None
        assert raw_quote.sqrt_price_x96_after_list is not None
        assert raw_quote.initialized_ticks_crossed_list is not None

        cost = gas_model.estimate_gas_cost(route, raw_quote)
        if trade_type == TradeType.EXACT_INPUT:
            adjusted = raw_quote.quote - cost.gas_cost_in_token
        else:
            adjusted = raw_quote.quote + cost.gas_cost_in_token

        return cls(
            route=route,
            amount=raw_quote.amount,
            percent=percent,
            quote=raw_quote.quote,
            quote_adjusted_for_gas=Fraction(adjusted),
            gas_estimate=cost.gas_estimate,
            gas_cost_in_token=cost.gas_cost_in_token,
            gas_cost_in_usd=cost.gas_cost_in_usd,
            quoter_gas_estimate=raw_quote.gas_estimate,
            sqrt_price_x96_after_list=raw_quote.sqrt_price_x96_after_list,
            initialized_ticks_crossed_list=raw_quote.initialized_ticks_crossed_list,
            trade_type=trade_type,
            quote_token=quote_token,
        )

    @property
    def pool_addresses(self) -> frozenset[str]:
        return self.route.pool_addresses

    def __str__(self) -> str:
        return f"{self.percent}% QuoteGasAdj[{float(self.quote_adjusted_for_gas):.2f}] = {self.route}"


@dataclass
class RouteAmount:
    """One leg of the final split: a route and the amount sent through it.

    `amount` may be topped up during reconciliation, hence mutable.
    """

    route: Route
    amount: int
    quote: int
    quote_gas_adjusted: Fraction
    percentage: int
    estimated_gas_used: int
    estimated_gas_used_quote_token: Fraction
    estimated_gas_used_usd: Fraction


def route_amounts_to_string(route_amounts: Sequence[RouteAmount]) -> list[str]:
    """Render route amounts for logging, one string per leg."""
    return [f"{ra.percentage}% = {ra.route}" for ra in route_amounts]


@dataclass
class SwapRoute:
    """Aggregate result of a routing call."""

    quote: int
    quote_gas_adjusted: Fraction
    estimated_gas_used: int
    estimated_gas_used_quote_token: Fraction
    estimated_gas_used_usd: Fraction
    route_amounts: list[RouteAmount]
    trade_type: TradeType
    gas_price_wei: int = 0
    block_number: int | None = None
    pool_addresses_used: frozenset[str] = field(default_factory=frozenset)

    @property
    def total_amount(self) -> int:
        return sum(ra.amount for ra in self.route_amounts)

    @property
    def num_splits(self) -> int:
        return len(self.route_amounts)


__all__ = [
    "GasCost",
    "QuoteBatch",
    "RawQuote",
    "Route",
    "RouteAmount",
    "RouteWithValidQuote",
    "SwapRoute",
    "route_amounts_to_string",
    "route_to_string",
]
