"""Factory functions for creating test objects.

Usage:
    from tests.helpers import make_pool, make_route, make_route_quote

    pool = make_pool(TOKEN_X, TOKEN_Y, fee=500)
    route = make_route([pool], TOKEN_X, TOKEN_Y)
    route_quote = make_route_quote(route, percent=60, quote=600)
"""

from fractions import Fraction

from split_router.models.entities import PoolSummary, Token, TradablePool, TradeType
from split_router.providers.pools import compute_pool_address
from split_router.routing.types import RawQuote, Route, RouteWithValidQuote
from tests.helpers.fakes import FakeGasModel


def make_pool(
    token_a: Token,
    token_b: Token,
    fee: int = 3000,
    liquidity: int = 10**18,
    sqrt_price_x96: int = 2**96,
) -> TradablePool:
    """Create a tradable pool at its canonical address."""
    return TradablePool(
        token0=token_a,
        token1=token_b,
        fee=fee,
        address=compute_pool_address(token_a.address, token_b.address, fee),
        liquidity=liquidity,
        sqrt_price_x96=sqrt_price_x96,
    )


def make_summary(
    token_a: Token,
    token_b: Token,
    fee: int = 3000,
    tvl_usd: float = 1_000_000.0,
    liquidity: int | None = 10**18,
    sqrt_price: int | None = 2**96,
) -> PoolSummary:
    """Create a pool summary whose id is the canonical pool address.

    Parses through the subgraph aliases so tests exercise the wire shape.
    """
    return PoolSummary.model_validate(
        {
            "id": compute_pool_address(token_a.address, token_b.address, fee),
            "feeTier": str(fee),
            "token0": {"id": token_a.address, "symbol": token_a.symbol, "decimals": str(token_a.decimals)},
            "token1": {"id": token_b.address, "symbol": token_b.symbol, "decimals": str(token_b.decimals)},
            "totalValueLockedUSD": str(tvl_usd),
            "liquidity": None if liquidity is None else str(liquidity),
            "sqrtPrice": None if sqrt_price is None else str(sqrt_price),
        }
    )


def make_route(pools: list[TradablePool], token_in: Token, token_out: Token) -> Route:
    return Route(pools=tuple(pools), token_in=token_in, token_out=token_out)


def make_raw_quote(
    amount: int,
    quote: int | None,
    ticks_crossed: tuple[int, ...] = (1,),
    gas_estimate: int = 100_000,
) -> RawQuote:
    """Create a quote; quote=None yields an invalid (reverted) quote."""
    if quote is None:
        return RawQuote(amount=amount, quote=None)
    return RawQuote(
        amount=amount,
        quote=quote,
        sqrt_price_x96_after_list=tuple(2**96 for _ in ticks_crossed),
        initialized_ticks_crossed_list=ticks_crossed,
        gas_estimate=gas_estimate,
    )


def make_route_quote(
    route: Route,
    percent: int,
    quote: int,
    amount: int | None = None,
    trade_type: TradeType = TradeType.EXACT_INPUT,
    gas_cost: Fraction | int = 0,
) -> RouteWithValidQuote:
    """Create a route quote. `amount` defaults to `percent` raw units x 10."""
    raw_quote = make_raw_quote(amount if amount is not None else percent * 10, quote)
    quote_token = route.token_out if trade_type == TradeType.EXACT_INPUT else route.token_in
    return RouteWithValidQuote.from_raw_quote(
        route=route,
        percent=percent,
        raw_quote=raw_quote,
        gas_model=FakeGasModel(cost_in_token=Fraction(gas_cost)),
        quote_token=quote_token,
        trade_type=trade_type,
    )
