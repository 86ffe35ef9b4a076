"""Gas pricing for quoted routes.

The heuristic model estimates gas units from the route shape and the number
of initialized ticks the quoter reported crossing, then converts the wei cost
into the quote token (through the deepest native/quote-token pool) and into
USD (through the deepest native/stablecoin pool). This is why the curator
always tries to include a native/quote-token pool.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from fractions import Fraction
from typing import TYPE_CHECKING, Any

import structlog

from split_router.constants import (
    BASE_SWAP_COST,
    COST_PER_HOP,
    COST_PER_INIT_TICK,
    MAINNET_CHAIN_ID,
    USD_TOKENS,
    WETH,
)
from split_router.models.entities import Token, TradablePool
from split_router.routing.types import GasCost, RawQuote, Route

if TYPE_CHECKING:
    from split_router.providers.base import PoolAccessor

logger = structlog.get_logger()


def _deepest_pool(pools: Sequence[TradablePool], token_a: Token, tokens_b: Sequence[Token]) -> TradablePool | None:
    """Most liquid priced pool trading token_a against any of tokens_b."""
    candidates = [
        pool
        for pool in pools
        if pool.sqrt_price_x96 > 0
        and pool.involves_token(token_a)
        and any(pool.involves_token(token_b) for token_b in tokens_b if token_b != token_a)
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda pool: pool.liquidity)


class HeuristicGasModel:
    """Gas model for one routing call (fixed gas price, pools and quote token)."""

    def __init__(
        self,
        gas_price_wei: int,
        quote_token: Token,
        native_token: Token,
        native_quote_pool: TradablePool | None,
        native_usd_pool: TradablePool | None,
    ) -> None:
        self.gas_price_wei = gas_price_wei
        self.quote_token = quote_token
        self.native_token = native_token
        self.native_quote_pool = native_quote_pool
        self.native_usd_pool = native_usd_pool

    def estimate_gas_units(self, route: Route, raw_quote: RawQuote) -> int:
        ticks_crossed = sum(raw_quote.initialized_ticks_crossed_list or ())
        return BASE_SWAP_COST + COST_PER_HOP * route.hops + COST_PER_INIT_TICK * ticks_crossed

    def estimate_gas_cost(self, route: Route, raw_quote: RawQuote) -> GasCost:
        gas_estimate = self.estimate_gas_units(route, raw_quote)
        cost_wei = Fraction(gas_estimate * self.gas_price_wei)

        if self.quote_token == self.native_token:
            cost_in_token = cost_wei
        elif self.native_quote_pool is not None:
            cost_in_token = cost_wei * self.native_quote_pool.price_of(self.native_token)
        else:
            cost_in_token = Fraction(0)

        if self.native_usd_pool is not None:
            usd_token = self.native_usd_pool.other_token(self.native_token)
            cost_in_usd = cost_wei * self.native_usd_pool.price_of(self.native_token) / 10**usd_token.decimals
        else:
            cost_in_usd = Fraction(0)

        return GasCost(
            gas_estimate=gas_estimate,
            gas_cost_in_token=cost_in_token,
            gas_cost_in_usd=cost_in_usd,
        )


class HeuristicGasModelFactory:
    """Builds HeuristicGasModel instances.

    Args:
        native_token: Wrapped native asset gas is paid in (WETH on mainnet)
        usd_tokens: Stablecoins used to express gas cost in USD
    """

    def __init__(self, native_token: Token = WETH, usd_tokens: Sequence[Token] = USD_TOKENS) -> None:
        self.native_token = native_token
        self.usd_tokens = tuple(usd_tokens)

    def build_gas_model(
        self,
        chain_id: int,
        gas_price_wei: int,
        pool_accessor: PoolAccessor,
        quote_token: Token,
    ) -> HeuristicGasModel:
        if chain_id != MAINNET_CHAIN_ID and self.native_token == WETH:
            logger.warning("gas_model_mainnet_native_token", chain_id=chain_id)

        pools = pool_accessor.get_all_pools()
        native_quote_pool = None
        if quote_token != self.native_token:
            native_quote_pool = _deepest_pool(pools, self.native_token, [quote_token])
            if native_quote_pool is None:
                logger.warning(
                    "gas_model_no_native_quote_pool",
                    quote_token=str(quote_token),
                    message="Gas cost in quote token will be zero",
                )

        native_usd_pool = _deepest_pool(pools, self.native_token, self.usd_tokens)
        if native_usd_pool is None:
            logger.info("gas_model_no_usd_pool", message="Gas cost in USD will be zero")

        return HeuristicGasModel(
            gas_price_wei=gas_price_wei,
            quote_token=quote_token,
            native_token=self.native_token,
            native_quote_pool=native_quote_pool,
            native_usd_pool=native_usd_pool,
        )


class Web3GasPriceProvider:
    """Gas price from the node's eth_gasPrice.

    Args:
        web3_provider: HTTP RPC URL, or an existing Web3 instance
    """

    def __init__(self, web3_provider: str | Any) -> None:
        if isinstance(web3_provider, str):
            try:
                from web3 import Web3
            except ImportError as e:
                raise ImportError(
                    "web3 package required for Web3GasPriceProvider. Install with: pip install web3"
                ) from e
            self.w3 = Web3(Web3.HTTPProvider(web3_provider))
        else:
            self.w3 = web3_provider

    async def get_gas_price(self) -> int:
        loop = asyncio.get_running_loop()
        gas_price = await loop.run_in_executor(None, lambda: self.w3.eth.gas_price)
        return int(gas_price)


__all__ = [
    "HeuristicGasModel",
    "HeuristicGasModelFactory",
    "Web3GasPriceProvider",
]
