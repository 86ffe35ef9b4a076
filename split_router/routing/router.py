"""Split router facade.

Ties the routing stages together for one request:

1. Validate the config.
2. Curate candidate pools and fetch the gas price (concurrently).
3. Build the gas model for the quote token.
4. Enumerate routes over the candidate pools.
5. Quote every route at every rung of the amount ladder in one batch.
6. Search for the best split and assemble the SwapRoute.

"No route" is a normal outcome and is returned as None. Provider failures
propagate unchanged.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from split_router.config import DEFAULT_CONFIG, RouterConfig
from split_router.metrics import DEFAULT_METRICS, MetricsSink, MetricUnit, timed
from split_router.models.entities import Token, TradeType
from split_router.models.types import normalize_address
from split_router.routing.assembly import assemble_swap_route, emit_pool_selection_metrics
from split_router.routing.candidates import PoolCurator
from split_router.routing.distribution import get_amount_distribution, to_raw_amount
from split_router.routing.pathfinding import compute_all_routes
from split_router.routing.split import SplitOptimizer, build_percent_to_quotes
from split_router.routing.types import SwapRoute

if TYPE_CHECKING:
    from split_router.providers.base import (
        BlockedTokenList,
        GasModelFactory,
        GasPriceProvider,
        PoolProvider,
        PoolUniverseSource,
        QuoteProvider,
        TokenResolver,
    )

logger = structlog.get_logger()


class SplitRouter:
    """Finds the best (possibly split) swap route for a token pair and amount.

    Args:
        chain_id: Chain the providers serve
        pool_universe: Source of every known pool
        pool_provider: Materializes candidate pools with their state
        quote_provider: Batched quote executor
        token_resolver: Token metadata lookup
        gas_price_provider: Current gas price
        gas_model_factory: Builds the per-call gas model
        blocked_tokens: Optional policy excluding tokens from routing
        metrics: Metric sink. Defaults to structlog metric events.
    """

    def __init__(
        self,
        chain_id: int,
        pool_universe: PoolUniverseSource,
        pool_provider: PoolProvider,
        quote_provider: QuoteProvider,
        token_resolver: TokenResolver,
        gas_price_provider: GasPriceProvider,
        gas_model_factory: GasModelFactory,
        blocked_tokens: BlockedTokenList | None = None,
        metrics: MetricsSink | None = None,
    ) -> None:
        self.chain_id = chain_id
        self.quote_provider = quote_provider
        self.gas_price_provider = gas_price_provider
        self.gas_model_factory = gas_model_factory
        self.token_resolver = token_resolver
        self.metrics = metrics if metrics is not None else DEFAULT_METRICS
        self.curator = PoolCurator(
            pool_universe=pool_universe,
            token_resolver=token_resolver,
            pool_provider=pool_provider,
            blocked_tokens=blocked_tokens,
            metrics=self.metrics,
        )

    async def resolve_token(self, address: str, block_number: int | None = None) -> Token | None:
        """Look up token metadata for an address (None if unknown)."""
        accessor = await self.token_resolver.get_tokens([normalize_address(address)], block_number)
        return accessor.get_token_by_address(normalize_address(address))

    async def route_exact_in(
        self, token_in: Token, token_out: Token, amount_in: int, config: RouterConfig = DEFAULT_CONFIG
    ) -> SwapRoute | None:
        """Best route selling exactly `amount_in` of token_in."""
        return await self.route(token_in, token_out, amount_in, TradeType.EXACT_INPUT, config)

    async def route_exact_out(
        self, token_in: Token, token_out: Token, amount_out: int, config: RouterConfig = DEFAULT_CONFIG
    ) -> SwapRoute | None:
        """Best route buying exactly `amount_out` of token_out."""
        return await self.route(token_in, token_out, amount_out, TradeType.EXACT_OUTPUT, config)

    async def route(
        self,
        token_in: Token,
        token_out: Token,
        amount: int,
        trade_type: TradeType,
        config: RouterConfig = DEFAULT_CONFIG,
    ) -> SwapRoute | None:
        """Find the best route for a swap.

        Args:
            token_in: Token sold
            token_out: Token bought
            amount: Raw amount of token_in (exact input) or token_out (exact output)
            trade_type: Exact input or exact output
            config: Search limits

        Returns:
            The best SwapRoute, or None if no route could be found

        Raises:
            ConfigError: If the config is invalid (before any provider call)
            ValueError: If amount is not positive
            UnsupportedSplitDegreeError: If config.max_splits exceeds 3
        """
        config.validate()
        if amount <= 0:
            raise ValueError(f"amount must be positive, got {amount}")

        percents, amounts = get_amount_distribution(amount, config.distribution_percent)
        quote_token = token_out if trade_type == TradeType.EXACT_INPUT else token_in

        logger.info(
            "routing_request",
            token_in=str(token_in),
            token_out=str(token_out),
            amount=amount,
            trade_type=trade_type.value,
            block_number=config.block_number,
        )

        candidates, gas_price_wei = await asyncio.gather(
            self.curator.get_pools_to_consider(token_in, token_out, trade_type, config),
            self._get_gas_price(),
        )
        pool_accessor = candidates.pool_accessor

        gas_model = self.gas_model_factory.build_gas_model(
            chain_id=self.chain_id,
            gas_price_wei=gas_price_wei,
            pool_accessor=pool_accessor,
            quote_token=quote_token,
        )

        routes = compute_all_routes(token_in, token_out, pool_accessor.get_all_pools(), config.max_swaps_per_path)
        if not routes:
            logger.info(
                "no_routes_found",
                token_in=str(token_in),
                token_out=str(token_out),
                max_hops=config.max_swaps_per_path,
            )
            return None

        raw_amounts = [to_raw_amount(part) for part in amounts]
        with timed(self.metrics, "QuotesLoad"):
            if trade_type == TradeType.EXACT_INPUT:
                batch = await self.quote_provider.get_quotes_exact_in(raw_amounts, routes, config.block_number)
            else:
                batch = await self.quote_provider.get_quotes_exact_out(raw_amounts, routes, config.block_number)

        quotes_fetched = sum(len(quotes) for _, quotes in batch.routes_with_quotes)
        self.metrics.put_metric("QuotesFetched", quotes_fetched, MetricUnit.COUNT)

        with timed(self.metrics, "FindBestSwapRoute"):
            percent_to_quotes = build_percent_to_quotes(
                percents,
                batch.routes_with_quotes,
                gas_model,
                quote_token,
                trade_type,
                metrics=self.metrics,
            )
            optimizer = SplitOptimizer(trade_type, max_splits=config.max_splits, metrics=self.metrics)
            best_swap = optimizer.get_best_swap_route_by(percent_to_quotes, percents)

        if best_swap is None:
            return None

        swap_route = assemble_swap_route(
            best_swap,
            amount,
            trade_type,
            gas_price_wei=gas_price_wei,
            block_number=batch.block_number,
        )
        emit_pool_selection_metrics(swap_route, candidates.pools_by_selection, self.metrics)
        return swap_route

    async def _get_gas_price(self) -> int:
        with timed(self.metrics, "GasPriceLoad"):
            return await self.gas_price_provider.get_gas_price()


__all__ = ["SplitRouter"]
