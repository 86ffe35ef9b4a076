"""Aggregation of the winning split into a SwapRoute."""

from __future__ import annotations

from collections.abc import Sequence
from fractions import Fraction

import structlog

from split_router.metrics import DEFAULT_METRICS, MetricsSink, MetricUnit
from split_router.models.entities import TradeType
from split_router.routing.candidates import PoolsBySelection
from split_router.routing.types import (
    RouteAmount,
    RouteWithValidQuote,
    SwapRoute,
    route_amounts_to_string,
)

logger = structlog.get_logger()


def reconcile_amounts(route_amounts: list[RouteAmount], total: int) -> int:
    """Top up the last leg so the legs add up to `total` exactly.

    Legs are quoted at floored percent-of-total amounts, so their sum can fall
    short of the requested total by a few raw units. The shortfall goes to the
    last (smallest) leg.

    Returns:
        The amount added (0 when nothing was missing)
    """
    if not route_amounts:
        return 0
    missing = total - sum(ra.amount for ra in route_amounts)
    if missing > 0:
        route_amounts[-1].amount += missing
    return max(missing, 0)


def assemble_swap_route(
    best_swap: Sequence[RouteWithValidQuote],
    amount: int,
    trade_type: TradeType,
    gas_price_wei: int = 0,
    block_number: int | None = None,
) -> SwapRoute:
    """Sum the winning split and build its per-route breakdown.

    Args:
        best_swap: Route quotes of the chosen split
        amount: Requested total in raw units of the amount token
        trade_type: Exact input or exact output
        gas_price_wei: Gas price the quotes were adjusted with
        block_number: Block the quotes were taken at

    Returns:
        SwapRoute with route amounts ordered by descending amount, summing to
        `amount`
    """
    if not best_swap:
        raise ValueError("Cannot assemble a swap route from an empty split")

    quote = sum(rq.quote for rq in best_swap)
    quote_gas_adjusted = sum((rq.quote_adjusted_for_gas for rq in best_swap), Fraction(0))
    estimated_gas_used = sum(rq.gas_estimate for rq in best_swap)
    gas_cost_in_token = sum((rq.gas_cost_in_token for rq in best_swap), Fraction(0))
    gas_cost_in_usd = sum((rq.gas_cost_in_usd for rq in best_swap), Fraction(0))

    ordered = sorted(best_swap, key=lambda rq: -rq.amount)
    route_amounts = [
        RouteAmount(
            route=rq.route,
            amount=rq.amount,
            quote=rq.quote,
            quote_gas_adjusted=rq.quote_adjusted_for_gas,
            percentage=rq.percent,
            estimated_gas_used=rq.gas_estimate,
            estimated_gas_used_quote_token=rq.gas_cost_in_token,
            estimated_gas_used_usd=rq.gas_cost_in_usd,
        )
        for rq in ordered
    ]

    missing = reconcile_amounts(route_amounts, amount)
    if missing:
        logger.info(
            "route_amounts_reconciled",
            missing=missing,
            total=amount,
            last_route=str(route_amounts[-1].route),
        )

    pool_addresses_used = frozenset(address for rq in best_swap for address in rq.pool_addresses)

    logger.info(
        "found_best_swap_route",
        routes=route_amounts_to_string(route_amounts),
        num_splits=len(route_amounts),
        amount=amount,
        quote=quote,
        quote_gas_adjusted=float(quote_gas_adjusted),
        estimated_gas_used=estimated_gas_used,
        estimated_gas_used_quote_token=float(gas_cost_in_token),
        estimated_gas_used_usd=float(gas_cost_in_usd),
    )

    if len(best_swap) == 1:
        # Inputs for tuning the gas model offline against on-chain gas usage
        single = best_swap[0]
        logger.info(
            "gas_model_inputs",
            estimated_gas_used=single.gas_estimate,
            quoter_gas_estimate=single.quoter_gas_estimate,
            ticks_crossed=sum(single.initialized_ticks_crossed_list),
            num_pools=single.route.hops,
            trade_type=trade_type.value,
        )

    return SwapRoute(
        quote=quote,
        quote_gas_adjusted=quote_gas_adjusted,
        estimated_gas_used=estimated_gas_used,
        estimated_gas_used_quote_token=gas_cost_in_token,
        estimated_gas_used_usd=gas_cost_in_usd,
        route_amounts=route_amounts,
        trade_type=trade_type,
        gas_price_wei=gas_price_wei,
        block_number=block_number,
        pool_addresses_used=pool_addresses_used,
    )


def pool_selection_depths(swap_route: SwapRoute, pools_by_selection: PoolsBySelection) -> dict[str, int]:
    """For each selection bucket, the position (1-based) of the last pool used.

    0 means the winning split uses no pool from that bucket. High values hint
    that a bucket's top-N limit is cutting off useful pools.
    """
    used = swap_route.pool_addresses_used
    depths: dict[str, int] = {}
    for name, pools in pools_by_selection.items():
        depth = 0
        for index, pool in enumerate(pools):
            if pool.id in used:
                depth = index + 1
        depths[name] = depth
    return depths


def emit_pool_selection_metrics(
    swap_route: SwapRoute,
    pools_by_selection: PoolsBySelection,
    metrics: MetricsSink = DEFAULT_METRICS,
) -> dict[str, int]:
    """Emit one count metric per selection bucket (see pool_selection_depths)."""
    depths = pool_selection_depths(swap_route, pools_by_selection)
    for name, depth in depths.items():
        metrics.put_metric(name, depth, MetricUnit.COUNT)
    return depths


__all__ = [
    "assemble_swap_route",
    "emit_pool_selection_metrics",
    "pool_selection_depths",
    "reconcile_amounts",
]
