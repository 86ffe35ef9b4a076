"""Candidate pool selection.

The pool universe holds thousands of pools; route enumeration is exponential
in the number of pools it is given. The curator picks a small, high-signal
subset by unioning several TVL-ranked selections ("buckets"):

1. Top pools pairing each base token with token in, and with token out.
2. Up to 2 direct token in/token out pools.
3. One native/quote-token pool, so gas can be priced in the quote token.
4. Top pools by TVL overall.
5. Top pools touching token in, and touching token out.
6. Top pools one hop further from the tokens found in (5).

Buckets after (3) skip pools already picked by earlier buckets. The bucket
contents are kept so the router can report how deep into each bucket the
winning split reached.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING

import structlog

from split_router.config import RouterConfig
from split_router.constants import BASE_TOKENS, NATIVE_SYMBOLS, WETH
from split_router.metrics import DEFAULT_METRICS, MetricsSink, timed
from split_router.models.entities import PoolSummary, Token, TradeType

if TYPE_CHECKING:
    from split_router.providers.base import (
        BlockedTokenList,
        PoolAccessor,
        PoolProvider,
        PoolUniverseSource,
        TokenResolver,
    )

logger = structlog.get_logger()


def _by_tvl(pools: Iterable[PoolSummary]) -> list[PoolSummary]:
    """Sort by descending TVL (stable for equal TVL)."""
    return sorted(pools, key=lambda pool: -pool.tvl_usd)


def _unique_by_id(pools: Iterable[PoolSummary]) -> list[PoolSummary]:
    seen: set[str] = set()
    unique: list[PoolSummary] = []
    for pool in pools:
        if pool.id not in seen:
            seen.add(pool.id)
            unique.append(pool)
    return unique


@dataclass(frozen=True)
class PoolsBySelection:
    """Pools chosen by each selection bucket, in TVL order."""

    top_by_base_with_token_in: list[PoolSummary]
    top_by_base_with_token_out: list[PoolSummary]
    top2_direct_swap_pool: list[PoolSummary]
    top2_eth_quote_token_pool: list[PoolSummary]
    top_by_tvl: list[PoolSummary]
    top_by_tvl_using_token_in: list[PoolSummary]
    top_by_tvl_using_token_out: list[PoolSummary]
    top_by_tvl_using_token_in_second_hops: list[PoolSummary]
    top_by_tvl_using_token_out_second_hops: list[PoolSummary]

    def items(self) -> list[tuple[str, list[PoolSummary]]]:
        """(bucket name, pools) pairs in union order."""
        return [(field.name, getattr(self, field.name)) for field in fields(self)]

    def all_pools(self) -> list[PoolSummary]:
        """Union of every bucket, deduplicated by pool id, in bucket order."""
        return _unique_by_id(pool for _, pools in self.items() for pool in pools)


@dataclass(frozen=True)
class CandidatePools:
    """Materialized candidate set plus the buckets it came from."""

    pool_accessor: PoolAccessor
    pools_by_selection: PoolsBySelection


def select_candidate_pools(
    pools: Sequence[PoolSummary],
    token_in: Token,
    token_out: Token,
    trade_type: TradeType,
    config: RouterConfig,
    base_tokens: Sequence[Token] = BASE_TOKENS,
    native_token: Token = WETH,
) -> PoolsBySelection:
    """Run every selection bucket over an (already unblocked) pool universe.

    Args:
        pools: Pool universe with blocked tokens removed
        token_in: Input token
        token_out: Output token
        trade_type: Exact input or exact output
        config: Top-N limits
        base_tokens: Major quote assets for indirect paths
        native_token: Wrapped native asset gas is paid in

    Returns:
        The pools picked by each bucket
    """
    token_in_address = token_in.address
    token_out_address = token_out.address
    sorted_pools = _by_tvl(pools)

    chosen: set[str] = set()

    def remember(selected: Iterable[PoolSummary]) -> None:
        chosen.update(pool.id for pool in selected)

    def top(predicate: Callable[[PoolSummary], bool], limit: int) -> list[PoolSummary]:
        return [pool for pool in sorted_pools if predicate(pool)][:limit]

    def top_with_base_tokens(address: str) -> list[PoolSummary]:
        per_base: list[PoolSummary] = []
        for base in base_tokens:
            per_base.extend(
                top(
                    lambda pool, base_address=base.address: pool.connects(base_address, address),
                    config.top_n_with_each_base_token,
                )
            )
        return _by_tvl(per_base)[: config.top_n_with_base_token]

    top_by_base_with_token_in = top_with_base_tokens(token_in_address)
    top_by_base_with_token_out = top_with_base_tokens(token_out_address)

    if config.top_n_with_base_token_in_set:
        remember(top_by_base_with_token_in)
        remember(top_by_base_with_token_out)

    top2_direct_swap_pool = top(
        lambda pool: pool.id not in chosen and pool.connects(token_in_address, token_out_address),
        2,
    )
    remember(top2_direct_swap_pool)

    # Needed to price gas in the quote token. Does not consult the chosen set:
    # one native pool is enough even if an earlier bucket already holds one.
    top2_eth_quote_token_pool: list[PoolSummary] = []
    if (token_out.symbol or "") not in NATIVE_SYMBOLS:
        quote_side = token_out_address if trade_type == TradeType.EXACT_INPUT else token_in_address
        top2_eth_quote_token_pool = top(
            lambda pool: pool.connects(native_token.address, quote_side),
            1,
        )
    remember(top2_eth_quote_token_pool)

    top_by_tvl = top(lambda pool: pool.id not in chosen, config.top_n)
    remember(top_by_tvl)

    top_by_tvl_using_token_in = top(
        lambda pool: pool.id not in chosen and pool.involves(token_in_address),
        config.top_n_token_in_out,
    )
    remember(top_by_tvl_using_token_in)

    top_by_tvl_using_token_out = top(
        lambda pool: pool.id not in chosen and pool.involves(token_out_address),
        config.top_n_token_in_out,
    )
    remember(top_by_tvl_using_token_out)

    def second_hops(first_hops: list[PoolSummary], address: str) -> list[PoolSummary]:
        selected: list[PoolSummary] = []
        for pool in first_hops:
            second_hop_address = pool.other_token_id(address)
            selected.extend(
                top(
                    lambda p, hop=second_hop_address: p.id not in chosen and p.involves(hop),
                    config.top_n_second_hop,
                )
            )
        return _by_tvl(_unique_by_id(selected))[: config.top_n_second_hop]

    top_by_tvl_using_token_in_second_hops = second_hops(top_by_tvl_using_token_in, token_in_address)
    remember(top_by_tvl_using_token_in_second_hops)

    top_by_tvl_using_token_out_second_hops = second_hops(top_by_tvl_using_token_out, token_out_address)
    remember(top_by_tvl_using_token_out_second_hops)

    selection = PoolsBySelection(
        top_by_base_with_token_in=top_by_base_with_token_in,
        top_by_base_with_token_out=top_by_base_with_token_out,
        top2_direct_swap_pool=top2_direct_swap_pool,
        top2_eth_quote_token_pool=top2_eth_quote_token_pool,
        top_by_tvl=top_by_tvl,
        top_by_tvl_using_token_in=top_by_tvl_using_token_in,
        top_by_tvl_using_token_out=top_by_tvl_using_token_out,
        top_by_tvl_using_token_in_second_hops=top_by_tvl_using_token_in_second_hops,
        top_by_tvl_using_token_out_second_hops=top_by_tvl_using_token_out_second_hops,
    )

    logger.info(
        "pools_for_consideration",
        top_n=config.top_n,
        top_n_token_in_out=config.top_n_token_in_out,
        top_n_second_hop=config.top_n_second_hop,
        **{name: [str(pool) for pool in bucket] for name, bucket in selection.items()},
    )
    return selection


class PoolCurator:
    """Fetches the pool universe and reduces it to a routable candidate set.

    Args:
        pool_universe: Source of every known pool
        token_resolver: Token metadata lookup
        pool_provider: Materializes (token, token, fee) into tradable pools
        blocked_tokens: Optional policy; pools touching a blocked token are ignored
        metrics: Metric sink for load timings
    """

    def __init__(
        self,
        pool_universe: PoolUniverseSource,
        token_resolver: TokenResolver,
        pool_provider: PoolProvider,
        blocked_tokens: BlockedTokenList | None = None,
        metrics: MetricsSink = DEFAULT_METRICS,
    ) -> None:
        self.pool_universe = pool_universe
        self.token_resolver = token_resolver
        self.pool_provider = pool_provider
        self.blocked_tokens = blocked_tokens
        self.metrics = metrics

    async def get_pools_to_consider(
        self,
        token_in: Token,
        token_out: Token,
        trade_type: TradeType,
        config: RouterConfig,
    ) -> CandidatePools:
        """Select, resolve and materialize the candidate pools for one call."""
        with timed(self.metrics, "SubgraphPoolsLoad"):
            all_pools = await self.pool_universe.get_pools(config.block_number)

        allowed = [pool for pool in all_pools if not self._is_blocked(pool)]
        if len(allowed) < len(all_pools):
            logger.debug("blocked_pools_removed", count=len(all_pools) - len(allowed))

        selection = select_candidate_pools(allowed, token_in, token_out, trade_type, config)
        candidates = selection.all_pools()

        token_addresses = _unique_addresses(
            address for pool in candidates for address in (pool.token0.id, pool.token1.id)
        )
        logger.info("resolving_candidate_tokens", tokens=len(token_addresses))
        token_accessor = await self.token_resolver.get_tokens(token_addresses, config.block_number)

        token_pairs: list[tuple[Token, Token, int]] = []
        for pool in candidates:
            token_a = token_accessor.get_token_by_address(pool.token0.id)
            token_b = token_accessor.get_token_by_address(pool.token1.id)
            if token_a is None or token_b is None:
                missing = pool.token1 if token_a is not None else pool.token0
                logger.warning(
                    "dropping_candidate_pool",
                    pool=str(pool),
                    missing_token=missing.symbol or missing.id,
                    message="Token not found by token resolver",
                )
                continue
            token_pairs.append((token_a, token_b, pool.fee_tier))

        with timed(self.metrics, "PoolsLoad"):
            pool_accessor = await self.pool_provider.get_pools(token_pairs)

        return CandidatePools(pool_accessor=pool_accessor, pools_by_selection=selection)

    def _is_blocked(self, pool: PoolSummary) -> bool:
        if self.blocked_tokens is None:
            return False
        return self.blocked_tokens.is_blocked(pool.token0.id) or self.blocked_tokens.is_blocked(pool.token1.id)


def _unique_addresses(addresses: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(addresses))


__all__ = [
    "CandidatePools",
    "PoolCurator",
    "PoolsBySelection",
    "select_candidate_pools",
]
