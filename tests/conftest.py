"""Pytest configuration and fixtures."""

from math import isqrt

import pytest

from split_router.constants import V3_FEE_LOW, V3_FEE_LOWEST, V3_FEE_MEDIUM
from split_router.metrics import RecordingMetrics
from split_router.models.entities import PoolSummary
from split_router.providers.gas import HeuristicGasModelFactory
from split_router.providers.pools import SnapshotPoolProvider
from split_router.providers.static import StaticGasPriceProvider, StaticPoolUniverse, StaticTokenResolver
from split_router.routing.router import SplitRouter
from split_router.routing.types import RawQuote, Route
from tests.helpers import (
    DAI,
    PARITY_SQRT_PRICE,
    USDC,
    USDC_WETH_SQRT_PRICE,
    WETH,
    FakeQuoteProvider,
    make_raw_quote,
    make_summary,
)

# Curvature per route, keyed by the first pool's fee tier (deeper pools quote more)
_DEPTH_BY_FIRST_FEE = {V3_FEE_LOW: 4, V3_FEE_MEDIUM: 3}
_MULTI_HOP_DEPTH = 2


def concave_quote(route: Route, amount: int, exact_output: bool) -> RawQuote:
    """Quotes with price impact: output grows with sqrt(amount), input with amount**2.

    Splitting across disjoint routes therefore always helps when gas is free.
    """
    depth = _DEPTH_BY_FIRST_FEE.get(route.pools[0].fee, 1) if route.hops == 1 else _MULTI_HOP_DEPTH
    if amount == 0:
        return make_raw_quote(amount, None)
    if exact_output:
        quote = amount * amount // (depth * 10**12) + 1
    else:
        quote = isqrt(amount * depth * 10**12)
    return make_raw_quote(amount, quote, ticks_crossed=tuple(1 for _ in route.pools))


@pytest.fixture
def mainnet_pools() -> list[PoolSummary]:
    """WETH/USDC at two fee tiers plus a WETH -> DAI -> USDC path."""
    return [
        make_summary(USDC, WETH, V3_FEE_LOW, tvl_usd=300_000_000.0, sqrt_price=USDC_WETH_SQRT_PRICE),
        make_summary(USDC, WETH, V3_FEE_MEDIUM, tvl_usd=150_000_000.0, sqrt_price=USDC_WETH_SQRT_PRICE),
        make_summary(DAI, WETH, V3_FEE_MEDIUM, tvl_usd=80_000_000.0, sqrt_price=PARITY_SQRT_PRICE),
        make_summary(DAI, USDC, V3_FEE_LOWEST, tvl_usd=200_000_000.0, sqrt_price=PARITY_SQRT_PRICE),
    ]


@pytest.fixture
def recording_metrics() -> RecordingMetrics:
    return RecordingMetrics()


@pytest.fixture
def quote_provider() -> FakeQuoteProvider:
    return FakeQuoteProvider(concave_quote)


@pytest.fixture
def split_router(
    mainnet_pools: list[PoolSummary],
    quote_provider: FakeQuoteProvider,
    recording_metrics: RecordingMetrics,
) -> SplitRouter:
    """Router over a static mainnet snapshot with free gas."""
    universe = StaticPoolUniverse(mainnet_pools)
    return SplitRouter(
        chain_id=1,
        pool_universe=universe,
        pool_provider=SnapshotPoolProvider(universe),
        quote_provider=quote_provider,
        token_resolver=StaticTokenResolver.from_pool_summaries(mainnet_pools),
        gas_price_provider=StaticGasPriceProvider(0),
        gas_model_factory=HeuristicGasModelFactory(),
        metrics=recording_metrics,
    )
