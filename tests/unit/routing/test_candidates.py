"""Tests for candidate pool selection and curation."""

import asyncio

from split_router.config import DEFAULT_CONFIG, RouterConfig
from split_router.metrics import RecordingMetrics
from split_router.models.entities import TradeType
from split_router.providers.pools import SnapshotPoolProvider
from split_router.providers.static import (
    StaticBlockedTokenList,
    StaticPoolUniverse,
    StaticTokenResolver,
)
from split_router.routing.candidates import PoolCurator, select_candidate_pools
from tests.helpers import DAI, TOKEN_X, TOKEN_Y, TOKEN_Z, USDC, WETH, make_summary

# Only the bucket under test selects anything
NOTHING = RouterConfig(
    top_n=0,
    top_n_token_in_out=0,
    top_n_second_hop=0,
    top_n_with_each_base_token=0,
    top_n_with_base_token=0,
)


class TestDirectPools:
    def test_top_two_by_tvl(self) -> None:
        low = make_summary(TOKEN_X, TOKEN_Y, 500, tvl_usd=100.0)
        medium = make_summary(TOKEN_X, TOKEN_Y, 3000, tvl_usd=300.0)
        high = make_summary(TOKEN_X, TOKEN_Y, 10000, tvl_usd=200.0)

        selection = select_candidate_pools([low, medium, high], TOKEN_X, TOKEN_Y, TradeType.EXACT_INPUT, NOTHING)

        assert selection.top2_direct_swap_pool == [medium, high]

    def test_direct_pools_excluded_from_top_by_tvl(self) -> None:
        direct = make_summary(TOKEN_X, TOKEN_Y, 500, tvl_usd=1000.0)
        other = make_summary(TOKEN_Z, USDC, 500, tvl_usd=10.0)
        config = RouterConfig(top_n=4, top_n_token_in_out=0, top_n_second_hop=0)

        selection = select_candidate_pools([direct, other], TOKEN_X, TOKEN_Y, TradeType.EXACT_INPUT, config)

        assert selection.top2_direct_swap_pool == [direct]
        assert selection.top_by_tvl == [other]


class TestNativeQuotePool:
    def setup_method(self) -> None:
        self.weth_y = make_summary(WETH, TOKEN_Y, 3000, tvl_usd=10.0)
        self.weth_x = make_summary(WETH, TOKEN_X, 3000, tvl_usd=20.0)
        self.pools = [self.weth_y, self.weth_x]

    def test_exact_input_pairs_native_with_token_out(self) -> None:
        selection = select_candidate_pools(self.pools, TOKEN_X, TOKEN_Y, TradeType.EXACT_INPUT, NOTHING)
        assert selection.top2_eth_quote_token_pool == [self.weth_y]

    def test_exact_output_pairs_native_with_token_in(self) -> None:
        selection = select_candidate_pools(self.pools, TOKEN_X, TOKEN_Y, TradeType.EXACT_OUTPUT, NOTHING)
        assert selection.top2_eth_quote_token_pool == [self.weth_x]

    def test_skipped_when_buying_native(self) -> None:
        selection = select_candidate_pools(self.pools, TOKEN_X, WETH, TradeType.EXACT_INPUT, NOTHING)
        assert selection.top2_eth_quote_token_pool == []

    def test_ignores_chosen_set(self) -> None:
        """A native pool already picked as a direct pool is picked again."""
        selection = select_candidate_pools(self.pools, WETH, TOKEN_Y, TradeType.EXACT_INPUT, NOTHING)

        assert selection.top2_direct_swap_pool == [self.weth_y]
        assert selection.top2_eth_quote_token_pool == [self.weth_y]
        assert selection.all_pools() == [self.weth_y]


class TestBaseTokenPools:
    def setup_method(self) -> None:
        self.x_usdc = make_summary(TOKEN_X, USDC, 500, tvl_usd=500.0)
        self.x_dai = make_summary(TOKEN_X, DAI, 500, tvl_usd=400.0)
        self.y_weth = make_summary(TOKEN_Y, WETH, 500, tvl_usd=50.0)
        self.pools = [self.x_usdc, self.x_dai, self.y_weth]

    def test_per_side_selection(self) -> None:
        config = RouterConfig(top_n=0, top_n_token_in_out=0, top_n_second_hop=0)

        selection = select_candidate_pools(self.pools, TOKEN_X, TOKEN_Y, TradeType.EXACT_INPUT, config)

        assert selection.top_by_base_with_token_in == [self.x_usdc, self.x_dai]
        assert selection.top_by_base_with_token_out == [self.y_weth]

    def test_cap_after_merge(self) -> None:
        config = RouterConfig(top_n=0, top_n_token_in_out=0, top_n_second_hop=0, top_n_with_base_token=1)

        selection = select_candidate_pools(self.pools, TOKEN_X, TOKEN_Y, TradeType.EXACT_INPUT, config)

        assert selection.top_by_base_with_token_in == [self.x_usdc]

    def test_not_remembered_by_default(self) -> None:
        config = RouterConfig(top_n=1, top_n_token_in_out=0, top_n_second_hop=0)

        selection = select_candidate_pools(self.pools, TOKEN_X, TOKEN_Y, TradeType.EXACT_INPUT, config)

        assert selection.top_by_tvl == [self.x_usdc]

    def test_remembered_when_in_set(self) -> None:
        config = RouterConfig(top_n=1, top_n_token_in_out=0, top_n_second_hop=0, top_n_with_base_token_in_set=True)
        extra = make_summary(TOKEN_Z, TOKEN_Y, 500, tvl_usd=1.0)

        selection = select_candidate_pools(
            [*self.pools, extra], TOKEN_X, TOKEN_Y, TradeType.EXACT_INPUT, config
        )

        assert selection.top_by_tvl == [extra]


class TestSecondHops:
    def test_second_hop_pools(self) -> None:
        x_z = make_summary(TOKEN_X, TOKEN_Z, 3000, tvl_usd=50.0)
        z_usdc = make_summary(TOKEN_Z, USDC, 3000, tvl_usd=40.0)
        z_weth = make_summary(TOKEN_Z, WETH, 3000, tvl_usd=30.0)
        z_dai = make_summary(TOKEN_Z, DAI, 3000, tvl_usd=20.0)
        config = RouterConfig(
            top_n=0,
            top_n_token_in_out=1,
            top_n_second_hop=2,
            top_n_with_each_base_token=0,
            top_n_with_base_token=0,
        )

        selection = select_candidate_pools(
            [z_dai, x_z, z_weth, z_usdc], TOKEN_X, TOKEN_Y, TradeType.EXACT_INPUT, config
        )

        assert selection.top_by_tvl_using_token_in == [x_z]
        assert selection.top_by_tvl_using_token_in_second_hops == [z_usdc, z_weth]
        assert selection.top_by_tvl_using_token_out == []
        assert selection.top_by_tvl_using_token_out_second_hops == []


class TestPoolsBySelection:
    def test_bucket_order_and_dedup(self) -> None:
        direct = make_summary(TOKEN_X, TOKEN_Y, 500, tvl_usd=100.0)
        native = make_summary(WETH, TOKEN_Y, 500, tvl_usd=90.0)

        selection = select_candidate_pools([native, direct], TOKEN_X, TOKEN_Y, TradeType.EXACT_INPUT, DEFAULT_CONFIG)
        names = [name for name, _ in selection.items()]

        assert names[0] == "top_by_base_with_token_in"
        assert names[-1] == "top_by_tvl_using_token_out_second_hops"
        assert len(names) == 9
        all_ids = [pool.id for pool in selection.all_pools()]
        assert len(all_ids) == len(set(all_ids))
        assert set(all_ids) == {direct.id, native.id}


class TestPoolCurator:
    def setup_method(self) -> None:
        self.x_y = make_summary(TOKEN_X, TOKEN_Y, 500, tvl_usd=100.0)
        self.x_z = make_summary(TOKEN_X, TOKEN_Z, 500, tvl_usd=90.0)
        self.z_y = make_summary(TOKEN_Z, TOKEN_Y, 500, tvl_usd=80.0)
        self.pools = [self.x_y, self.x_z, self.z_y]
        self.universe = StaticPoolUniverse(self.pools)
        self.metrics = RecordingMetrics()

    def _curate(self, curator: PoolCurator):  # noqa: ANN202
        return asyncio.run(
            curator.get_pools_to_consider(TOKEN_X, TOKEN_Y, TradeType.EXACT_INPUT, DEFAULT_CONFIG)
        )

    def test_materializes_every_candidate(self) -> None:
        curator = PoolCurator(
            self.universe,
            StaticTokenResolver([TOKEN_X, TOKEN_Y, TOKEN_Z]),
            SnapshotPoolProvider(self.universe),
            metrics=self.metrics,
        )

        candidates = self._curate(curator)

        addresses = {pool.address for pool in candidates.pool_accessor.get_all_pools()}
        assert addresses == {self.x_y.id, self.x_z.id, self.z_y.id}
        assert self.metrics.last("SubgraphPoolsLoad") is not None
        assert self.metrics.last("PoolsLoad") is not None

    def test_unresolved_token_drops_pool(self) -> None:
        curator = PoolCurator(
            self.universe,
            StaticTokenResolver([TOKEN_X, TOKEN_Y]),
            SnapshotPoolProvider(self.universe),
            metrics=self.metrics,
        )

        candidates = self._curate(curator)

        addresses = [pool.address for pool in candidates.pool_accessor.get_all_pools()]
        assert addresses == [self.x_y.id]
        # Still recorded as selected, only not materialized
        assert self.x_z in candidates.pools_by_selection.all_pools()

    def test_blocked_token_removed_before_selection(self) -> None:
        curator = PoolCurator(
            self.universe,
            StaticTokenResolver([TOKEN_X, TOKEN_Y, TOKEN_Z]),
            SnapshotPoolProvider(self.universe),
            blocked_tokens=StaticBlockedTokenList([TOKEN_Z.address]),
            metrics=self.metrics,
        )

        candidates = self._curate(curator)

        assert candidates.pools_by_selection.all_pools() == [self.x_y]
        assert len(candidates.pool_accessor.get_all_pools()) == 1

    def test_materialized_state_comes_from_summary(self) -> None:
        curator = PoolCurator(
            self.universe,
            StaticTokenResolver([TOKEN_X, TOKEN_Y, TOKEN_Z]),
            SnapshotPoolProvider(self.universe),
            metrics=self.metrics,
        )

        candidates = self._curate(curator)
        pool = candidates.pool_accessor.get_pool(TOKEN_Y, TOKEN_X, 500)

        assert pool is not None
        assert pool.sqrt_price_x96 == self.x_y.sqrt_price
        assert pool.liquidity == self.x_y.liquidity
