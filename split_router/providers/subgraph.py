"""Pool universe fetched from a Uniswap V3 subgraph.

Pages through every pool ordered by id (`id_gt` cursor). Transport and
GraphQL errors propagate: the router does not retry or degrade.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import httpx
import structlog

from split_router.models.entities import PoolSummary, pool_key
from split_router.models.types import normalize_address
from split_router.providers.static import StaticTokenAccessor, StaticTokenResolver

logger = structlog.get_logger()

DEFAULT_PAGE_SIZE = 1000

_POOL_FIELDS = """
    id
    feeTier
    liquidity
    sqrtPrice
    tick
    totalValueLockedUSD
    token0 { id symbol decimals }
    token1 { id symbol decimals }
"""

POOLS_QUERY = f"""
query getPools($pageSize: Int!, $id: String!) {{
  pools(first: $pageSize, orderBy: id, where: {{ id_gt: $id }}) {{{_POOL_FIELDS}}}
}}
"""

POOLS_AT_BLOCK_QUERY = f"""
query getPools($pageSize: Int!, $id: String!, $blockNumber: Int!) {{
  pools(first: $pageSize, orderBy: id, where: {{ id_gt: $id }}, block: {{ number: $blockNumber }}) {{{_POOL_FIELDS}}}
}}
"""


class SubgraphError(RuntimeError):
    """The subgraph answered with GraphQL errors."""

    pass


class SubgraphPoolUniverse:
    """Pool universe source backed by a GraphQL subgraph endpoint.

    The most recent fetch is kept so SnapshotPoolProvider can materialize
    pool state without a second round trip.

    Args:
        url: Subgraph HTTP endpoint
        page_size: Pools per GraphQL page
        timeout: HTTP timeout in seconds
        transport: Optional httpx transport (tests inject httpx.MockTransport)
    """

    def __init__(
        self,
        url: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.url = url
        self.page_size = page_size
        self.timeout = timeout
        self._transport = transport
        self._last_by_key: dict[tuple[str, str, int], PoolSummary] = {}

    async def get_pools(self, block_number: int | None = None) -> list[PoolSummary]:
        pools: list[PoolSummary] = []
        cursor = ""
        pages = 0

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            while True:
                records = await self._fetch_page(client, cursor, block_number)
                pages += 1
                pools.extend(PoolSummary.model_validate(record) for record in records)
                if len(records) < self.page_size:
                    break
                cursor = records[-1]["id"]

        logger.info(
            "subgraph_pools_fetched",
            pools=len(pools),
            pages=pages,
            block_number=block_number,
        )
        self._last_by_key = {pool.key: pool for pool in pools}
        return pools

    def find_summary(self, token_a: str, token_b: str, fee: int) -> PoolSummary | None:
        return self._last_by_key.get(pool_key(token_a, token_b, fee))

    def last_pools(self) -> list[PoolSummary]:
        """Pools returned by the most recent fetch (empty before the first)."""
        return list(self._last_by_key.values())

    async def _fetch_page(
        self,
        client: httpx.AsyncClient,
        cursor: str,
        block_number: int | None,
    ) -> list[dict[str, Any]]:
        variables: dict[str, Any] = {"pageSize": self.page_size, "id": cursor}
        if block_number is None:
            query = POOLS_QUERY
        else:
            query = POOLS_AT_BLOCK_QUERY
            variables["blockNumber"] = block_number

        response = await client.post(self.url, json={"query": query, "variables": variables})
        response.raise_for_status()
        payload = response.json()

        if payload.get("errors"):
            raise SubgraphError(f"Subgraph query failed: {payload['errors']}")

        return payload["data"]["pools"]


class SubgraphTokenResolver:
    """Token resolver over the token metadata embedded in subgraph pools.

    Answers from the pools of the latest universe fetch. When nothing has
    been fetched yet, or a requested token is missing from that fetch (listed
    since), the universe is fetched again before answering.
    """

    def __init__(self, universe: SubgraphPoolUniverse) -> None:
        self.universe = universe

    async def get_tokens(
        self, addresses: Iterable[str], block_number: int | None = None
    ) -> StaticTokenAccessor:
        requested = {normalize_address(address) for address in addresses}
        pools = self.universe.last_pools()
        if pools:
            accessor = await StaticTokenResolver.from_pool_summaries(pools).get_tokens(requested, block_number)
            found = len(accessor.get_all_tokens())
            if found == len(requested):
                return accessor
            logger.info("token_resolver_refresh", requested=len(requested), found=found)

        pools = await self.universe.get_pools(block_number)
        return await StaticTokenResolver.from_pool_summaries(pools).get_tokens(requested, block_number)


__all__ = ["SubgraphError", "SubgraphPoolUniverse", "SubgraphTokenResolver"]
