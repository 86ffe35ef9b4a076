"""Pool graph and route enumeration.

Routes are enumerated exhaustively over the curated pool set: every simple
pool sequence of 1..max_hops pools leading from token_in to token_out. The
search is exponential in the size of the pool set, which is why the curator
keeps that set small.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from split_router.models.entities import Token, TradablePool
from split_router.routing.types import Route, route_to_string

logger = structlog.get_logger()


class PoolGraph:
    """Graph of tokens connected by pools.

    Adjacency maps a token address to the indices of the pools that trade it,
    in the order the pools were given. Iterating the adjacency list therefore
    visits pools in the same order as scanning the whole pool list would.
    """

    def __init__(self, pools: Sequence[TradablePool]) -> None:
        """Index the given pools by the tokens they trade."""
        self.pools = list(pools)
        self._adjacency: dict[str, list[int]] = {}
        for index, pool in enumerate(self.pools):
            self._adjacency.setdefault(pool.token0.address, []).append(index)
            self._adjacency.setdefault(pool.token1.address, []).append(index)

    def pools_touching(self, token: Token) -> list[int]:
        """Indices of pools trading `token`."""
        return self._adjacency.get(token.address, [])

    def has_token(self, token: Token) -> bool:
        return token.address in self._adjacency


class PathFinder:
    """Depth-first route enumeration over a pool graph.

    Usage:
        finder = PathFinder(pools)
        routes = finder.compute_all_routes(token_in, token_out, max_hops=3)
    """

    def __init__(self, pools: Sequence[TradablePool]) -> None:
        self.graph = PoolGraph(pools)

    def compute_all_routes(self, token_in: Token, token_out: Token, max_hops: int) -> list[Route]:
        """Enumerate every route from token_in to token_out.

        A route is recorded as soon as its last pool trades token_out; that
        branch is not extended further. No pool is used twice within a route.

        Args:
            token_in: Starting token
            token_out: Target token
            max_hops: Maximum number of pools per route

        Returns:
            Routes in discovery order. Empty if none exist within max_hops.
        """
        if token_in == token_out or max_hops < 1:
            return []
        if not self.graph.has_token(token_in) or not self.graph.has_token(token_out):
            logger.info(
                "route_tokens_not_in_pools",
                token_in=str(token_in),
                token_out=str(token_out),
                pools=len(self.graph.pools),
            )
            return []

        routes: list[Route] = []
        current: list[TradablePool] = []
        used: set[int] = set()

        def extend(frontier: Token) -> None:
            if current and current[-1].involves_token(token_out):
                routes.append(Route(pools=tuple(current), token_in=token_in, token_out=token_out))
                return
            if len(current) >= max_hops:
                return

            for index in self.graph.pools_touching(frontier):
                if index in used:
                    continue
                pool = self.graph.pools[index]
                current.append(pool)
                used.add(index)
                extend(pool.other_token(frontier))
                used.discard(index)
                current.pop()

        extend(token_in)

        logger.info(
            "computed_routes",
            count=len(routes),
            routes=[route_to_string(route) for route in routes],
        )
        return routes


def compute_all_routes(
    token_in: Token, token_out: Token, pools: Sequence[TradablePool], max_hops: int
) -> list[Route]:
    """Convenience wrapper: enumerate routes over `pools`."""
    return PathFinder(pools).compute_all_routes(token_in, token_out, max_hops)


__all__ = ["PathFinder", "PoolGraph", "compute_all_routes"]
