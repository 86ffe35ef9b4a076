"""Split routing.

Module structure:
- router.py: SplitRouter facade
- types.py: Route, RawQuote, RouteWithValidQuote, RouteAmount, SwapRoute
- candidates.py: Pool curation (selection buckets)
- pathfinding.py: PoolGraph and PathFinder for route enumeration
- distribution.py: Amount ladder
- split.py: Split-route search
- assembly.py: SwapRoute aggregation, reconciliation and selection metrics
"""

from split_router.routing.candidates import CandidatePools, PoolCurator, PoolsBySelection
from split_router.routing.pathfinding import PathFinder, PoolGraph
from split_router.routing.router import SplitRouter
from split_router.routing.split import SplitOptimizer
from split_router.routing.types import (
    RawQuote,
    Route,
    RouteAmount,
    RouteWithValidQuote,
    SwapRoute,
)

__all__ = [
    "CandidatePools",
    "PathFinder",
    "PoolCurator",
    "PoolGraph",
    "PoolsBySelection",
    "RawQuote",
    "Route",
    "RouteAmount",
    "RouteWithValidQuote",
    "SplitOptimizer",
    "SplitRouter",
    "SwapRoute",
]
