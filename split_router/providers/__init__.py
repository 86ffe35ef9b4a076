"""External collaborators of the routing core.

Protocols live in base.py; everything else here is a concrete provider:
- pools.py: canonical pool addresses, pool accessor, snapshot materializer
- static.py: in-memory universe, tokens, blocklist and gas price
- subgraph.py: pool universe from a Uniswap V3 subgraph (httpx)
- quotes.py: batched QuoterV2 quotes (web3)
- gas.py: heuristic gas model and node gas price (web3)
"""

from split_router.providers.base import (
    BlockedTokenList,
    GasModel,
    GasModelFactory,
    GasPriceProvider,
    PoolAccessor,
    PoolProvider,
    PoolUniverseSource,
    QuoteProvider,
    TokenAccessor,
    TokenResolver,
)
from split_router.providers.gas import HeuristicGasModel, HeuristicGasModelFactory, Web3GasPriceProvider
from split_router.providers.pools import SnapshotPoolProvider, StaticPoolAccessor, compute_pool_address
from split_router.providers.quotes import Web3QuoteProvider, encode_route_path
from split_router.providers.static import (
    StaticBlockedTokenList,
    StaticGasPriceProvider,
    StaticPoolUniverse,
    StaticTokenAccessor,
    StaticTokenResolver,
)
from split_router.providers.subgraph import SubgraphError, SubgraphPoolUniverse, SubgraphTokenResolver

__all__ = [
    # Protocols
    "BlockedTokenList",
    "GasModel",
    "GasModelFactory",
    "GasPriceProvider",
    "PoolAccessor",
    "PoolProvider",
    "PoolUniverseSource",
    "QuoteProvider",
    "TokenAccessor",
    "TokenResolver",
    # Implementations
    "HeuristicGasModel",
    "HeuristicGasModelFactory",
    "SnapshotPoolProvider",
    "StaticBlockedTokenList",
    "StaticGasPriceProvider",
    "StaticPoolAccessor",
    "StaticPoolUniverse",
    "StaticTokenAccessor",
    "StaticTokenResolver",
    "SubgraphError",
    "SubgraphPoolUniverse",
    "SubgraphTokenResolver",
    "Web3GasPriceProvider",
    "Web3QuoteProvider",
    "compute_pool_address",
    "encode_route_path",
]
