"""Split Router - best-execution swap routing across Uniswap V3 pools."""

from split_router.config import DEFAULT_CONFIG, RouterConfig
from split_router.models.entities import Token, TradeType
from split_router.routing.router import SplitRouter
from split_router.routing.types import SwapRoute

__version__ = "0.1.0"
__all__ = ["DEFAULT_CONFIG", "RouterConfig", "SplitRouter", "SwapRoute", "Token", "TradeType", "__version__"]
