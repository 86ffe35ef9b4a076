"""Protocol constants for the split router.

Centralizes well-known addresses and protocol parameters (Ethereum mainnet).
"""

from split_router.models.entities import Token
from split_router.models.types import is_valid_address

MAINNET_CHAIN_ID = 1


def _validate_token_address(name: str, address: str) -> str:
    """Validate and return a token address.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# Well-known token addresses on mainnet (lowercase for consistency)
# All addresses are validated at import time to catch typos early
WETH = Token(_validate_token_address("WETH", "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"), "WETH", 18)
USDC = Token(_validate_token_address("USDC", "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"), "USDC", 6)
USDT = Token(_validate_token_address("USDT", "0xdac17f958d2ee523a2206206994597c13d831ec7"), "USDT", 6)
DAI = Token(_validate_token_address("DAI", "0x6b175474e89094c44da98b954eedeac495271d0f"), "DAI", 18)
WBTC = Token(_validate_token_address("WBTC", "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599"), "WBTC", 8)

# Major quote assets used to discover indirect paths
BASE_TOKENS = (USDC, USDT, WBTC, DAI, WETH)

# Stablecoins used to price gas in USD, in order of preference
USD_TOKENS = (USDC, USDT, DAI)

# Symbols under which the wrapped native asset is listed
NATIVE_SYMBOLS = frozenset({"WETH", "WETH9", "ETH"})

# Uniswap V3 deployment (mainnet)
V3_FACTORY_ADDRESS = "0x1f98431c8ad98523631ae4a59f267346ea31f984"
V3_POOL_INIT_CODE_HASH = "0xe34f199b19b2b4f47f68442619d555527d244f78a3297ea89325f843f87b8b54"
QUOTER_V2_ADDRESS = "0x61fFE014bA17989E743c5F6cB21bF9697530B21e"

# V3 fee tiers in hundredths of a basis point (3000 = 0.3%)
V3_FEE_LOWEST = 100
V3_FEE_LOW = 500
V3_FEE_MEDIUM = 3000

# Heuristic gas model for V3 routes
# gas = BASE_SWAP_COST + COST_PER_HOP * hops + COST_PER_INIT_TICK * ticks crossed
BASE_SWAP_COST = 2_000
COST_PER_HOP = 80_000
COST_PER_INIT_TICK = 31_000
