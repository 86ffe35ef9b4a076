"""Common test constants: tokens and prices."""

from split_router.constants import DAI, USDC, USDT, WBTC, WETH
from split_router.models.entities import Token

# Synthetic tokens with ordered addresses (X < Y < Z)
TOKEN_X = Token("0x" + "11" * 20, "X", 18)
TOKEN_Y = Token("0x" + "22" * 20, "Y", 18)
TOKEN_Z = Token("0x" + "33" * 20, "Z", 18)
TOKEN_UNKNOWN = Token("0x" + "99" * 20, "UNK", 18)

# sqrtPriceX96 for 1 raw USDC = 4e8 raw WETH, i.e. 1 WETH = 2500 USDC
USDC_WETH_SQRT_PRICE = 20_000 * 2**96

# sqrtPriceX96 for a 1:1 raw-unit price
PARITY_SQRT_PRICE = 2**96

ONE_WETH = 10**18

__all__ = [
    "DAI",
    "ONE_WETH",
    "PARITY_SQRT_PRICE",
    "TOKEN_UNKNOWN",
    "TOKEN_X",
    "TOKEN_Y",
    "TOKEN_Z",
    "USDC",
    "USDC_WETH_SQRT_PRICE",
    "USDT",
    "WBTC",
    "WETH",
]
