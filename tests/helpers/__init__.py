"""Test helpers module for shared test utilities.

- constants: Tokens and prices
- fakes: In-memory quote provider, gas model and friends
- factories: Pool, route and quote factory functions
"""

from tests.helpers.constants import (
    DAI,
    ONE_WETH,
    PARITY_SQRT_PRICE,
    TOKEN_UNKNOWN,
    TOKEN_X,
    TOKEN_Y,
    TOKEN_Z,
    USDC,
    USDC_WETH_SQRT_PRICE,
    USDT,
    WBTC,
    WETH,
)
from tests.helpers.factories import make_pool, make_raw_quote, make_route, make_route_quote, make_summary
from tests.helpers.fakes import (
    ExplodingPoolUniverse,
    FailingQuoteProvider,
    FakeGasModel,
    FakeGasModelFactory,
    FakeQuoteProvider,
)

__all__ = [
    # Constants
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
    # Fakes
    "ExplodingPoolUniverse",
    "FailingQuoteProvider",
    "FakeGasModel",
    "FakeGasModelFactory",
    "FakeQuoteProvider",
    # Factories
    "make_pool",
    "make_raw_quote",
    "make_route",
    "make_route_quote",
    "make_summary",
]
