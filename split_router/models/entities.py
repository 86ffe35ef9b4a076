"""Core entities shared by the curator, the path enumerator and the optimizer.

Tokens and pools are read-only snapshots fetched once per routing call.
PoolSummary is the ranking view served by the pool universe (subgraph);
TradablePool is the materialized view with enough state to price gas.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from fractions import Fraction

from pydantic import BaseModel, Field, field_validator

from split_router.models.types import normalize_address, short_address

Q192 = 2**192


def pool_key(address_a: str, address_b: str, fee: int) -> tuple[str, str, int]:
    """Order-independent (token0, token1, fee) identity of a pool."""
    token_a, token_b = normalize_address(address_a), normalize_address(address_b)
    return (token_a, token_b, fee) if token_a < token_b else (token_b, token_a, fee)


class TradeType(str, Enum):
    """Which side of the trade is fixed."""

    EXACT_INPUT = "exactIn"
    EXACT_OUTPUT = "exactOut"


@dataclass(frozen=True)
class Token:
    """ERC20 token metadata.

    Identity is the (lowercase) address; symbol and decimals are informative.
    """

    address: str
    symbol: str | None = None
    decimals: int = 18

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", normalize_address(self.address))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return self.address == other.address

    def __hash__(self) -> int:
        return hash(self.address)

    def sorts_before(self, other: Token) -> bool:
        """True if this token is token0 in a pool with `other`."""
        return self.address < other.address

    def __str__(self) -> str:
        return self.symbol or short_address(self.address)


class PoolSummaryToken(BaseModel):
    """Token reference inside a subgraph pool record."""

    id: str
    symbol: str | None = None
    decimals: int | None = None

    @field_validator("id")
    @classmethod
    def _lowercase_id(cls, value: str) -> str:
        return normalize_address(value)


class PoolSummary(BaseModel):
    """Pool record from the pool universe, ranked by USD liquidity.

    Parses the Uniswap V3 subgraph pool shape. State fields are optional:
    the curator only needs tokens, fee and TVL.
    """

    id: str
    fee_tier: int = Field(alias="feeTier")
    token0: PoolSummaryToken
    token1: PoolSummaryToken
    tvl_usd: float = Field(default=0.0, alias="totalValueLockedUSD")
    liquidity: int | None = None
    sqrt_price: int | None = Field(default=None, alias="sqrtPrice")
    tick: int | None = None

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("id")
    @classmethod
    def _lowercase_id(cls, value: str) -> str:
        return normalize_address(value)

    def involves(self, address: str) -> bool:
        """True if either pool token has the given (lowercase) address."""
        return self.token0.id == address or self.token1.id == address

    def connects(self, address_a: str, address_b: str) -> bool:
        """True if the pool trades exactly address_a against address_b."""
        return (self.token0.id == address_a and self.token1.id == address_b) or (
            self.token1.id == address_a and self.token0.id == address_b
        )

    @property
    def key(self) -> tuple[str, str, int]:
        return pool_key(self.token0.id, self.token1.id, self.fee_tier)

    def other_token_id(self, address: str) -> str:
        """The token on the other side of `address`."""
        return self.token1.id if self.token0.id == address else self.token0.id

    def __str__(self) -> str:
        symbol0 = self.token0.symbol or short_address(self.token0.id)
        symbol1 = self.token1.symbol or short_address(self.token1.id)
        return f"{symbol0}/{symbol1}/{self.fee_tier}/{short_address(self.id)}/{self.tvl_usd:.0f}"


@dataclass(frozen=True)
class TradablePool:
    """A concentrated-liquidity pool materialized for routing.

    token0/token1 are always ordered by address, so the same pool can never be
    represented twice with swapped tokens.
    """

    token0: Token
    token1: Token
    fee: int
    address: str
    liquidity: int = 0
    sqrt_price_x96: int = 0

    def __post_init__(self) -> None:
        if self.token0.address == self.token1.address:
            raise ValueError(f"Pool {self.address} has identical tokens")
        if not self.token0.sorts_before(self.token1):
            token0, token1 = self.token1, self.token0
            object.__setattr__(self, "token0", token0)
            object.__setattr__(self, "token1", token1)
        object.__setattr__(self, "address", normalize_address(self.address))

    def involves_token(self, token: Token) -> bool:
        """True if this pool trades `token`."""
        return token == self.token0 or token == self.token1

    def other_token(self, token: Token) -> Token:
        """Get the output token for a given input token."""
        if token == self.token0:
            return self.token1
        if token == self.token1:
            return self.token0
        raise ValueError(f"Token {token.address} not in pool {self.address}")

    @property
    def token0_price(self) -> Fraction:
        """Raw units of token1 per raw unit of token0, from the sqrt price."""
        if self.sqrt_price_x96 <= 0:
            raise ValueError(f"Pool {self.address} has no price")
        return Fraction(self.sqrt_price_x96 * self.sqrt_price_x96, Q192)

    def price_of(self, token: Token) -> Fraction:
        """Price of one raw unit of `token` in raw units of the other token."""
        if token == self.token0:
            return self.token0_price
        if token == self.token1:
            return 1 / self.token0_price
        raise ValueError(f"Token {token.address} not in pool {self.address}")

    @property
    def fee_percent(self) -> Fraction:
        """Fee as a percentage (e.g. 3/10 for the 0.3% tier)."""
        return Fraction(self.fee, 10_000)

    def __str__(self) -> str:
        return f"{self.token0}/{self.token1}/{self.fee}"


__all__ = [
    "PoolSummary",
    "PoolSummaryToken",
    "Token",
    "TradablePool",
    "TradeType",
    "pool_key",
]
