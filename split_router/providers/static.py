"""In-memory provider implementations.

Used for snapshot-driven routing (fixtures, replays, tests) and as the token
and blocklist sources of the default service wiring.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from split_router.models.entities import PoolSummary, Token, pool_key
from split_router.models.types import normalize_address

logger = structlog.get_logger()


class StaticPoolUniverse:
    """Pool universe backed by a fixed list of summaries.

    The block number is ignored: the snapshot is the block.
    """

    def __init__(self, pools: Iterable[PoolSummary]) -> None:
        self._pools = list(pools)
        self._by_key = {pool.key: pool for pool in self._pools}

    async def get_pools(self, block_number: int | None = None) -> list[PoolSummary]:  # noqa: ARG002
        return list(self._pools)

    def find_summary(self, token_a: str, token_b: str, fee: int) -> PoolSummary | None:
        return self._by_key.get(pool_key(token_a, token_b, fee))


class StaticTokenAccessor:
    """Case-insensitive token lookup over a fixed set of tokens."""

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens = {token.address: token for token in tokens}

    def get_token_by_address(self, address: str) -> Token | None:
        return self._tokens.get(normalize_address(address))

    def get_all_tokens(self) -> list[Token]:
        return list(self._tokens.values())


class StaticTokenResolver:
    """Token resolver over a fixed token list."""

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._accessor = StaticTokenAccessor(tokens)

    @classmethod
    def from_pool_summaries(cls, pools: Iterable[PoolSummary]) -> StaticTokenResolver:
        """Build a resolver from the token metadata embedded in pool records.

        Tokens without decimals are left out: they cannot be priced safely.
        """
        tokens: dict[str, Token] = {}
        for pool in pools:
            for ref in (pool.token0, pool.token1):
                if ref.id in tokens:
                    continue
                if ref.decimals is None:
                    logger.debug("token_without_decimals", token=ref.id, symbol=ref.symbol)
                    continue
                tokens[ref.id] = Token(ref.id, ref.symbol, ref.decimals)
        return cls(tokens.values())

    async def get_tokens(
        self,
        addresses: Iterable[str],
        block_number: int | None = None,  # noqa: ARG002
    ) -> StaticTokenAccessor:
        found = []
        for address in addresses:
            token = self._accessor.get_token_by_address(address)
            if token is not None:
                found.append(token)
        return StaticTokenAccessor(found)


class StaticBlockedTokenList:
    """Blocked-token policy over a fixed address set."""

    def __init__(self, addresses: Iterable[str] = ()) -> None:
        self._blocked = {normalize_address(address) for address in addresses}

    def is_blocked(self, address: str) -> bool:
        return normalize_address(address) in self._blocked


class StaticGasPriceProvider:
    """Gas price provider returning a fixed price in wei."""

    def __init__(self, gas_price_wei: int) -> None:
        if gas_price_wei < 0:
            raise ValueError(f"Gas price cannot be negative: {gas_price_wei}")
        self.gas_price_wei = gas_price_wei

    async def get_gas_price(self) -> int:
        return self.gas_price_wei


__all__ = [
    "StaticBlockedTokenList",
    "StaticGasPriceProvider",
    "StaticPoolUniverse",
    "StaticTokenAccessor",
    "StaticTokenResolver",
]
