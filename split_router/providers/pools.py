"""Pool identity and materialization.

compute_pool_address is the canonical identity of a pool: the Uniswap V3
CREATE2 address derived from (token0, token1, fee). Tokens are sorted first,
so (A, B, fee) and (B, A, fee) always name the same pool.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from functools import lru_cache
from typing import Protocol

import structlog
from eth_utils import keccak

from split_router.constants import V3_FACTORY_ADDRESS, V3_POOL_INIT_CODE_HASH
from split_router.models.entities import PoolSummary, Token, TradablePool
from split_router.models.types import normalize_address, short_address

logger = structlog.get_logger()


def _address_bytes(address: str) -> bytes:
    return bytes.fromhex(normalize_address(address, validate=True)[2:])


@lru_cache(maxsize=4096)
def _compute_pool_address(token0: str, token1: str, fee: int, factory: str, init_code_hash: str) -> str:
    # abi.encode(address, address, uint24): each word left-padded to 32 bytes
    encoded = (
        _address_bytes(token0).rjust(32, b"\x00")
        + _address_bytes(token1).rjust(32, b"\x00")
        + fee.to_bytes(32, "big")
    )
    salt = keccak(encoded)
    digest = keccak(b"\xff" + _address_bytes(factory) + salt + bytes.fromhex(init_code_hash[2:]))
    return "0x" + digest[12:].hex()


def compute_pool_address(
    token_a: str,
    token_b: str,
    fee: int,
    factory: str = V3_FACTORY_ADDRESS,
    init_code_hash: str = V3_POOL_INIT_CODE_HASH,
) -> str:
    """Canonical (lowercase) pool address for a token pair and fee tier.

    Args:
        token_a: Either pool token address (any case)
        token_b: The other pool token address (any case)
        fee: Fee tier in hundredths of a basis point

    Raises:
        ValueError: If an address is invalid or both tokens are the same
    """
    addr_a = normalize_address(token_a)
    addr_b = normalize_address(token_b)
    if addr_a == addr_b:
        raise ValueError(f"Pool tokens must differ: {token_a}")
    token0, token1 = (addr_a, addr_b) if addr_a < addr_b else (addr_b, addr_a)
    return _compute_pool_address(token0, token1, fee, normalize_address(factory), init_code_hash)


class StaticPoolAccessor:
    """Pool accessor over an in-memory list of materialized pools.

    Pools keep the order they were given in; the path enumerator relies on it
    for deterministic output.
    """

    def __init__(self, pools: Iterable[TradablePool]) -> None:
        self._pools: list[TradablePool] = []
        self._by_key: dict[tuple[str, str, int], TradablePool] = {}
        for pool in pools:
            key = (pool.token0.address, pool.token1.address, pool.fee)
            if key in self._by_key:
                logger.debug("duplicate_pool_skipped", pool=short_address(pool.address))
                continue
            self._by_key[key] = pool
            self._pools.append(pool)

    def get_all_pools(self) -> list[TradablePool]:
        return list(self._pools)

    def get_pool(self, token_a: Token, token_b: Token, fee: int) -> TradablePool | None:
        token0, token1 = (token_a, token_b) if token_a.sorts_before(token_b) else (token_b, token_a)
        return self._by_key.get((token0.address, token1.address, fee))

    def get_pool_address(self, token_a: Token, token_b: Token, fee: int) -> str:
        return compute_pool_address(token_a.address, token_b.address, fee)

    def __len__(self) -> int:
        return len(self._pools)


class SummaryLookup(Protocol):
    """Anything that can return the latest fetched summary for a token pair and fee."""

    def find_summary(self, token_a: str, token_b: str, fee: int) -> PoolSummary | None: ...


class SnapshotPoolProvider:
    """Materializes pools from the state carried by pool summaries.

    The subgraph serves liquidity and sqrt price alongside TVL, so the
    snapshot the curator ranked is also enough to price gas. Summaries are
    matched by token pair and fee, and a matched pool keeps the summary id as
    its address. Pools without a summary get the CREATE2 address and empty
    state.
    """

    def __init__(self, summaries: SummaryLookup) -> None:
        self._summaries = summaries

    async def get_pools(self, token_pairs: Sequence[tuple[Token, Token, int]]) -> StaticPoolAccessor:
        pools: list[TradablePool] = []
        missing_state = 0
        for token_a, token_b, fee in token_pairs:
            summary = self._summaries.find_summary(token_a.address, token_b.address, fee)
            if summary is None or summary.sqrt_price is None:
                missing_state += 1
            if summary is not None:
                address = summary.id
            else:
                address = compute_pool_address(token_a.address, token_b.address, fee)
            pools.append(
                TradablePool(
                    token0=token_a,
                    token1=token_b,
                    fee=fee,
                    address=address,
                    liquidity=(summary.liquidity or 0) if summary is not None else 0,
                    sqrt_price_x96=(summary.sqrt_price or 0) if summary is not None else 0,
                )
            )

        if missing_state:
            logger.debug("pools_without_state", count=missing_state, total=len(pools))

        return StaticPoolAccessor(pools)


__all__ = [
    "SnapshotPoolProvider",
    "StaticPoolAccessor",
    "SummaryLookup",
    "compute_pool_address",
]
