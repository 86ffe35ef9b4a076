"""Protocols for the router's external collaborators.

The routing core depends only on these capability sets. Concrete
implementations live next to this module (subgraph, web3, static snapshots)
and tests inject their own fakes.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

from split_router.models.entities import PoolSummary, Token, TradablePool
from split_router.routing.types import GasCost, QuoteBatch, RawQuote, Route


class PoolUniverseSource(Protocol):
    """Source of the full pool universe (e.g. an indexing subgraph)."""

    async def get_pools(self, block_number: int | None = None) -> list[PoolSummary]:
        """Return every known pool as of the given block (latest if None)."""
        ...


class BlockedTokenList(Protocol):
    """Policy check excluding tokens from routing."""

    def is_blocked(self, address: str) -> bool: ...


class TokenAccessor(Protocol):
    """Result of a token lookup. Missing addresses resolve to None."""

    def get_token_by_address(self, address: str) -> Token | None: ...

    def get_all_tokens(self) -> list[Token]: ...


class TokenResolver(Protocol):
    """Token metadata lookup."""

    async def get_tokens(
        self, addresses: Iterable[str], block_number: int | None = None
    ) -> TokenAccessor:
        """Resolve addresses to tokens. Unknown addresses are tolerated."""
        ...


class PoolAccessor(Protocol):
    """Materialized pools for one routing call."""

    def get_all_pools(self) -> list[TradablePool]: ...

    def get_pool(self, token_a: Token, token_b: Token, fee: int) -> TradablePool | None: ...

    def get_pool_address(self, token_a: Token, token_b: Token, fee: int) -> str: ...


class PoolProvider(Protocol):
    """Materializes (token, token, fee) triples into tradable pools."""

    async def get_pools(self, token_pairs: Sequence[tuple[Token, Token, int]]) -> PoolAccessor: ...


class QuoteProvider(Protocol):
    """Batched quote executor.

    One call prices every route at every amount. The returned quote lists are
    positionally aligned with `amounts`. Failures of the call as a whole
    propagate to the caller; per-quote failures come back as invalid quotes.
    """

    async def get_quotes_exact_in(
        self, amounts: Sequence[int], routes: Sequence[Route], block_number: int | None = None
    ) -> QuoteBatch: ...

    async def get_quotes_exact_out(
        self, amounts: Sequence[int], routes: Sequence[Route], block_number: int | None = None
    ) -> QuoteBatch: ...


class GasPriceProvider(Protocol):
    """Current gas price in wei."""

    async def get_gas_price(self) -> int: ...


class GasModel(Protocol):
    """Prices a quoted route's gas usage in the quote token and in USD."""

    def estimate_gas_cost(self, route: Route, raw_quote: RawQuote) -> GasCost: ...


class GasModelFactory(Protocol):
    """Builds a gas model bound to one routing call's pools and quote token."""

    def build_gas_model(
        self,
        chain_id: int,
        gas_price_wei: int,
        pool_accessor: PoolAccessor,
        quote_token: Token,
    ) -> GasModel: ...


__all__ = [
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
]
