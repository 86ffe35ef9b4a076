"""On-chain quote provider using the Uniswap V3 QuoterV2 contract.

Each route is encoded as a packed V3 path and quoted once per amount of the
ladder, pinned to a single block so the whole batch is consistent.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

import structlog

from split_router.constants import QUOTER_V2_ADDRESS
from split_router.routing.types import QuoteBatch, RawQuote, Route

logger = structlog.get_logger()

_QUOTE_OUTPUTS = [
    {"internalType": "uint256", "name": "amount", "type": "uint256"},
    {"internalType": "uint160[]", "name": "sqrtPriceX96AfterList", "type": "uint160[]"},
    {"internalType": "uint32[]", "name": "initializedTicksCrossedList", "type": "uint32[]"},
    {"internalType": "uint256", "name": "gasEstimate", "type": "uint256"},
]

QUOTER_V2_ABI = [
    {
        "inputs": [
            {"internalType": "bytes", "name": "path", "type": "bytes"},
            {"internalType": "uint256", "name": "amountIn", "type": "uint256"},
        ],
        "name": "quoteExactInput",
        "outputs": _QUOTE_OUTPUTS,
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "bytes", "name": "path", "type": "bytes"},
            {"internalType": "uint256", "name": "amountOut", "type": "uint256"},
        ],
        "name": "quoteExactOutput",
        "outputs": _QUOTE_OUTPUTS,
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


def encode_route_path(route: Route, exact_output: bool = False) -> bytes:
    """Encode a route as a packed V3 path: token (20) | fee (3) | token (20) | ...

    Exact-output quotes walk the path backwards, starting at token_out.
    """
    tokens = route.token_path
    fees = [pool.fee for pool in route.pools]
    if exact_output:
        tokens = list(reversed(tokens))
        fees = list(reversed(fees))

    encoded = bytes.fromhex(tokens[0].address[2:])
    for fee, token in zip(fees, tokens[1:], strict=True):
        encoded += fee.to_bytes(3, "big") + bytes.fromhex(token.address[2:])
    return encoded


class Web3QuoteProvider:
    """Batched quotes via eth_call against QuoterV2.

    Reverted quotes (no liquidity, amount rounds to zero) come back as invalid
    quotes. Any other failure (transport, node errors) propagates and fails
    the whole batch.

    Args:
        web3_provider: HTTP RPC URL, or an existing Web3 instance
        quoter_address: QuoterV2 contract address
    """

    def __init__(self, web3_provider: str | Any, quoter_address: str = QUOTER_V2_ADDRESS) -> None:
        try:
            from web3 import Web3
        except ImportError as e:
            raise ImportError(
                "web3 package required for Web3QuoteProvider. Install with: pip install web3"
            ) from e

        self.w3 = Web3(Web3.HTTPProvider(web3_provider)) if isinstance(web3_provider, str) else web3_provider
        self.quoter = self.w3.eth.contract(
            address=Web3.to_checksum_address(quoter_address),
            abi=QUOTER_V2_ABI,
        )

    async def get_quotes_exact_in(
        self, amounts: Sequence[int], routes: Sequence[Route], block_number: int | None = None
    ) -> QuoteBatch:
        return await self._get_quotes(amounts, routes, block_number, exact_output=False)

    async def get_quotes_exact_out(
        self, amounts: Sequence[int], routes: Sequence[Route], block_number: int | None = None
    ) -> QuoteBatch:
        return await self._get_quotes(amounts, routes, block_number, exact_output=True)

    async def _get_quotes(
        self,
        amounts: Sequence[int],
        routes: Sequence[Route],
        block_number: int | None,
        exact_output: bool,
    ) -> QuoteBatch:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, self._get_quotes_blocking, list(amounts), list(routes), block_number, exact_output
        )

    def _get_quotes_blocking(
        self,
        amounts: list[int],
        routes: list[Route],
        block_number: int | None,
        exact_output: bool,
    ) -> QuoteBatch:
        from web3.exceptions import ContractLogicError

        resolved_block = int(block_number if block_number is not None else self.w3.eth.block_number)
        method = self.quoter.functions.quoteExactOutput if exact_output else self.quoter.functions.quoteExactInput

        routes_with_quotes: list[tuple[Route, list[RawQuote]]] = []
        failed = 0
        for route in routes:
            path = encode_route_path(route, exact_output=exact_output)
            quotes: list[RawQuote] = []
            for amount in amounts:
                try:
                    result = method(path, amount).call(block_identifier=resolved_block)
                except ContractLogicError as e:
                    failed += 1
                    logger.debug("quote_reverted", route=str(route), amount=amount, error=str(e))
                    quotes.append(RawQuote(amount=amount, quote=None))
                    continue

                quote, sqrt_prices_after, ticks_crossed, gas_estimate = result
                quotes.append(
                    RawQuote(
                        amount=amount,
                        quote=int(quote),
                        sqrt_price_x96_after_list=tuple(int(p) for p in sqrt_prices_after),
                        initialized_ticks_crossed_list=tuple(int(t) for t in ticks_crossed),
                        gas_estimate=int(gas_estimate),
                    )
                )
            routes_with_quotes.append((route, quotes))

        logger.info(
            "quotes_fetched",
            routes=len(routes),
            amounts=len(amounts),
            failed=failed,
            block_number=resolved_block,
            exact_output=exact_output,
        )
        return QuoteBatch(routes_with_quotes=routes_with_quotes, block_number=resolved_block)


__all__ = ["QUOTER_V2_ABI", "Web3QuoteProvider", "encode_route_path"]
