"""Tests for the QuoterV2 quote provider."""

import asyncio
from unittest.mock import MagicMock

from web3.exceptions import ContractLogicError

from split_router.providers.quotes import Web3QuoteProvider, encode_route_path
from tests.helpers import DAI, USDC, WETH, make_pool, make_route

WETH_USDC = make_route([make_pool(WETH, USDC, fee=500)], WETH, USDC)
WETH_DAI_USDC = make_route([make_pool(WETH, DAI, fee=3000), make_pool(DAI, USDC, fee=100)], WETH, USDC)


def raw(token) -> bytes:  # noqa: ANN001
    return bytes.fromhex(token.address[2:])


class TestEncodeRoutePath:
    def test_single_hop(self) -> None:
        assert encode_route_path(WETH_USDC) == raw(WETH) + bytes.fromhex("0001f4") + raw(USDC)

    def test_multi_hop(self) -> None:
        path = encode_route_path(WETH_DAI_USDC)

        assert path == raw(WETH) + bytes.fromhex("000bb8") + raw(DAI) + bytes.fromhex("000064") + raw(USDC)
        assert len(path) == 20 + 2 * 23

    def test_exact_output_reversed(self) -> None:
        path = encode_route_path(WETH_DAI_USDC, exact_output=True)

        assert path == raw(USDC) + bytes.fromhex("000064") + raw(DAI) + bytes.fromhex("000bb8") + raw(WETH)


class FakeQuoter:
    """Stands in for quoter.functions; quotes amount * 2 and reverts on 0."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, bytes, int, int]] = []

    def _method(self, name: str):  # noqa: ANN202
        def method(path: bytes, amount: int) -> MagicMock:
            call = MagicMock()

            def do_call(block_identifier: int) -> tuple:
                self.calls.append((name, path, amount, block_identifier))
                if amount == 0:
                    raise ContractLogicError("execution reverted")
                return (amount * 2, [2**96], [3], 90_000)

            call.call.side_effect = do_call
            return call

        return method

    @property
    def quoteExactInput(self):  # noqa: ANN201, N802
        return self._method("quoteExactInput")

    @property
    def quoteExactOutput(self):  # noqa: ANN201, N802
        return self._method("quoteExactOutput")


def make_provider(block_number: int = 18_000_000) -> tuple[Web3QuoteProvider, FakeQuoter]:
    w3 = MagicMock()
    w3.eth.block_number = block_number
    provider = Web3QuoteProvider(w3)
    quoter = FakeQuoter()
    provider.quoter = MagicMock()
    provider.quoter.functions = quoter
    return provider, quoter


class TestWeb3QuoteProvider:
    def test_exact_in_batch(self) -> None:
        provider, quoter = make_provider()

        batch = asyncio.run(provider.get_quotes_exact_in([10, 20], [WETH_USDC, WETH_DAI_USDC]))

        assert batch.block_number == 18_000_000
        assert [route for route, _ in batch.routes_with_quotes] == [WETH_USDC, WETH_DAI_USDC]
        quotes = batch.routes_with_quotes[0][1]
        assert [q.quote for q in quotes] == [20, 40]
        assert quotes[0].initialized_ticks_crossed_list == (3,)
        assert quotes[0].gas_estimate == 90_000
        assert {name for name, *_ in quoter.calls} == {"quoteExactInput"}
        assert len(quoter.calls) == 4

    def test_whole_batch_pinned_to_one_block(self) -> None:
        provider, quoter = make_provider()

        asyncio.run(provider.get_quotes_exact_in([10, 20], [WETH_USDC], block_number=17_123_456))

        assert {block for *_, block in quoter.calls} == {17_123_456}

    def test_exact_out_uses_reversed_path(self) -> None:
        provider, quoter = make_provider()

        asyncio.run(provider.get_quotes_exact_out([10], [WETH_USDC]))

        ((name, path, amount, _),) = quoter.calls
        assert name == "quoteExactOutput"
        assert path == encode_route_path(WETH_USDC, exact_output=True)
        assert amount == 10

    def test_revert_becomes_invalid_quote(self) -> None:
        provider, _ = make_provider()

        batch = asyncio.run(provider.get_quotes_exact_in([0, 10], [WETH_USDC]))
        invalid, valid = batch.routes_with_quotes[0][1]

        assert invalid.quote is None
        assert invalid.amount == 0
        assert valid.quote == 20
