"""API endpoints for the split router."""

import os
from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends, HTTPException

from split_router.config import RouterConfig
from split_router.constants import MAINNET_CHAIN_ID
from split_router.errors import ConfigError, RouterError
from split_router.models.quote import QuoteRequest, QuoteResponse, RouteQuote
from split_router.providers.gas import HeuristicGasModelFactory, Web3GasPriceProvider
from split_router.providers.pools import SnapshotPoolProvider
from split_router.providers.quotes import Web3QuoteProvider
from split_router.providers.subgraph import SubgraphPoolUniverse, SubgraphTokenResolver
from split_router.routing.router import SplitRouter

logger = structlog.get_logger()

router = APIRouter()


@lru_cache(maxsize=1)
def get_default_router() -> SplitRouter:
    """Build the router from environment settings.

    - ROUTER_CHAIN_ID: Chain id (default: 1)
    - ROUTER_SUBGRAPH_URL: Uniswap V3 subgraph endpoint (required)
    - ROUTER_RPC_URL: JSON-RPC endpoint for quotes and gas price (required)

    Raises:
        ConfigError: If a required setting is missing
    """
    subgraph_url = os.environ.get("ROUTER_SUBGRAPH_URL")
    rpc_url = os.environ.get("ROUTER_RPC_URL")
    if not subgraph_url or not rpc_url:
        raise ConfigError("ROUTER_SUBGRAPH_URL and ROUTER_RPC_URL must be set")

    try:
        chain_id = int(os.environ.get("ROUTER_CHAIN_ID", str(MAINNET_CHAIN_ID)))
    except ValueError as err:
        raise ConfigError("ROUTER_CHAIN_ID must be an integer") from err

    universe = SubgraphPoolUniverse(subgraph_url)
    logger.info("router_configured", chain_id=chain_id, subgraph_url=subgraph_url)
    return SplitRouter(
        chain_id=chain_id,
        pool_universe=universe,
        pool_provider=SnapshotPoolProvider(universe),
        quote_provider=Web3QuoteProvider(rpc_url),
        token_resolver=SubgraphTokenResolver(universe),
        gas_price_provider=Web3GasPriceProvider(rpc_url),
        gas_model_factory=HeuristicGasModelFactory(),
    )


def get_router() -> SplitRouter:
    """Dependency provider for the router instance.

    Override this in tests to inject a router over static providers:
        app.dependency_overrides[get_router] = lambda: test_router

    Returns:
        The router instance to use for quotes.
    """
    try:
        return get_default_router()
    except ConfigError as e:
        logger.error("router_not_configured", error=str(e))
        raise HTTPException(status_code=503, detail=str(e)) from e


def get_config() -> RouterConfig:
    """Dependency provider for the base routing config (ROUTER_* variables)."""
    try:
        return RouterConfig.from_env()
    except ConfigError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e


@router.post("/quote")
async def quote(
    request: QuoteRequest,
    split_router: SplitRouter = Depends(get_router),
    base_config: RouterConfig = Depends(get_config),
) -> QuoteResponse:
    """Find the best (possibly split) route for a swap.

    Error Handling:
        - Invalid request schema: 422 Validation Error (Pydantic)
        - Unknown token, zero amount or invalid limits: 400
        - Provider failure (subgraph, RPC): 502
        - No route: 200 with `route: null`
    """
    logger.info(
        "received_quote_request",
        token_in=request.token_in,
        token_out=request.token_out,
        amount=request.amount,
        trade_type=request.trade_type.value,
    )

    amount = request.amount_int
    if amount == 0:
        raise HTTPException(status_code=400, detail="amount must be positive")
    if request.token_in.lower() == request.token_out.lower():
        raise HTTPException(status_code=400, detail="tokenIn and tokenOut must differ")

    try:
        config = request.to_config(base_config)
        config.validate()
    except ConfigError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    try:
        token_in = await split_router.resolve_token(request.token_in, config.block_number)
        token_out = await split_router.resolve_token(request.token_out, config.block_number)
        if token_in is None or token_out is None:
            unknown = request.token_in if token_in is None else request.token_out
            raise HTTPException(status_code=400, detail=f"Unknown token: {unknown}")

        swap_route = await split_router.route(token_in, token_out, amount, request.trade_type, config)
    except HTTPException:
        raise
    except ConfigError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except RouterError:
        raise
    except Exception as e:
        logger.exception(
            "provider_error",
            token_in=request.token_in,
            token_out=request.token_out,
            message="Routing failed in an external provider",
        )
        raise HTTPException(status_code=502, detail="Upstream provider failed") from e

    if swap_route is None:
        logger.info("no_route", token_in=request.token_in, token_out=request.token_out)
        return QuoteResponse.no_route()

    logger.info(
        "returning_route",
        num_splits=swap_route.num_splits,
        quote=swap_route.quote,
        block_number=swap_route.block_number,
    )
    return QuoteResponse(route=RouteQuote.from_swap_route(swap_route))
