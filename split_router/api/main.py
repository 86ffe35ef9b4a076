"""FastAPI application for the split router."""

import os

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from split_router import __version__
from split_router.api.endpoints import router
from split_router.logging_config import configure_logging

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("ROUTER_HOST", "0.0.0.0")
PORT = int(os.environ.get("ROUTER_PORT", "8000"))
DEBUG = os.environ.get("ROUTER_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (64 KB, quote requests are tiny)
MAX_REQUEST_SIZE = 64 * 1024

app = FastAPI(
    title="Split Router",
    description="Best-execution swap routing with split routes over Uniswap V3 pools",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the router API server.

    Configuration via environment variables:
    - ROUTER_HOST: Host to bind to (default: 0.0.0.0)
    - ROUTER_PORT: Port to bind to (default: 8000)
    - ROUTER_DEBUG: Enable debug logging and reload mode (default: false)
    - ROUTER_CHAIN_ID, ROUTER_SUBGRAPH_URL, ROUTER_RPC_URL: see endpoints.get_default_router
    - ROUTER_TOP_N, ROUTER_MAX_SPLITS, ...: routing limits (RouterConfig.from_env)
    """
    configure_logging(verbose=DEBUG)
    uvicorn.run(
        "split_router.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
