"""FastAPI application for the swap router.

Note: Rate limiting and authentication are not implemented at the
application level. They belong to the infrastructure layer in front of it.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from swap_router import __version__
from swap_router.api.endpoints import router
from swap_router.errors import SwapRouterError
from swap_router.log import configure_logging

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("SWAP_ROUTER_HOST", "0.0.0.0")
PORT = int(os.environ.get("SWAP_ROUTER_PORT", "8000"))
DEBUG = os.environ.get("SWAP_ROUTER_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

app = FastAPI(
    title="Invariant Swap Router",
    description="Fee-ranked pool discovery and fallback swap routing for Invariant on Eclipse",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(
            status_code=413,
            content={"success": False, "error": "Request too large", "reason": "request_too_large"},
        )
    return await call_next(request)


@app.exception_handler(SwapRouterError)
async def swap_router_error_handler(request: Request, exc: SwapRouterError) -> JSONResponse:
    """Answer domain errors with the failure envelope and the error's status."""
    logger.warning(
        "request_failed",
        path=request.url.path,
        reason=exc.code,
        status_code=exc.status_code,
        error=str(exc),
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc), "reason": exc.code, **exc.details()},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema errors keep FastAPI's 422 but use the failure envelope."""
    errors = jsonable_encoder(exc.errors())
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": message,
            "reason": "invalid_parameters",
            "detail": errors,
        },
    )


@app.exception_handler(TimeoutError)
async def timeout_handler(request: Request, exc: TimeoutError) -> JSONResponse:
    logger.warning("request_timeout", path=request.url.path)
    return JSONResponse(
        status_code=504,
        content={"success": False, "error": "Request timed out", "reason": "timeout"},
    )


app.include_router(router)


def run() -> None:
    """Run the swap router API server.

    Configuration via environment variables:
    - SWAP_ROUTER_HOST: Host to bind to (default: 0.0.0.0)
    - SWAP_ROUTER_PORT: Port to bind to (default: 8000)
    - SWAP_ROUTER_DEBUG: Enable debug logging and reload mode (default: false)
    - SWAP_ROUTER_LEDGER_SNAPSHOT: JSON snapshot seeding the in-memory ledger
    """
    configure_logging(verbose=DEBUG)
    uvicorn.run(
        "swap_router.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
