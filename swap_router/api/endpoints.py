"""API endpoints for the swap router."""

import asyncio
from collections.abc import Callable
from functools import partial
from typing import Any, TypeVar

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from solders.pubkey import Pubkey

from swap_router.accounts.keys import parse_signer
from swap_router.accounts.provisioner import check_signer
from swap_router.errors import OutcomeUnknownError
from swap_router.models.api import (
    BalanceRequest,
    QuoteRequest,
    SwapApiRequest,
    WalletInfoRequest,
    WrapRequest,
)
from swap_router.service import SwapService, get_default_service

logger = structlog.get_logger()

router = APIRouter()

T = TypeVar("T")


def get_service() -> SwapService:
    """Dependency provider for the service instance.

    Override this in tests to inject a service over a test ledger:
        app.dependency_overrides[get_service] = lambda: service
    """
    return get_default_service()


async def run_blocking(service: SwapService, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking service call in the default executor, bounded by the request timeout.

    Raises:
        TimeoutError: If the call exceeds ``config.request_timeout`` (the API
            answers 504)
    """
    loop = asyncio.get_event_loop()
    return await asyncio.wait_for(
        loop.run_in_executor(None, partial(func, *args, **kwargs)),
        timeout=service.config.request_timeout,
    )


async def run_submitting(
    service: SwapService, func: Callable[..., T], *args: Any, **kwargs: Any
) -> T:
    """Like run_blocking, for calls that submit ledger operations (swap, wrap).

    The worker thread is not cancelled by the timeout, so the operation may
    still complete after the client has been answered.

    Raises:
        OutcomeUnknownError: If the call exceeds the request timeout (504 with
            reason ``timeout_outcome_unknown``)
    """
    try:
        return await run_blocking(service, func, *args, **kwargs)
    except TimeoutError as e:
        logger.warning("submission_outcome_unknown", operation=func.__name__)
        raise OutcomeUnknownError(
            "Request timed out while submitting; the operation may still complete. "
            "Check balances before retrying."
        ) from e


def _owner_of(request: BalanceRequest | WalletInfoRequest) -> Pubkey:
    """Owner named by the request; a given privateKey must control a given owner."""
    if request.private_key is None:
        assert request.owner is not None
        return Pubkey.from_string(request.owner)
    signer = parse_signer(request.private_key)
    if request.owner is not None:
        check_signer(Pubkey.from_string(request.owner), signer)
    return signer.pubkey()


@router.get("/health")
@router.get("/api/health")
async def health(service: SwapService = Depends(get_service)) -> JSONResponse:
    """Ledger liveness check (503 when the ledger cannot be reached)."""
    status = await run_blocking(service, service.health)
    healthy = status["status"] == "healthy"
    return JSONResponse(
        status_code=200 if healthy else 503, content={"success": healthy, **status}
    )


@router.get("/api/tokens")
async def list_tokens(service: SwapService = Depends(get_service)) -> dict[str, Any]:
    tokens = service.list_tokens()
    return {"success": True, "count": len(tokens), "tokens": tokens}


@router.get("/api/pools/all")
async def all_pools(service: SwapService = Depends(get_service)) -> dict[str, Any]:
    pools = await run_blocking(service, service.all_pools)
    return {"success": True, "count": len(pools), "pools": pools}


@router.get("/api/pools/{from_token}/{to_token}")
async def find_pools(
    from_token: str, to_token: str, service: SwapService = Depends(get_service)
) -> dict[str, Any]:
    """Candidate pools for a pair, cheapest fee first."""
    result = await run_blocking(service, service.find_pools, from_token, to_token)
    return {"success": True, **result}


@router.get("/api/market/stats")
async def market_stats(service: SwapService = Depends(get_service)) -> dict[str, Any]:
    stats = await run_blocking(service, service.market_stats)
    return {"success": True, **stats}


@router.post("/api/quote")
async def quote(request: QuoteRequest, service: SwapService = Depends(get_service)) -> dict[str, Any]:
    """Simulate a swap through the cheapest working pool.

    Error Handling:
        - Schema errors (amount <= 0, same token, slippage out of range): 422
        - Unknown token: 400
        - Every candidate failed: 422 with per-candidate reasons
    """
    logger.info(
        "quote_request",
        from_token=request.from_token,
        to_token=request.to_token,
        amount=str(request.amount),
    )
    result = await run_blocking(
        service,
        service.quote,
        request.from_token,
        request.to_token,
        request.amount,
        request.slippage,
    )
    return {"success": True, **result}


@router.post("/api/swap")
async def swap(
    request: SwapApiRequest, service: SwapService = Depends(get_service)
) -> dict[str, Any]:
    """Route and execute a swap.

    The private key is parsed before any ledger interaction; a malformed key
    answers 400 with reason ``invalid_signer``.
    """
    signer = parse_signer(request.private_key)
    logger.info(
        "swap_request",
        from_token=request.from_token,
        to_token=request.to_token,
        amount=str(request.amount),
        slippage=str(request.slippage),
        owner=str(signer.pubkey()),
    )
    result = await run_submitting(
        service,
        service.swap,
        request.from_token,
        request.to_token,
        request.amount,
        signer,
        request.slippage,
    )
    return {"success": True, **result}


@router.post("/api/balance")
async def balance(
    request: BalanceRequest, service: SwapService = Depends(get_service)
) -> dict[str, Any]:
    owner = _owner_of(request)
    result = await run_blocking(service, service.balance, request.token, owner)
    return {"success": True, **result}


@router.post("/api/wallet/info")
async def wallet_info(
    request: WalletInfoRequest, service: SwapService = Depends(get_service)
) -> dict[str, Any]:
    owner = _owner_of(request)
    result = await run_blocking(service, service.wallet_info, owner)
    return {"success": True, **result}


@router.post("/api/wrap")
async def wrap(request: WrapRequest, service: SwapService = Depends(get_service)) -> dict[str, Any]:
    """Wrap native balance into the wrapped-native token account."""
    signer = parse_signer(request.private_key)
    result = await run_submitting(service, service.wrap, request.amount, signer)
    return {"success": True, **result}
