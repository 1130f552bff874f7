"""Invariant swap router: fee-ranked pool discovery with fallback execution."""

from swap_router.routing import SwapOrchestrator, SwapRequest, SwapResult
from swap_router.service import SwapService, get_default_service

__version__ = "0.1.0"

__all__ = ["SwapOrchestrator", "SwapRequest", "SwapResult", "SwapService", "get_default_service", "__version__"]
