"""Swap routing across candidate pools.

- types.py: requests, attempts and results
- orchestrator.py: SwapOrchestrator
"""

from .orchestrator import SwapOrchestrator
from .types import (
    CandidateAttempt,
    CandidateFailure,
    FailureReason,
    QuoteResult,
    RouteOutcome,
    RouteState,
    SwapRequest,
    SwapResult,
)

__all__ = [
    "CandidateAttempt",
    "CandidateFailure",
    "FailureReason",
    "QuoteResult",
    "RouteOutcome",
    "RouteState",
    "SwapOrchestrator",
    "SwapRequest",
    "SwapResult",
]
