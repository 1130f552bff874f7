"""Type definitions for the routing module."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from solders.pubkey import Pubkey

from swap_router.ledger.base import SimulationOutcome
from swap_router.pools.pair import Candidate


class RouteState(str, Enum):
    """Orchestrator states, in the order a request moves through them."""

    INIT = "init"
    CANDIDATES_LISTED = "candidates_listed"
    SIMULATING = "simulating"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    ALL_FAILED = "all_failed"


class RouteOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    ALL_FAILED = "all_failed"


class FailureReason(str, Enum):
    """Why a candidate (or the whole candidate list) was abandoned."""

    NO_POOLS_FOUND = "no_pools_found"
    INVALID_POOL = "invalid_pool"
    SIMULATION_FAILED = "simulation_failed"
    EXECUTION_FAILED = "execution_failed"


@dataclass(frozen=True)
class SwapRequest:
    """A validated-shape swap request in base units.

    ``slippage`` is in percent (0.5 means 0.5%). ``owner`` may be None for
    quotes.
    """

    from_symbol: str
    to_symbol: str
    amount: int
    slippage: Decimal = Decimal("0.5")
    owner: Pubkey | None = None

    @property
    def slippage_fraction(self) -> Decimal:
        """Slippage as the fraction the ledger expects (0.005 for 0.5%)."""
        return self.slippage / 100


@dataclass(frozen=True)
class CandidateFailure:
    """One candidate that did not produce a swap."""

    reason: FailureReason
    pool_address: Pubkey | None = None
    fee: int | None = None
    detail: str = ""

    def to_dict(self) -> dict[str, object]:
        return {
            "reason": self.reason.value,
            "pool": str(self.pool_address) if self.pool_address is not None else None,
            "fee": self.fee,
            "detail": self.detail,
        }


@dataclass(frozen=True)
class CandidateAttempt:
    """Tagged result of trying one candidate.

    Exactly one of ``failure`` and ``receipt``/``simulation`` describes the
    attempt: a failed attempt has ``failure`` set; a successful quote has
    ``simulation``; a successful swap has both ``simulation`` and ``receipt``.
    """

    pool_address: Pubkey | None
    fee: int
    candidate: Candidate | None = None
    simulation: SimulationOutcome | None = None
    receipt: str | None = None
    failure: CandidateFailure | None = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None


@dataclass
class SwapResult:
    """Result of routing a swap across candidate pools."""

    outcome: RouteOutcome
    state: RouteState
    receipt: str | None = None
    pool_address: Pubkey | None = None
    pool_fee: int | None = None
    estimated_output: int | None = None
    candidate: Candidate | None = None
    failures: list[CandidateFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.outcome is RouteOutcome.SUCCEEDED

    @property
    def pool_used(self) -> tuple[Pubkey, int] | None:
        """(address, fee) of the pool that executed, or None."""
        if self.pool_address is None or self.pool_fee is None:
            return None
        return self.pool_address, self.pool_fee

    @classmethod
    def succeeded(
        cls, attempt: CandidateAttempt, failures: list[CandidateFailure] | None = None
    ) -> SwapResult:
        """Create a result from the attempt that executed.

        ``failures`` keeps the candidates that were skipped before it.
        """
        return cls(
            outcome=RouteOutcome.SUCCEEDED,
            state=RouteState.SUCCEEDED,
            receipt=attempt.receipt,
            pool_address=attempt.pool_address,
            pool_fee=attempt.fee,
            estimated_output=attempt.simulation.amount_out if attempt.simulation else None,
            candidate=attempt.candidate,
            failures=list(failures or []),
        )

    @classmethod
    def all_failed(cls, failures: list[CandidateFailure]) -> SwapResult:
        """Create a result where no candidate produced a swap."""
        return cls(outcome=RouteOutcome.ALL_FAILED, state=RouteState.ALL_FAILED, failures=list(failures))


@dataclass
class QuoteResult:
    """Result of a simulate-only route."""

    outcome: RouteOutcome
    state: RouteState
    simulation: SimulationOutcome | None = None
    pool_address: Pubkey | None = None
    pool_fee: int | None = None
    candidate: Candidate | None = None
    failures: list[CandidateFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.outcome is RouteOutcome.SUCCEEDED

    @property
    def estimated_output(self) -> int | None:
        return self.simulation.amount_out if self.simulation is not None else None

    @classmethod
    def succeeded(
        cls, attempt: CandidateAttempt, failures: list[CandidateFailure] | None = None
    ) -> QuoteResult:
        return cls(
            outcome=RouteOutcome.SUCCEEDED,
            state=RouteState.SUCCEEDED,
            simulation=attempt.simulation,
            pool_address=attempt.pool_address,
            pool_fee=attempt.fee,
            candidate=attempt.candidate,
            failures=list(failures or []),
        )

    @classmethod
    def all_failed(cls, failures: list[CandidateFailure]) -> QuoteResult:
        return cls(outcome=RouteOutcome.ALL_FAILED, state=RouteState.ALL_FAILED, failures=list(failures))


__all__ = [
    "CandidateAttempt",
    "CandidateFailure",
    "FailureReason",
    "QuoteResult",
    "RouteOutcome",
    "RouteState",
    "SwapRequest",
    "SwapResult",
]
