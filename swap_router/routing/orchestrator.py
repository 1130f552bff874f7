"""Swap orchestration: validate, provision, discover, then try candidates.

Candidates are tried strictly in ascending fee order, one at a time. Each
candidate gets exactly one simulation, and an execution is only attempted
with the price bound from that same candidate's successful simulation. The
first execution that succeeds ends the request.

Per-candidate failures are collected as values. Only problems that make
every candidate pointless (bad parameters, unknown tokens, account
provisioning) are raised.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

import structlog
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from swap_router.accounts.provisioner import AccountProvisioner, check_signer
from swap_router.config import DEFAULT_CONFIG, RouterConfig
from swap_router.errors import InvalidParametersError, InvalidPoolError, LedgerError
from swap_router.ledger.base import LedgerClient
from swap_router.pools.discovery import PoolDiscovery
from swap_router.pools.pair import PairResolver
from swap_router.pools.types import PoolRecord, format_fee_percent
from swap_router.routing.types import (
    CandidateAttempt,
    CandidateFailure,
    FailureReason,
    QuoteResult,
    RouteState,
    SwapRequest,
    SwapResult,
)
from swap_router.tokens.registry import Token, TokenRegistry

logger = structlog.get_logger()


class SwapOrchestrator:
    """Routes a swap request through the cheapest pool that accepts it.

    Args:
        registry: Token symbol lookup
        ledger: Ledger client used for discovery, simulation and execution
        config: Router configuration (slippage bounds, step budget, program id)
    """

    def __init__(
        self,
        registry: TokenRegistry,
        ledger: LedgerClient,
        config: RouterConfig = DEFAULT_CONFIG,
    ) -> None:
        self.registry = registry
        self.ledger = ledger
        self.config = config
        self.provisioner = AccountProvisioner(ledger, config)
        self.discovery = PoolDiscovery(ledger)
        self.resolver = PairResolver(config)

    def validate_request(self, request: SwapRequest) -> tuple[Token, Token]:
        """Check a request and resolve its tokens without touching the ledger.

        Returns:
            Tuple of (from_token, to_token)

        Raises:
            InvalidParametersError: If amount, slippage or token pair are invalid
            UnknownTokenError: If a symbol is not registered
        """
        if request.amount <= 0:
            raise InvalidParametersError("Amount must be greater than 0")
        if request.from_symbol.upper() == request.to_symbol.upper():
            raise InvalidParametersError("Cannot swap a token for itself")
        slippage = request.slippage
        if not slippage.is_finite() or not 0 <= slippage <= self.config.max_slippage:
            raise InvalidParametersError(
                f"Slippage must be between 0 and {self.config.max_slippage}%"
            )

        from_token = self.registry.resolve(request.from_symbol)
        to_token = self.registry.resolve(request.to_symbol)
        if from_token.mint == to_token.mint:
            raise InvalidParametersError(
                f"{from_token.symbol} and {to_token.symbol} are the same token"
            )
        return from_token, to_token

    def swap(self, request: SwapRequest, signer: Keypair) -> SwapResult:
        """Route and execute a swap.

        The owner defaults to the signer's public key. Both owner token
        accounts are ensured once, before any pool is looked at.

        Raises:
            InvalidParametersError: Before any ledger call, on bad input or signer
            UnknownTokenError: If a symbol is not registered
            AccountProvisioningError: If the owner's accounts cannot be created
        """
        owner = request.owner if request.owner is not None else signer.pubkey()
        self._transition(RouteState.INIT, mode="swap", owner=str(owner))
        from_token, to_token = self.validate_request(request)
        check_signer(owner, signer)

        self.provisioner.ensure_all([from_token, to_token], owner, signer)

        pools = self.discovery.find_candidates(from_token.mint, to_token.mint)
        self._transition(RouteState.CANDIDATES_LISTED, candidates=len(pools))
        if not pools:
            return SwapResult.all_failed([_no_pools(from_token, to_token)])

        failures: list[CandidateFailure] = []
        for attempt in self.iter_attempts(pools, from_token, to_token, request, owner, signer):
            if attempt.succeeded:
                self._transition(
                    RouteState.SUCCEEDED,
                    pool=str(attempt.pool_address),
                    fee=format_fee_percent(attempt.fee),
                    receipt=attempt.receipt,
                )
                return SwapResult.succeeded(attempt, failures)
            assert attempt.failure is not None
            failures.append(attempt.failure)

        self._transition(RouteState.ALL_FAILED, failures=[f.reason.value for f in failures])
        return SwapResult.all_failed(failures)

    def quote(self, request: SwapRequest) -> QuoteResult:
        """Find the cheapest pool whose simulation succeeds, without executing.

        Raises:
            InvalidParametersError: On bad input
            UnknownTokenError: If a symbol is not registered
        """
        self._transition(RouteState.INIT, mode="quote")
        from_token, to_token = self.validate_request(request)

        pools = self.discovery.find_candidates(from_token.mint, to_token.mint)
        self._transition(RouteState.CANDIDATES_LISTED, candidates=len(pools))
        if not pools:
            return QuoteResult.all_failed([_no_pools(from_token, to_token)])

        failures: list[CandidateFailure] = []
        for attempt in self.iter_attempts(pools, from_token, to_token, request):
            if attempt.succeeded:
                self._transition(RouteState.SUCCEEDED, pool=str(attempt.pool_address))
                return QuoteResult.succeeded(attempt, failures)
            assert attempt.failure is not None
            failures.append(attempt.failure)

        self._transition(RouteState.ALL_FAILED, failures=[f.reason.value for f in failures])
        return QuoteResult.all_failed(failures)

    def iter_attempts(
        self,
        pools: Sequence[PoolRecord],
        from_token: Token,
        to_token: Token,
        request: SwapRequest,
        owner: Pubkey | None = None,
        signer: Keypair | None = None,
    ) -> Iterator[CandidateAttempt]:
        """Try candidates in order, yielding one tagged attempt each.

        Without a signer the attempts stop after simulation (quotes). The
        generator is lazy: a caller that stops consuming after a success
        leaves the remaining candidates untouched.
        """
        execute = signer is not None and owner is not None

        for pool in pools:
            try:
                candidate = self.resolver.resolve(
                    pool, from_token, to_token, owner if execute else None
                )
            except InvalidPoolError as e:
                logger.warning("candidate_invalid", fee=format_fee_percent(pool.fee), error=str(e))
                yield _failed(FailureReason.INVALID_POOL, None, pool.fee, str(e))
                continue

            log = logger.bind(pool=str(candidate.address), fee=format_fee_percent(pool.fee))

            self._transition(RouteState.SIMULATING, pool=str(candidate.address))
            try:
                simulation = self.ledger.simulate(
                    candidate.x_to_y,
                    True,
                    request.amount,
                    request.slippage_fraction,
                    candidate.address,
                    self.config.max_step_budget,
                )
            except LedgerError as e:
                log.warning("candidate_simulation_error", error=str(e))
                yield _failed(FailureReason.SIMULATION_FAILED, candidate.address, pool.fee, str(e))
                continue

            if not simulation.ok:
                log.info("candidate_simulation_failed", status=simulation.status.value)
                yield _failed(
                    FailureReason.SIMULATION_FAILED,
                    candidate.address,
                    pool.fee,
                    simulation.status.value,
                )
                continue

            log.debug("candidate_simulated", amount_out=simulation.amount_out)
            if not execute:
                yield CandidateAttempt(
                    pool_address=candidate.address,
                    fee=pool.fee,
                    candidate=candidate,
                    simulation=simulation,
                )
                continue

            assert signer is not None and owner is not None
            assert candidate.account_x is not None and candidate.account_y is not None
            self._transition(RouteState.EXECUTING, pool=str(candidate.address))
            try:
                receipt = self.ledger.execute(
                    candidate.x_to_y,
                    simulation.price_after_swap,
                    candidate.pair,
                    request.amount,
                    request.slippage_fraction,
                    candidate.account_x,
                    candidate.account_y,
                    owner,
                    signer,
                )
            except LedgerError as e:
                log.warning("candidate_execution_failed", error=str(e))
                yield _failed(FailureReason.EXECUTION_FAILED, candidate.address, pool.fee, str(e))
                continue

            yield CandidateAttempt(
                pool_address=candidate.address,
                fee=pool.fee,
                candidate=candidate,
                simulation=simulation,
                receipt=receipt,
            )

    def _transition(self, state: RouteState, **context: object) -> None:
        logger.debug("route_state", state=state.value, **context)


def _failed(
    reason: FailureReason, address: Pubkey | None, fee: int, detail: str
) -> CandidateAttempt:
    return CandidateAttempt(
        pool_address=address,
        fee=fee,
        failure=CandidateFailure(reason=reason, pool_address=address, fee=fee, detail=detail),
    )


def _no_pools(from_token: Token, to_token: Token) -> CandidateFailure:
    logger.info("no_pools_found", from_token=from_token.symbol, to_token=to_token.symbol)
    return CandidateFailure(
        reason=FailureReason.NO_POOLS_FOUND,
        detail=f"No pools found for {from_token.symbol}/{to_token.symbol}",
    )
