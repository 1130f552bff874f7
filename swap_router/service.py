"""Service facade used by the HTTP API.

Converts between human amounts and base units, runs the orchestrator and
shapes results into JSON-ready dicts. Every method is blocking; the API runs
them in an executor.
"""

from __future__ import annotations

import os
from decimal import Decimal
from typing import Any

import structlog
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from swap_router.accounts.provisioner import AccountProvisioner
from swap_router.config import DEFAULT_CONFIG, RouterConfig
from swap_router.constants import NATIVE_DECIMALS, NATIVE_MINT
from swap_router.errors import InvalidParametersError, LedgerError, RouteFailedError
from swap_router.ledger.base import LedgerClient
from swap_router.ledger.memory import InMemoryLedger
from swap_router.models.types import from_base_units, to_base_units
from swap_router.pools.discovery import PoolDiscovery
from swap_router.pools.pair import build_pair
from swap_router.pools.types import PoolRecord, fee_to_percent, format_fee_percent
from swap_router.routing.orchestrator import SwapOrchestrator
from swap_router.routing.types import CandidateFailure, FailureReason, SwapRequest
from swap_router.tokens.registry import Token, TokenRegistry, default_token_registry

logger = structlog.get_logger()

UNKNOWN_SYMBOL = "UNKNOWN"


class SwapService:
    """Everything the API needs, bound to one ledger and token registry."""

    def __init__(
        self,
        ledger: LedgerClient,
        registry: TokenRegistry | None = None,
        config: RouterConfig = DEFAULT_CONFIG,
    ) -> None:
        self.ledger = ledger
        self.registry = registry if registry is not None else default_token_registry()
        self.config = config
        self.orchestrator = SwapOrchestrator(self.registry, ledger, config)
        self.provisioner = AccountProvisioner(ledger, config)
        self.discovery = PoolDiscovery(ledger)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def health(self) -> dict[str, Any]:
        try:
            slot = self.ledger.get_slot()
        except LedgerError as e:
            logger.warning("ledger_unhealthy", error=str(e))
            return {"status": "unhealthy", "error": str(e)}
        return {"status": "healthy", "slot": slot}

    def list_tokens(self) -> list[dict[str, Any]]:
        return [_token_dict(token) for token in self.registry]

    def find_pools(self, from_symbol: str, to_symbol: str) -> dict[str, Any]:
        """Candidate pools for a pair, cheapest fee first."""
        from_token = self.registry.resolve(from_symbol)
        to_token = self.registry.resolve(to_symbol)
        if from_token.mint == to_token.mint:
            raise InvalidParametersError(
                f"{from_token.symbol} and {to_token.symbol} are the same token"
            )
        pools = self.discovery.find_candidates(from_token.mint, to_token.mint)
        return {
            "fromToken": from_token.symbol,
            "toToken": to_token.symbol,
            "count": len(pools),
            "pools": [self._pool_dict(pool) for pool in pools],
        }

    def all_pools(self) -> list[dict[str, Any]]:
        return [self._pool_dict(pool) for pool in self.discovery.all_pools()]

    def market_stats(self) -> dict[str, Any]:
        """Pool counts per mint and per registered symbol."""
        counts = self.discovery.pool_counts_by_mint()
        by_symbol = {token.symbol: counts.get(token.mint, 0) for token in self.registry}
        return {
            "totalPools": sum(counts.values()) // 2,
            "poolsByMint": {str(mint): count for mint, count in counts.most_common()},
            "poolsByToken": by_symbol,
            "supportedTokens": len(self.registry),
        }

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def quote(
        self,
        from_symbol: str,
        to_symbol: str,
        amount: Decimal,
        slippage: Decimal | None = None,
    ) -> dict[str, Any]:
        """Simulate the cheapest working route without executing.

        Raises:
            RouteFailedError: If no candidate simulates successfully
        """
        request, from_token, to_token = self._build_request(
            from_symbol, to_symbol, amount, slippage
        )
        result = self.orchestrator.quote(request)
        if not result.success:
            raise _route_failed(result.failures, from_token, to_token)

        assert result.simulation is not None and result.pool_fee is not None
        return {
            "fromToken": from_token.symbol,
            "toToken": to_token.symbol,
            "amountIn": str(amount),
            "estimatedOutput": str(from_base_units(result.simulation.amount_out, to_token.decimals)),
            "priceImpact": (
                str(result.simulation.price_impact)
                if result.simulation.price_impact is not None
                else None
            ),
            "slippage": str(request.slippage),
            "pool": _pool_ref(result.pool_address, result.pool_fee),
            "skipped": [failure.to_dict() for failure in result.failures],
        }

    def swap(
        self,
        from_symbol: str,
        to_symbol: str,
        amount: Decimal,
        signer: Keypair,
        slippage: Decimal | None = None,
    ) -> dict[str, Any]:
        """Route and execute a swap signed by ``signer``.

        Raises:
            RouteFailedError: If every candidate failed
            AccountProvisioningError: If the owner's accounts cannot be created
        """
        request, from_token, to_token = self._build_request(
            from_symbol, to_symbol, amount, slippage, owner=signer.pubkey()
        )
        logger.info(
            "swap_requested",
            from_token=from_token.symbol,
            to_token=to_token.symbol,
            amount=request.amount,
            owner=str(signer.pubkey()),
        )
        result = self.orchestrator.swap(request, signer)
        if not result.success:
            raise _route_failed(result.failures, from_token, to_token)

        assert result.pool_fee is not None
        estimated = (
            str(from_base_units(result.estimated_output, to_token.decimals))
            if result.estimated_output is not None
            else None
        )
        logger.info(
            "swap_succeeded",
            signature=result.receipt,
            pool=str(result.pool_address),
            fee=format_fee_percent(result.pool_fee),
            skipped=len(result.failures),
        )
        return {
            "signature": result.receipt,
            "fromToken": from_token.symbol,
            "toToken": to_token.symbol,
            "amountIn": str(amount),
            "estimatedOutput": estimated,
            "slippage": str(request.slippage),
            "pool": _pool_ref(result.pool_address, result.pool_fee),
            "skipped": [failure.to_dict() for failure in result.failures],
        }

    # ------------------------------------------------------------------
    # Wallet
    # ------------------------------------------------------------------

    def balance(self, symbol: str, owner: Pubkey) -> dict[str, Any]:
        """Balance of one token. The native mint reports the native balance."""
        token = self.registry.resolve(symbol)
        if token.is_native:
            raw = self.provisioner.native_balance(owner)
        else:
            raw = self.provisioner.token_balance(token, owner)
        return {
            "owner": str(owner),
            "token": token.symbol,
            "balance": str(from_base_units(raw, token.decimals)),
            "rawBalance": raw,
        }

    def wallet_info(self, owner: Pubkey) -> dict[str, Any]:
        """Native balance plus every non-zero token balance."""
        native = self.provisioner.native_balance(owner)
        balances: list[dict[str, Any]] = []
        seen: set[Pubkey] = set()
        for token in self.registry:
            if token.mint in seen:
                continue
            seen.add(token.mint)
            raw = self.provisioner.token_balance(token, owner)
            if raw > 0:
                balances.append(
                    {
                        "token": token.symbol,
                        "mint": str(token.mint),
                        "balance": str(from_base_units(raw, token.decimals)),
                        "rawBalance": raw,
                    }
                )
        return {
            "owner": str(owner),
            "nativeBalance": str(from_base_units(native, NATIVE_DECIMALS)),
            "rawNativeBalance": native,
            "tokens": balances,
        }

    def wrap(self, amount: Decimal, signer: Keypair) -> dict[str, Any]:
        """Wrap ``amount`` of the native asset (human units)."""
        lamports = to_base_units(amount, NATIVE_DECIMALS)
        account, signature = self.provisioner.wrap_native(signer.pubkey(), lamports, signer)
        logger.info("native_wrapped", owner=str(signer.pubkey()), lamports=lamports)
        return {
            "signature": signature,
            "account": str(account),
            "mint": str(NATIVE_MINT),
            "amount": str(amount),
            "lamports": lamports,
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _build_request(
        self,
        from_symbol: str,
        to_symbol: str,
        amount: Decimal,
        slippage: Decimal | None,
        owner: Pubkey | None = None,
    ) -> tuple[SwapRequest, Token, Token]:
        if not amount.is_finite():
            raise InvalidParametersError(f"Amount must be a finite number, got {amount}")
        from_token = self.registry.resolve(from_symbol)
        to_token = self.registry.resolve(to_symbol)
        base_amount = to_base_units(amount, from_token.decimals)
        if base_amount <= 0:
            raise InvalidParametersError(
                f"Amount {amount} is below the smallest unit of {from_token.symbol}"
            )
        request = SwapRequest(
            from_symbol=from_token.symbol,
            to_symbol=to_token.symbol,
            amount=base_amount,
            slippage=slippage if slippage is not None else self.config.default_slippage,
            owner=owner,
        )
        return request, from_token, to_token

    def _pool_dict(self, pool: PoolRecord) -> dict[str, Any]:
        pair = build_pair(pool, self.config.program_id)
        return {
            "address": str(pair.address),
            "tokenX": str(pair.token_x),
            "tokenY": str(pair.token_y),
            "symbolX": self.registry.symbol_for_mint(pair.token_x) or UNKNOWN_SYMBOL,
            "symbolY": self.registry.symbol_for_mint(pair.token_y) or UNKNOWN_SYMBOL,
            "fee": pool.fee,
            "feePercent": format_fee_percent(pool.fee),
            "tickSpacing": pair.tick_spacing,
        }


def _token_dict(token: Token) -> dict[str, Any]:
    return {
        "symbol": token.symbol,
        "name": token.name,
        "mint": str(token.mint),
        "decimals": token.decimals,
        "program": token.program.value,
    }


def _pool_ref(address: Pubkey | None, fee: int) -> dict[str, Any]:
    return {
        "address": str(address),
        "fee": fee,
        "feePercent": str(fee_to_percent(fee)),
    }


def _route_failed(
    failures: list[CandidateFailure], from_token: Token, to_token: Token
) -> RouteFailedError:
    pair = f"{from_token.symbol}/{to_token.symbol}"
    if len(failures) == 1 and failures[0].reason is FailureReason.NO_POOLS_FOUND:
        return RouteFailedError(
            f"No pools found for {pair}",
            [failures[0].to_dict()],
            reason=FailureReason.NO_POOLS_FOUND.value,
        )
    return RouteFailedError(
        f"All {len(failures)} candidate pools failed for {pair}",
        [failure.to_dict() for failure in failures],
    )


_default_service: SwapService | None = None


def create_default_service(environ: dict[str, str] | None = None) -> SwapService:
    """Build a service over an in-memory ledger.

    The ledger is seeded from the JSON snapshot named by
    SWAP_ROUTER_LEDGER_SNAPSHOT; without one the ledger starts empty.
    """
    env = os.environ if environ is None else environ
    config = RouterConfig.from_env(env)
    snapshot = env.get("SWAP_ROUTER_LEDGER_SNAPSHOT")
    if snapshot:
        ledger = InMemoryLedger.from_snapshot(snapshot, config)
    else:
        logger.warning("empty_ledger", reason="SWAP_ROUTER_LEDGER_SNAPSHOT not set")
        ledger = InMemoryLedger(config)
    return SwapService(ledger, config=config)


def get_default_service() -> SwapService:
    """Process-wide service instance, created on first use."""
    global _default_service
    if _default_service is None:
        _default_service = create_default_service()
    return _default_service
