"""Ledger client protocol and its value types.

The ledger is the system of record for pools, accounts and balances. The
router never owns ledger state; it only reads it and submits operations.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from solders.keypair import Keypair
from solders.pubkey import Pubkey

if TYPE_CHECKING:
    from swap_router.pools.types import Pair, PoolRecord
    from swap_router.tokens.registry import TokenProgram


class SimulationStatus(str, Enum):
    """Status reported by the exchange's swap simulation."""

    OK = "ok"
    WRONG_LIMIT = "wrong_limit"
    PRICE_LIMIT_REACHED = "price_limit_reached"
    TICK_NOT_FOUND = "tick_not_found"
    SWAP_STEP_LIMIT_REACHED = "swap_step_limit_reached"
    NO_GAIN_SWAP = "no_gain_swap"
    TOO_LARGE_GAP = "too_large_gap"
    LIMIT_REACHED = "limit_reached"


@dataclass(frozen=True)
class SimulationOutcome:
    """Read-only prediction of a swap against one pool.

    ``price_after_swap`` is opaque to the router: it is handed back to the
    ledger as the execution bound for the same pool.
    """

    status: SimulationStatus
    price_after_swap: int = 0
    amount_out: int = 0
    price_impact: Decimal | None = None

    @property
    def ok(self) -> bool:
        return self.status is SimulationStatus.OK


@dataclass(frozen=True)
class AccountInfo:
    """An existing token account."""

    address: Pubkey
    mint: Pubkey
    owner: Pubkey
    amount: int = 0


@dataclass(frozen=True)
class AccountSpec:
    """One token account to create inside an atomic operation set."""

    address: Pubkey
    mint: Pubkey
    program: TokenProgram


class LedgerClient(Protocol):
    """Protocol for ledger client implementations.

    Implementations raise LedgerError for failed calls. Adapters talking to a
    remote node are expected to bound every call with their own timeout.
    """

    def list_pools(self) -> list[PoolRecord]:
        """Enumerate every pool (no filter pushed down)."""
        ...

    def get_pool(self, address: Pubkey) -> PoolRecord:
        """Look up one pool by its derived address."""
        ...

    def simulate(
        self,
        x_to_y: bool,
        by_amount_in: bool,
        amount: int,
        slippage: Decimal,
        pool_address: Pubkey,
        max_step_budget: int,
    ) -> SimulationOutcome:
        """Simulate a swap against one pool without side effects.

        Args:
            x_to_y: Direction relative to the pool's canonical order
            by_amount_in: True when ``amount`` is the exact input
            amount: Amount in the input token's smallest unit
            slippage: Tolerance as a fraction (0.005 for 0.5%)
            pool_address: Derived pool address
            max_step_budget: Maximum tick crossings

        Returns:
            SimulationOutcome; non-OK statuses are not exceptions
        """
        ...

    def execute(
        self,
        x_to_y: bool,
        price_after_swap: int,
        pair: Pair,
        amount: int,
        slippage: Decimal,
        account_x: Pubkey,
        account_y: Pubkey,
        owner: Pubkey,
        signer: Keypair,
    ) -> str:
        """Execute a swap bounded by a fresh simulation's price.

        Returns:
            Transaction signature (receipt handle)
        """
        ...

    def get_account(self, address: Pubkey) -> AccountInfo | None:
        """Fetch a token account, or None if it does not exist."""
        ...

    def create_account(
        self, owner: Pubkey, mint: Pubkey, program: TokenProgram, signer: Keypair
    ) -> Pubkey:
        """Create the owner's associated token account for a mint."""
        ...

    def create_accounts(
        self, owner: Pubkey, specs: Sequence[AccountSpec], signer: Keypair
    ) -> str:
        """Create several accounts in one atomic operation set.

        Either every account is created or none is.
        """
        ...

    def get_balance(self, owner: Pubkey) -> int:
        """Native balance in lamports."""
        ...

    def wrap_native(
        self,
        owner: Pubkey,
        account: Pubkey,
        lamports: int,
        create_account: bool,
        signer: Keypair,
    ) -> str:
        """Move native balance into the wrapped-native token account.

        When ``create_account`` is set the account is created in the same
        atomic operation set.
        """
        ...

    def get_slot(self) -> int:
        """Current slot, used as a liveness check."""
        ...


__all__ = [
    "AccountInfo",
    "AccountSpec",
    "LedgerClient",
    "SimulationOutcome",
    "SimulationStatus",
]
