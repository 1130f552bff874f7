"""In-memory ledger for tests and local runs.

Implements the full LedgerClient protocol against process-local state. Pools
quote at a fixed rate (no curve math) so routing behaviour can be exercised
deterministically. With ``record_calls`` set, calls are kept for test
assertions; individual pools can be told to fail simulation or execution.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal
from pathlib import Path

import structlog
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from swap_router.config import DEFAULT_CONFIG, RouterConfig
from swap_router.constants import FEE_DENOMINATOR, NATIVE_MINT
from swap_router.errors import LedgerError
from swap_router.ledger.base import (
    AccountInfo,
    AccountSpec,
    SimulationOutcome,
    SimulationStatus,
)
from swap_router.models.snapshot import LedgerSnapshot
from swap_router.pools.pair import build_pair
from swap_router.pools.types import Pair, PoolRecord
from swap_router.tokens.accounts import derive_token_account
from swap_router.tokens.registry import TokenProgram

logger = structlog.get_logger()


@dataclass
class MemoryPool:
    """Pool state held by InMemoryLedger.

    ``rate`` is base units of ``pair.token_y`` per base unit of
    ``pair.token_x`` (canonical order), before fees.
    """

    record: PoolRecord
    pair: Pair
    rate: Decimal
    max_amount_in: int | None = None
    price: int = 1


class InMemoryLedger:
    """LedgerClient backed by in-process dictionaries.

    Usage:
        ledger = InMemoryLedger(record_calls=True)
        ledger.add_pool(PoolRecord(usdc, eth, fee=100_000_000), rate=Decimal("0.4"))
        ledger.fund_native(owner, 10**9)

        # Make one pool fail
        ledger.simulation_overrides[address] = SimulationStatus.PRICE_LIMIT_REACHED
        ledger.execution_failures[address] = "account mismatch"
    """

    def __init__(self, config: RouterConfig = DEFAULT_CONFIG, record_calls: bool = False) -> None:
        self.config = config
        self.record_calls = record_calls
        self._pools: list[MemoryPool] = []
        self._pools_by_address: dict[Pubkey, MemoryPool] = {}
        self._accounts: dict[Pubkey, AccountInfo] = {}
        self._native: dict[Pubkey, int] = {}
        self._lock = threading.RLock()
        self.slot = 0
        self.simulation_overrides: dict[Pubkey, SimulationStatus] = {}
        self.execution_failures: dict[Pubkey, str] = {}
        self.rejected_mints: set[Pubkey] = set()
        self.offline = False
        self.calls: list[tuple[str, ...]] = []  # (method, *args as strings), when record_calls

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def add_pool(
        self,
        record: PoolRecord,
        rate: Decimal,
        max_amount_in: int | None = None,
        price: int = 1,
    ) -> Pair:
        """Add a pool and return its canonical pair (with derived address).

        ``rate`` is base units of ``record.token_y`` per base unit of
        ``record.token_x``, in the order the record lists them.
        """
        pair = build_pair(record, self.config.program_id)
        if pair.token_x != record.token_x:
            rate = Decimal(1) / rate
        pool = MemoryPool(
            record=record, pair=pair, rate=rate, max_amount_in=max_amount_in, price=price
        )
        with self._lock:
            if pair.address in self._pools_by_address:
                raise ValueError(f"Pool {pair.address} already exists")
            self._pools.append(pool)
            self._pools_by_address[pair.address] = pool
        return pair

    def fund_native(self, owner: Pubkey, lamports: int) -> None:
        with self._lock:
            self._native[owner] = self._native.get(owner, 0) + lamports

    def add_account(
        self,
        owner: Pubkey,
        mint: Pubkey,
        program: TokenProgram = TokenProgram.LEGACY,
        amount: int = 0,
    ) -> Pubkey:
        """Create (or top up) an owner's token account directly."""
        address = derive_token_account(mint, owner, program)
        with self._lock:
            existing = self._accounts.get(address)
            balance = amount + (existing.amount if existing else 0)
            self._accounts[address] = AccountInfo(
                address=address, mint=mint, owner=owner, amount=balance
            )
        return address

    @classmethod
    def from_snapshot(
        cls, path: str | Path, config: RouterConfig = DEFAULT_CONFIG
    ) -> InMemoryLedger:
        """Load a ledger from a JSON snapshot file.

        Raises:
            pydantic.ValidationError: If the snapshot does not match LedgerSnapshot
        """
        with open(path) as f:
            data = json.load(f)
        return cls.from_snapshot_data(LedgerSnapshot.model_validate(data), config)

    @classmethod
    def from_snapshot_data(
        cls, snapshot: LedgerSnapshot, config: RouterConfig = DEFAULT_CONFIG
    ) -> InMemoryLedger:
        ledger = cls(config)
        ledger.slot = snapshot.slot
        for pool in snapshot.pools:
            record = PoolRecord(
                token_x=Pubkey.from_string(pool.token_x),
                token_y=Pubkey.from_string(pool.token_y),
                fee=pool.fee,
                tick_spacing=pool.tick_spacing,
            )
            ledger.add_pool(record, pool.rate, pool.max_amount_in, pool.price)
        for owner, lamports in snapshot.balances.items():
            ledger.fund_native(Pubkey.from_string(owner), lamports)
        for account in snapshot.accounts:
            ledger.add_account(
                Pubkey.from_string(account.owner),
                Pubkey.from_string(account.mint),
                TokenProgram(account.program),
                account.amount,
            )
        logger.info(
            "ledger_snapshot_loaded",
            pools=len(snapshot.pools),
            owners=len(snapshot.balances),
            accounts=len(snapshot.accounts),
        )
        return ledger

    # ------------------------------------------------------------------
    # LedgerClient protocol
    # ------------------------------------------------------------------

    def list_pools(self) -> list[PoolRecord]:
        self._record("list_pools")
        self._check_online()
        with self._lock:
            return [pool.record for pool in self._pools]

    def get_pool(self, address: Pubkey) -> PoolRecord:
        self._record("get_pool", address)
        return self._pool(address).record

    def simulate(
        self,
        x_to_y: bool,
        by_amount_in: bool,
        amount: int,
        slippage: Decimal,
        pool_address: Pubkey,
        max_step_budget: int,
    ) -> SimulationOutcome:
        self._record("simulate", pool_address, x_to_y, amount)
        pool = self._pool(pool_address)

        override = self.simulation_overrides.get(pool_address)
        if override is not None:
            return SimulationOutcome(status=override)
        if max_step_budget <= 0:
            return SimulationOutcome(status=SimulationStatus.SWAP_STEP_LIMIT_REACHED)
        if not by_amount_in:
            raise LedgerError("Exact-output simulation is not supported")
        if pool.max_amount_in is not None and amount > pool.max_amount_in:
            return SimulationOutcome(status=SimulationStatus.LIMIT_REACHED)

        amount_out = self._amount_out(pool, x_to_y, amount)
        if amount_out <= 0:
            return SimulationOutcome(status=SimulationStatus.NO_GAIN_SWAP)

        price_impact = (
            Decimal(amount) / Decimal(pool.max_amount_in) if pool.max_amount_in else None
        )
        return SimulationOutcome(
            status=SimulationStatus.OK,
            price_after_swap=pool.price,
            amount_out=amount_out,
            price_impact=price_impact,
        )

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
        self._record("execute", pair.address, x_to_y, amount)
        pool = self._pool(pair.address)

        failure = self.execution_failures.get(pair.address)
        if failure is not None:
            raise LedgerError(failure)
        if signer.pubkey() != owner:
            raise LedgerError("Signature verification failed: signer is not the owner")
        if price_after_swap != pool.price:
            raise LedgerError("Pool price moved since simulation")

        with self._lock:
            acc_x = self._owned_account(account_x, owner, pair.token_x)
            acc_y = self._owned_account(account_y, owner, pair.token_y)
            source, target = (acc_x, acc_y) if x_to_y else (acc_y, acc_x)

            if source.amount < amount:
                raise LedgerError(
                    f"Insufficient funds in {source.address}: have {source.amount}, need {amount}"
                )
            amount_out = self._amount_out(pool, x_to_y, amount)
            self._accounts[source.address] = _with_amount(source, source.amount - amount)
            self._accounts[target.address] = _with_amount(target, target.amount + amount_out)
            self.slot += 1
            return self._sign(signer, b"swap", bytes(pair.address), amount)

    def get_account(self, address: Pubkey) -> AccountInfo | None:
        self._record("get_account", address)
        self._check_online()
        with self._lock:
            return self._accounts.get(address)

    def create_account(
        self, owner: Pubkey, mint: Pubkey, program: TokenProgram, signer: Keypair
    ) -> Pubkey:
        self._record("create_account", owner, mint)
        address = derive_token_account(mint, owner, program)
        self._apply_creations(owner, [AccountSpec(address=address, mint=mint, program=program)])
        self._sign(signer, b"create", bytes(address))
        return address

    def create_accounts(
        self, owner: Pubkey, specs: Sequence[AccountSpec], signer: Keypair
    ) -> str:
        self._record("create_accounts", owner, *[spec.address for spec in specs])
        self._apply_creations(owner, specs)
        return self._sign(signer, b"create", *[bytes(spec.address) for spec in specs])

    def get_balance(self, owner: Pubkey) -> int:
        self._record("get_balance", owner)
        self._check_online()
        with self._lock:
            return self._native.get(owner, 0)

    def wrap_native(
        self,
        owner: Pubkey,
        account: Pubkey,
        lamports: int,
        create_account: bool,
        signer: Keypair,
    ) -> str:
        self._record("wrap_native", owner, account, lamports)
        self._check_online()
        with self._lock:
            if signer.pubkey() != owner:
                raise LedgerError("Signature verification failed: signer is not the owner")
            balance = self._native.get(owner, 0)
            if balance < lamports:
                raise LedgerError(f"Insufficient lamports: have {balance}, need {lamports}")

            existing = self._accounts.get(account)
            if existing is None:
                if not create_account:
                    raise LedgerError(f"Account {account} does not exist")
                existing = AccountInfo(address=account, mint=NATIVE_MINT, owner=owner)

            self._native[owner] = balance - lamports
            self._accounts[account] = _with_amount(existing, existing.amount + lamports)
            self.slot += 1
        return self._sign(signer, b"wrap", bytes(account), lamports)

    def get_slot(self) -> int:
        self._record("get_slot")
        self._check_online()
        return self.slot

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def calls_to(self, method: str) -> list[tuple[str, ...]]:
        """Recorded calls for one method."""
        return [call for call in self.calls if call[0] == method]

    def _record(self, method: str, *args: object) -> None:
        if not self.record_calls:
            return
        self.calls.append((method, *[str(arg) for arg in args]))

    def _check_online(self) -> None:
        if self.offline:
            raise LedgerError("Ledger unreachable")

    def _pool(self, address: Pubkey) -> MemoryPool:
        self._check_online()
        with self._lock:
            pool = self._pools_by_address.get(address)
        if pool is None:
            raise LedgerError(f"Pool {address} not found")
        return pool

    def _amount_out(self, pool: MemoryPool, x_to_y: bool, amount: int) -> int:
        after_fee = Decimal(amount) * (FEE_DENOMINATOR - pool.pair.fee) / FEE_DENOMINATOR
        out = after_fee * pool.rate if x_to_y else after_fee / pool.rate
        return int(out.quantize(Decimal(1), rounding=ROUND_DOWN))

    def _owned_account(self, address: Pubkey, owner: Pubkey, mint: Pubkey) -> AccountInfo:
        account = self._accounts.get(address)
        if account is None:
            raise LedgerError(f"Account {address} does not exist")
        if account.owner != owner or account.mint != mint:
            raise LedgerError(f"Account {address} does not match owner/mint")
        return account

    def _apply_creations(self, owner: Pubkey, specs: Sequence[AccountSpec]) -> None:
        """Create every account or none of them."""
        self._check_online()
        with self._lock:
            for spec in specs:
                if spec.mint in self.rejected_mints:
                    raise LedgerError(f"Account creation rejected for mint {spec.mint}")
                if spec.address in self._accounts:
                    raise LedgerError(f"Account {spec.address} already exists")
            for spec in specs:
                self._accounts[spec.address] = AccountInfo(
                    address=spec.address, mint=spec.mint, owner=owner
                )
            self.slot += 1

    def _sign(self, signer: Keypair, *parts: bytes | int) -> str:
        payload = b"".join(
            part if isinstance(part, bytes) else part.to_bytes(16, "little") for part in parts
        )
        return str(signer.sign_message(payload + self.slot.to_bytes(8, "little")))


def _with_amount(account: AccountInfo, amount: int) -> AccountInfo:
    return AccountInfo(address=account.address, mint=account.mint, owner=account.owner, amount=amount)
