"""Pydantic models for in-memory ledger snapshots.

A snapshot is a JSON document describing pools, native balances and token
accounts. It seeds InMemoryLedger for local runs and tests.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from swap_router.models.types import PubkeyStr


class SnapshotPool(BaseModel):
    """A pool and the fixed exchange rate it quotes at."""

    token_x: PubkeyStr = Field(alias="tokenX")
    token_y: PubkeyStr = Field(alias="tokenY")
    fee: int = Field(ge=0, description="Fee as a fraction with 12 decimals")
    tick_spacing: int | None = Field(default=None, alias="tickSpacing", gt=0)
    rate: Decimal = Field(
        gt=0,
        description="Base units of token_y received per base unit of token_x, before fees",
    )
    max_amount_in: int | None = Field(default=None, alias="maxAmountIn", gt=0)
    price: int = Field(default=1, ge=0, description="Opaque post-swap price reported by simulations")

    model_config = {"populate_by_name": True}


class SnapshotAccount(BaseModel):
    """A pre-existing owner token account."""

    owner: PubkeyStr
    mint: PubkeyStr
    program: str = Field(default="legacy", pattern=r"^(legacy|extended)$")
    amount: int = Field(default=0, ge=0)


class LedgerSnapshot(BaseModel):
    """Full in-memory ledger state."""

    slot: int = Field(default=0, ge=0)
    pools: list[SnapshotPool] = Field(default_factory=list)
    balances: dict[PubkeyStr, int] = Field(
        default_factory=dict, description="Native balances in lamports, keyed by owner"
    )
    accounts: list[SnapshotAccount] = Field(default_factory=list)
