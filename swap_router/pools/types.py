"""Pool record and pair dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from solders.pubkey import Pubkey

from swap_router.constants import DEFAULT_TICK_SPACING, FEE_PERCENT_DIVISOR


@dataclass(frozen=True)
class PoolRecord:
    """A pool as enumerated by the ledger.

    The token pair is unordered: ``token_x``/``token_y`` are kept as received.
    Pools are read-only here; the ledger creates and mutates them.

    A ledger that reports no tick spacing gets DEFAULT_TICK_SPACING.
    """

    token_x: Pubkey
    token_y: Pubkey
    fee: int  # Fraction with 12 decimals (see FEE_DENOMINATOR)
    tick_spacing: int | None = DEFAULT_TICK_SPACING

    def __post_init__(self) -> None:
        if self.tick_spacing is None:
            object.__setattr__(self, "tick_spacing", DEFAULT_TICK_SPACING)
        if self.fee < 0:
            raise ValueError(f"Pool fee cannot be negative: {self.fee}")
        if self.tick_spacing <= 0:  # type: ignore[operator]
            raise ValueError(f"Tick spacing must be positive: {self.tick_spacing}")

    @property
    def spacing(self) -> int:
        """Tick spacing with the default already applied."""
        return self.tick_spacing or DEFAULT_TICK_SPACING

    @property
    def tokens(self) -> frozenset[Pubkey]:
        """Unordered token pair."""
        return frozenset((self.token_x, self.token_y))

    @property
    def fee_percent(self) -> Decimal:
        """Fee as percentage (e.g., 0.01 for 100_000_000)."""
        return fee_to_percent(self.fee)

    def trades(self, token_a: Pubkey, token_b: Pubkey) -> bool:
        """Check if this pool trades exactly the pair {token_a, token_b}."""
        return self.tokens == frozenset((token_a, token_b))


@dataclass(frozen=True)
class Pair:
    """Canonically ordered pair at a concrete fee tier.

    ``token_x`` is the byte-wise smaller mint. ``address`` is derived from
    the ordered tokens, fee and tick spacing.
    """

    token_x: Pubkey
    token_y: Pubkey
    fee: int
    tick_spacing: int
    address: Pubkey


def fee_to_percent(fee: int) -> Decimal:
    """Convert an exchange fee to a percentage."""
    return Decimal(fee) / FEE_PERCENT_DIVISOR


def format_fee_percent(fee: int, places: int = 4) -> str:
    """Format an exchange fee for display (e.g., ``"0.0100%"``)."""
    return f"{fee_to_percent(fee):.{places}f}%"
