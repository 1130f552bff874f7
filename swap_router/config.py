"""Router configuration."""

import os
from dataclasses import dataclass, field
from decimal import Decimal

from solders.pubkey import Pubkey

from swap_router.constants import (
    INVARIANT_PROGRAM_ID,
    TICK_CROSSES_PER_IX_NATIVE_TOKEN,
    WRAP_FEE_RESERVE,
)


@dataclass(frozen=True)
class RouterConfig:
    """Centralized configuration for swap routing.

    Attributes:
        program_id: Exchange program that owns the pools (pool addresses are
            derived under it)
        max_slippage: Upper bound for request slippage, in percent (inclusive)
        default_slippage: Slippage applied when a request omits it, in percent
        max_step_budget: Maximum tick crossings a simulation may take
        wrap_fee_reserve: Lamports kept back for fees when wrapping native balance
        request_timeout: Seconds an API request may spend in the router before
            it is abandoned
        ledger_timeout: Seconds a ledger adapter should allow for one call
    """

    program_id: Pubkey = field(default=INVARIANT_PROGRAM_ID)
    max_slippage: Decimal = Decimal("50")
    default_slippage: Decimal = Decimal("0.5")
    max_step_budget: int = TICK_CROSSES_PER_IX_NATIVE_TOKEN
    wrap_fee_reserve: int = WRAP_FEE_RESERVE
    request_timeout: float = 60.0
    ledger_timeout: float = 20.0

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "RouterConfig":
        """Build a config from ``SWAP_ROUTER_*`` environment variables.

        Unset variables keep their defaults.

        Raises:
            ValueError: If a variable is present but malformed
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        program_id = env.get("SWAP_ROUTER_PROGRAM_ID")
        return cls(
            program_id=Pubkey.from_string(program_id) if program_id else defaults.program_id,
            max_slippage=Decimal(env.get("SWAP_ROUTER_MAX_SLIPPAGE", str(defaults.max_slippage))),
            default_slippage=Decimal(
                env.get("SWAP_ROUTER_DEFAULT_SLIPPAGE", str(defaults.default_slippage))
            ),
            max_step_budget=int(
                env.get("SWAP_ROUTER_MAX_STEP_BUDGET", str(defaults.max_step_budget))
            ),
            wrap_fee_reserve=int(
                env.get("SWAP_ROUTER_WRAP_FEE_RESERVE", str(defaults.wrap_fee_reserve))
            ),
            request_timeout=float(
                env.get("SWAP_ROUTER_REQUEST_TIMEOUT", str(defaults.request_timeout))
            ),
            ledger_timeout=float(
                env.get("SWAP_ROUTER_LEDGER_TIMEOUT", str(defaults.ledger_timeout))
            ),
        )


# Default configuration instance
DEFAULT_CONFIG = RouterConfig()
