"""Canonical pair ordering, pool address derivation and candidate resolution.

Pool addresses depend on token order, so every derivation goes through
canonical_order(). A fee or tick spacing that is not actually on the ledger
still derives a valid-looking address; it just points at nothing.
"""

from __future__ import annotations

from dataclasses import dataclass

from solders.pubkey import Pubkey

from swap_router.config import DEFAULT_CONFIG, RouterConfig
from swap_router.constants import POOL_SEED
from swap_router.errors import InvalidPoolError
from swap_router.pools.types import Pair, PoolRecord
from swap_router.tokens.accounts import derive_token_account
from swap_router.tokens.registry import Token


def canonical_order(token_a: Pubkey, token_b: Pubkey) -> tuple[Pubkey, Pubkey]:
    """Order two mints byte-wise, smaller first.

    Raises:
        InvalidPoolError: If both mints are the same
    """
    if token_a == token_b:
        raise InvalidPoolError(f"Pair needs two distinct tokens, got {token_a} twice")
    if bytes(token_a) < bytes(token_b):
        return token_a, token_b
    return token_b, token_a


def derive_pool_address(
    token_a: Pubkey, token_b: Pubkey, fee: int, tick_spacing: int, program_id: Pubkey
) -> Pubkey:
    """Derive a pool's program address.

    Seeds: POOL_SEED, token_x, token_y, fee as u128 LE, tick spacing as u16 LE.
    """
    token_x, token_y = canonical_order(token_a, token_b)
    address, _bump = Pubkey.find_program_address(
        [
            POOL_SEED,
            bytes(token_x),
            bytes(token_y),
            fee.to_bytes(16, "little"),
            tick_spacing.to_bytes(2, "little"),
        ],
        program_id,
    )
    return address


def build_pair(pool: PoolRecord, program_id: Pubkey) -> Pair:
    """Build the canonical Pair for a pool record."""
    token_x, token_y = canonical_order(pool.token_x, pool.token_y)
    tick_spacing = pool.spacing
    return Pair(
        token_x=token_x,
        token_y=token_y,
        fee=pool.fee,
        tick_spacing=tick_spacing,
        address=derive_pool_address(token_x, token_y, pool.fee, tick_spacing, program_id),
    )


@dataclass(frozen=True)
class Candidate:
    """A pool normalised for one request: direction and owner accounts.

    Invariant: ``x_to_y`` is True iff ``pair.token_x`` is the from-token mint.
    Accounts are None when the request has no owner (quotes).
    """

    pool: PoolRecord
    pair: Pair
    from_token: Token
    to_token: Token
    x_to_y: bool
    account_x: Pubkey | None = None
    account_y: Pubkey | None = None

    @property
    def address(self) -> Pubkey:
        return self.pair.address

    @property
    def fee(self) -> int:
        return self.pair.fee


class PairResolver:
    """Turns discovered pools into Candidates for a request."""

    def __init__(self, config: RouterConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    def resolve(
        self,
        pool: PoolRecord,
        from_token: Token,
        to_token: Token,
        owner: Pubkey | None = None,
    ) -> Candidate:
        """Resolve a pool into a Candidate.

        Account addresses are derived, not created.

        Raises:
            InvalidPoolError: If the pool does not trade exactly from/to
        """
        if not pool.trades(from_token.mint, to_token.mint):
            raise InvalidPoolError(
                f"Pool {pool.token_x}/{pool.token_y} does not trade "
                f"{from_token.symbol}/{to_token.symbol}"
            )

        pair = build_pair(pool, self.config.program_id)
        x_to_y = pair.token_x == from_token.mint

        account_x: Pubkey | None = None
        account_y: Pubkey | None = None
        if owner is not None:
            token_x, token_y = (from_token, to_token) if x_to_y else (to_token, from_token)
            account_x = derive_token_account(pair.token_x, owner, token_x.program)
            account_y = derive_token_account(pair.token_y, owner, token_y.program)

        return Candidate(
            pool=pool,
            pair=pair,
            from_token=from_token,
            to_token=to_token,
            x_to_y=x_to_y,
            account_x=account_x,
            account_y=account_y,
        )
