"""Pool discovery: enumerate ledger pools and filter to a token pair.

Nothing is cached between calls; pool state can change between requests.
"""

from __future__ import annotations

from collections import Counter

import structlog
from solders.pubkey import Pubkey

from swap_router.ledger.base import LedgerClient
from swap_router.pools.types import PoolRecord, format_fee_percent

logger = structlog.get_logger()


class PoolDiscovery:
    """Finds candidate pools for a token pair."""

    def __init__(self, ledger: LedgerClient) -> None:
        self.ledger = ledger

    def find_candidates(self, token_a: Pubkey, token_b: Pubkey) -> list[PoolRecord]:
        """Get every pool trading {token_a, token_b}, cheapest fee first.

        The ledger is enumerated once. Pools with equal fees keep their
        enumeration order (sorted() is stable). No match gives an empty list;
        the caller decides whether that is an error.

        Args:
            token_a: One mint of the pair (order does not matter)
            token_b: The other mint

        Returns:
            Matching pools sorted ascending by fee
        """
        pools = self.ledger.list_pools()
        matching = [pool for pool in pools if pool.trades(token_a, token_b)]
        ranked = sorted(matching, key=lambda pool: pool.fee)

        logger.debug(
            "pools_discovered",
            total_pools=len(pools),
            matching=len(ranked),
            fees=[format_fee_percent(pool.fee) for pool in ranked],
        )
        return ranked

    def all_pools(self) -> list[PoolRecord]:
        """Every pool on the ledger, in enumeration order."""
        return self.ledger.list_pools()

    def pool_counts_by_mint(self) -> Counter[Pubkey]:
        """Count how many pools each mint appears in."""
        counts: Counter[Pubkey] = Counter()
        for pool in self.ledger.list_pools():
            counts[pool.token_x] += 1
            counts[pool.token_y] += 1
        return counts
