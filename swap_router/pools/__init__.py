"""Pool discovery and pair resolution package."""

from .discovery import PoolDiscovery
from .pair import Candidate, PairResolver, build_pair, canonical_order, derive_pool_address
from .types import Pair, PoolRecord, fee_to_percent, format_fee_percent

__all__ = [
    "Candidate",
    "Pair",
    "PairResolver",
    "PoolDiscovery",
    "PoolRecord",
    "build_pair",
    "canonical_order",
    "derive_pool_address",
    "fee_to_percent",
    "format_fee_percent",
]
