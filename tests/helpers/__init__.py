"""Test helpers module for shared test utilities.

- constants: Mints and fee tiers
- factories: Pool and account factory functions
"""

from tests.helpers.constants import (
    ETH,
    FEE_001,
    FEE_005,
    FEE_01,
    FEE_03,
    HIGH,
    LOW,
    OTHER,
    USDC,
    USDT,
    WBTC,
)
from tests.helpers.factories import add_pool, fund_account, make_pool

__all__ = [
    # Constants
    "ETH",
    "USDC",
    "USDT",
    "WBTC",
    "LOW",
    "HIGH",
    "OTHER",
    "FEE_001",
    "FEE_005",
    "FEE_01",
    "FEE_03",
    # Factories
    "add_pool",
    "fund_account",
    "make_pool",
]
