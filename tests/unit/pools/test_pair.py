"""Tests for canonical ordering, pool address derivation and pair resolution."""

from decimal import Decimal

import pytest
from solders.pubkey import Pubkey

from swap_router.accounts.provisioner import derive_token_account
from swap_router.constants import INVARIANT_PROGRAM_ID
from swap_router.errors import InvalidPoolError
from swap_router.pools.pair import PairResolver, build_pair, canonical_order, derive_pool_address
from swap_router.pools.types import PoolRecord, fee_to_percent, format_fee_percent
from swap_router.tokens.registry import Token, TokenProgram
from tests.helpers import ETH, FEE_001, FEE_005, HIGH, LOW, OTHER, USDC, make_pool


class TestCanonicalOrder:
    def test_orders_by_bytes(self) -> None:
        assert canonical_order(LOW, HIGH) == (LOW, HIGH)
        assert canonical_order(HIGH, LOW) == (LOW, HIGH)

    def test_real_mints_order_is_symmetric(self) -> None:
        assert canonical_order(USDC, ETH) == canonical_order(ETH, USDC)

    def test_identical_tokens_rejected(self) -> None:
        with pytest.raises(InvalidPoolError):
            canonical_order(USDC, USDC)


class TestDerivePoolAddress:
    def test_matches_pool_seeds(self) -> None:
        expected, _ = Pubkey.find_program_address(
            [
                b"poolv1",
                bytes(LOW),
                bytes(HIGH),
                FEE_001.to_bytes(16, "little"),
                (1).to_bytes(2, "little"),
            ],
            INVARIANT_PROGRAM_ID,
        )
        assert derive_pool_address(LOW, HIGH, FEE_001, 1, INVARIANT_PROGRAM_ID) == expected

    def test_token_order_does_not_matter(self) -> None:
        a = derive_pool_address(USDC, ETH, FEE_001, 1, INVARIANT_PROGRAM_ID)
        b = derive_pool_address(ETH, USDC, FEE_001, 1, INVARIANT_PROGRAM_ID)
        assert a == b

    def test_fee_changes_address(self) -> None:
        a = derive_pool_address(USDC, ETH, FEE_001, 1, INVARIANT_PROGRAM_ID)
        b = derive_pool_address(USDC, ETH, FEE_005, 1, INVARIANT_PROGRAM_ID)
        assert a != b

    def test_tick_spacing_changes_address(self) -> None:
        a = derive_pool_address(USDC, ETH, FEE_001, 1, INVARIANT_PROGRAM_ID)
        b = derive_pool_address(USDC, ETH, FEE_001, 10, INVARIANT_PROGRAM_ID)
        assert a != b

    def test_program_changes_address(self) -> None:
        a = derive_pool_address(USDC, ETH, FEE_001, 1, INVARIANT_PROGRAM_ID)
        b = derive_pool_address(USDC, ETH, FEE_001, 1, OTHER)
        assert a != b


class TestPoolRecord:
    def test_missing_tick_spacing_defaults_to_one(self) -> None:
        pool = PoolRecord(USDC, ETH, FEE_001, tick_spacing=None)
        assert pool.tick_spacing == 1
        assert build_pair(pool, INVARIANT_PROGRAM_ID) == build_pair(
            PoolRecord(USDC, ETH, FEE_001, tick_spacing=1), INVARIANT_PROGRAM_ID
        )

    def test_negative_fee_rejected(self) -> None:
        with pytest.raises(ValueError):
            PoolRecord(USDC, ETH, -1)

    def test_zero_tick_spacing_rejected(self) -> None:
        with pytest.raises(ValueError):
            PoolRecord(USDC, ETH, FEE_001, tick_spacing=0)

    def test_trades_is_unordered(self) -> None:
        pool = make_pool(USDC, ETH)
        assert pool.trades(ETH, USDC)
        assert pool.trades(USDC, ETH)
        assert not pool.trades(USDC, OTHER)


class TestFeeFormatting:
    @pytest.mark.parametrize(
        ("fee", "percent", "display"),
        [
            (100_000_000, Decimal("0.01"), "0.0100%"),
            (500_000_000, Decimal("0.05"), "0.0500%"),
            (3_000_000_000, Decimal("0.3"), "0.3000%"),
            (0, Decimal(0), "0.0000%"),
        ],
    )
    def test_fee_percent(self, fee: int, percent: Decimal, display: str) -> None:
        assert fee_to_percent(fee) == percent
        assert format_fee_percent(fee) == display


class TestPairResolver:
    """Direction and account derivation for a request."""

    @pytest.fixture
    def low(self) -> Token:
        return Token("LOW", LOW, 6, TokenProgram.LEGACY)

    @pytest.fixture
    def high(self) -> Token:
        return Token("HIGH", HIGH, 9, TokenProgram.EXTENDED)

    @pytest.mark.parametrize("listed", [(LOW, HIGH), (HIGH, LOW)])
    def test_x_to_y_when_selling_canonical_x(
        self, low: Token, high: Token, owner: Pubkey, listed: tuple[Pubkey, Pubkey]
    ) -> None:
        """Direction follows canonical order whatever order the ledger lists."""
        pool = make_pool(*listed)
        candidate = PairResolver().resolve(pool, low, high, owner)

        assert candidate.pair.token_x == LOW
        assert candidate.x_to_y is True

    @pytest.mark.parametrize("listed", [(LOW, HIGH), (HIGH, LOW)])
    def test_y_to_x_when_selling_canonical_y(
        self, low: Token, high: Token, owner: Pubkey, listed: tuple[Pubkey, Pubkey]
    ) -> None:
        pool = make_pool(*listed)
        candidate = PairResolver().resolve(pool, high, low, owner)

        assert candidate.pair.token_x == LOW
        assert candidate.x_to_y is False

    def test_accounts_use_each_side_program(self, low: Token, high: Token, owner: Pubkey) -> None:
        candidate = PairResolver().resolve(make_pool(HIGH, LOW), high, low, owner)

        assert candidate.account_x == derive_token_account(LOW, owner, TokenProgram.LEGACY)
        assert candidate.account_y == derive_token_account(HIGH, owner, TokenProgram.EXTENDED)

    def test_no_owner_no_accounts(self, low: Token, high: Token) -> None:
        candidate = PairResolver().resolve(make_pool(LOW, HIGH), low, high)
        assert candidate.account_x is None
        assert candidate.account_y is None

    def test_address_and_fee_exposed(self, low: Token, high: Token) -> None:
        pool = make_pool(LOW, HIGH, fee=FEE_005, tick_spacing=10)
        candidate = PairResolver().resolve(pool, low, high)
        assert candidate.fee == FEE_005
        assert candidate.address == derive_pool_address(LOW, HIGH, FEE_005, 10, INVARIANT_PROGRAM_ID)

    def test_pool_for_other_pair_rejected(self, low: Token, high: Token) -> None:
        with pytest.raises(InvalidPoolError):
            PairResolver().resolve(make_pool(LOW, OTHER), low, high)

    def test_pool_sharing_one_token_rejected(self, low: Token, high: Token) -> None:
        """Matching only one side is not enough."""
        with pytest.raises(InvalidPoolError):
            PairResolver().resolve(make_pool(HIGH, OTHER), low, high)
