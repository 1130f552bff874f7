"""Tests for owner token account derivation and provisioning."""

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from swap_router.accounts.provisioner import AccountProvisioner, derive_token_account
from swap_router.constants import ASSOCIATED_TOKEN_PROGRAM_ID, NATIVE_MINT
from swap_router.errors import (
    AccountProvisioningError,
    InsufficientBalanceError,
    InvalidParametersError,
    InvalidSignerError,
)
from swap_router.ledger.memory import InMemoryLedger
from swap_router.tokens.registry import Token, TokenProgram, TokenRegistry
from tests.helpers import USDC, fund_account


@pytest.fixture
def provisioner(ledger: InMemoryLedger) -> AccountProvisioner:
    return AccountProvisioner(ledger)


class TestDeriveTokenAccount:
    def test_matches_associated_token_seeds(self, owner: Pubkey) -> None:
        expected, _ = Pubkey.find_program_address(
            [bytes(owner), bytes(TokenProgram.EXTENDED.program_id), bytes(USDC)],
            ASSOCIATED_TOKEN_PROGRAM_ID,
        )
        assert derive_token_account(USDC, owner, TokenProgram.EXTENDED) == expected

    def test_deterministic(self, owner: Pubkey) -> None:
        first = derive_token_account(USDC, owner, TokenProgram.EXTENDED)
        assert derive_token_account(USDC, owner, TokenProgram.EXTENDED) == first

    def test_program_changes_address(self, owner: Pubkey) -> None:
        legacy = derive_token_account(USDC, owner, TokenProgram.LEGACY)
        extended = derive_token_account(USDC, owner, TokenProgram.EXTENDED)
        assert legacy != extended

    def test_owner_changes_address(self) -> None:
        a = derive_token_account(USDC, Keypair().pubkey(), TokenProgram.EXTENDED)
        b = derive_token_account(USDC, Keypair().pubkey(), TokenProgram.EXTENDED)
        assert a != b


class TestEnsure:
    """Single-account provisioning."""

    def test_creates_missing_account(
        self, provisioner: AccountProvisioner, ledger: InMemoryLedger, usdc: Token, signer: Keypair
    ) -> None:
        ref = provisioner.ensure(usdc, signer.pubkey(), signer)

        assert ref.created
        assert ref.address == derive_token_account(USDC, signer.pubkey(), TokenProgram.EXTENDED)
        info = ledger.get_account(ref.address)
        assert info is not None
        assert info.mint == USDC
        assert info.owner == signer.pubkey()

    def test_idempotent(
        self, provisioner: AccountProvisioner, ledger: InMemoryLedger, usdc: Token, signer: Keypair
    ) -> None:
        """Second call only checks existence."""
        first = provisioner.ensure(usdc, signer.pubkey(), signer)
        second = provisioner.ensure(usdc, signer.pubkey(), signer)

        assert first.address == second.address
        assert not second.created
        assert len(ledger.calls_to("create_account")) == 1

    def test_existing_account_not_recreated(
        self, provisioner: AccountProvisioner, ledger: InMemoryLedger, usdc: Token, signer: Keypair
    ) -> None:
        fund_account(ledger, signer.pubkey(), usdc, 10)
        ref = provisioner.ensure(usdc, signer.pubkey(), signer)
        assert not ref.created
        assert ledger.calls_to("create_account") == []

    def test_foreign_signer_rejected_before_ledger(
        self, provisioner: AccountProvisioner, ledger: InMemoryLedger, usdc: Token, owner: Pubkey
    ) -> None:
        with pytest.raises(InvalidSignerError):
            provisioner.ensure(usdc, owner, Keypair())
        assert ledger.calls == []

    def test_rejected_creation_raises(
        self, provisioner: AccountProvisioner, ledger: InMemoryLedger, usdc: Token, signer: Keypair
    ) -> None:
        ledger.rejected_mints.add(USDC)
        with pytest.raises(AccountProvisioningError) as exc_info:
            provisioner.ensure(usdc, signer.pubkey(), signer)
        assert exc_info.value.status_code == 502
        assert exc_info.value.accounts == [str(provisioner.address_for(usdc, signer.pubkey()))]


class TestEnsureAll:
    """Batch provisioning in one atomic operation set."""

    def test_single_submission_for_missing_accounts(
        self,
        provisioner: AccountProvisioner,
        ledger: InMemoryLedger,
        usdc: Token,
        eth: Token,
        signer: Keypair,
    ) -> None:
        refs = provisioner.ensure_all([usdc, eth], signer.pubkey(), signer)

        assert [ref.token.symbol for ref in refs] == ["USDC", "ETH"]
        assert all(ref.created for ref in refs)
        assert len(ledger.calls_to("create_accounts")) == 1
        assert ledger.calls_to("create_account") == []
        for ref in refs:
            assert ledger.get_account(ref.address) is not None

    def test_only_missing_accounts_submitted(
        self,
        provisioner: AccountProvisioner,
        ledger: InMemoryLedger,
        usdc: Token,
        eth: Token,
        signer: Keypair,
    ) -> None:
        fund_account(ledger, signer.pubkey(), usdc, 1_000_000)
        usdc_ref, eth_ref = provisioner.ensure_all([usdc, eth], signer.pubkey(), signer)

        assert not usdc_ref.created
        assert eth_ref.created
        (call,) = ledger.calls_to("create_accounts")
        assert call[2:] == (str(eth_ref.address),)

    def test_nothing_submitted_when_all_exist(
        self,
        provisioner: AccountProvisioner,
        ledger: InMemoryLedger,
        usdc: Token,
        eth: Token,
        signer: Keypair,
    ) -> None:
        fund_account(ledger, signer.pubkey(), usdc, 1)
        fund_account(ledger, signer.pubkey(), eth, 1)
        provisioner.ensure_all([usdc, eth], signer.pubkey(), signer)
        assert ledger.calls_to("create_accounts") == []

    def test_aliases_deduplicated(
        self,
        provisioner: AccountProvisioner,
        registry: TokenRegistry,
        signer: Keypair,
    ) -> None:
        """ETH and SOL share one account."""
        refs = provisioner.ensure_all(
            [registry.resolve("ETH"), registry.resolve("SOL")], signer.pubkey(), signer
        )
        assert len(refs) == 1

    def test_rejected_batch_creates_nothing(
        self,
        provisioner: AccountProvisioner,
        ledger: InMemoryLedger,
        usdc: Token,
        eth: Token,
        signer: Keypair,
    ) -> None:
        """Rejection of one account leaves neither account created."""
        ledger.rejected_mints.add(USDC)
        owner = signer.pubkey()

        with pytest.raises(AccountProvisioningError) as exc_info:
            provisioner.ensure_all([usdc, eth], owner, signer)

        usdc_account = provisioner.address_for(usdc, owner)
        eth_account = provisioner.address_for(eth, owner)
        assert ledger.get_account(usdc_account) is None
        assert ledger.get_account(eth_account) is None
        assert exc_info.value.accounts == [str(usdc_account), str(eth_account)]
        assert "no accounts created" in str(exc_info.value)


class TestWrapNative:
    def test_wraps_into_new_account(
        self, provisioner: AccountProvisioner, ledger: InMemoryLedger, signer: Keypair
    ) -> None:
        owner = signer.pubkey()
        ledger.fund_native(owner, 1_000_000_000)

        account, signature = provisioner.wrap_native(owner, 400_000_000, signer)

        assert signature
        assert account == derive_token_account(NATIVE_MINT, owner, TokenProgram.LEGACY)
        info = ledger.get_account(account)
        assert info is not None
        assert info.amount == 400_000_000
        assert ledger.get_balance(owner) == 600_000_000

    def test_tops_up_existing_account(
        self, provisioner: AccountProvisioner, ledger: InMemoryLedger, eth: Token, signer: Keypair
    ) -> None:
        owner = signer.pubkey()
        ledger.fund_native(owner, 1_000_000_000)
        fund_account(ledger, owner, eth, 5)

        account, _ = provisioner.wrap_native(owner, 100, signer)

        assert provisioner.token_balance(eth, owner) == 105
        assert ledger.calls_to("wrap_native")[0][-1] == "100"
        assert account == provisioner.address_for(eth, owner)

    def test_fee_reserve_required(
        self, provisioner: AccountProvisioner, ledger: InMemoryLedger, signer: Keypair
    ) -> None:
        """Balance must cover the amount plus the 5000 lamport reserve."""
        owner = signer.pubkey()
        ledger.fund_native(owner, 1_000_000)

        with pytest.raises(InsufficientBalanceError):
            provisioner.wrap_native(owner, 1_000_000 - 4_999, signer)
        assert ledger.calls_to("wrap_native") == []

        provisioner.wrap_native(owner, 1_000_000 - 5_000, signer)
        assert ledger.get_balance(owner) == 5_000

    @pytest.mark.parametrize("lamports", [0, -1])
    def test_non_positive_amount_rejected(
        self, provisioner: AccountProvisioner, ledger: InMemoryLedger, signer: Keypair, lamports: int
    ) -> None:
        with pytest.raises(InvalidParametersError):
            provisioner.wrap_native(signer.pubkey(), lamports, signer)
        assert ledger.calls == []


class TestBalances:
    def test_missing_account_reads_zero(
        self, provisioner: AccountProvisioner, usdc: Token, owner: Pubkey
    ) -> None:
        assert provisioner.token_balance(usdc, owner) == 0

    def test_native_balance(
        self, provisioner: AccountProvisioner, ledger: InMemoryLedger, owner: Pubkey
    ) -> None:
        ledger.fund_native(owner, 42)
        assert provisioner.native_balance(owner) == 42
