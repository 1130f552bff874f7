"""Owner token account derivation and provisioning.

Every (mint, owner, token program) has one deterministic associated token
account. The provisioner makes sure those accounts exist before a swap uses
them. It never owns account state; the ledger does.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from swap_router.config import DEFAULT_CONFIG, RouterConfig
from swap_router.constants import NATIVE_MINT
from swap_router.errors import (
    AccountProvisioningError,
    InsufficientBalanceError,
    InvalidParametersError,
    InvalidSignerError,
    LedgerError,
)
from swap_router.ledger.base import AccountSpec, LedgerClient
from swap_router.tokens.accounts import derive_token_account
from swap_router.tokens.registry import Token, TokenProgram

logger = structlog.get_logger()


@dataclass(frozen=True)
class AccountRef:
    """An owner's token account known to exist on the ledger."""

    owner: Pubkey
    token: Token
    address: Pubkey
    created: bool = False


def check_signer(owner: Pubkey, signer: Keypair) -> None:
    """Raise InvalidSignerError unless the signer controls ``owner``."""
    if signer.pubkey() != owner:
        raise InvalidSignerError(f"Signer {signer.pubkey()} does not control owner {owner}")


class AccountProvisioner:
    """Ensures owner token accounts exist, creating them through the ledger."""

    def __init__(self, ledger: LedgerClient, config: RouterConfig = DEFAULT_CONFIG) -> None:
        self.ledger = ledger
        self.config = config

    def address_for(self, token: Token, owner: Pubkey) -> Pubkey:
        return derive_token_account(token.mint, owner, token.program)

    def ensure(self, token: Token, owner: Pubkey, signer: Keypair) -> AccountRef:
        """Make sure the owner's account for ``token`` exists.

        Idempotent: when the account already exists only the existence check
        is performed.

        Raises:
            InvalidSignerError: If the signer does not control ``owner``
            AccountProvisioningError: If the ledger rejects the creation
        """
        check_signer(owner, signer)
        address = self.address_for(token, owner)

        if self._exists(address):
            return AccountRef(owner=owner, token=token, address=address)

        logger.info(
            "creating_token_account",
            token=token.symbol,
            owner=str(owner),
            address=str(address),
        )
        try:
            self.ledger.create_account(owner, token.mint, token.program, signer)
        except LedgerError as e:
            raise AccountProvisioningError(
                f"Failed to create {token.symbol} account {address}: {e}",
                accounts=[str(address)],
            ) from e

        return AccountRef(owner=owner, token=token, address=address, created=True)

    def ensure_all(
        self, tokens: Sequence[Token], owner: Pubkey, signer: Keypair
    ) -> list[AccountRef]:
        """Ensure several accounts exist with at most one ledger submission.

        Missing accounts are created in a single atomic operation set. If the
        ledger rejects it, none of them exist and the error names all of them.

        Returns:
            One AccountRef per distinct account, in ``tokens`` order
        """
        check_signer(owner, signer)

        refs: list[AccountRef] = []
        missing: list[AccountSpec] = []
        seen: set[Pubkey] = set()

        for token in tokens:
            address = self.address_for(token, owner)
            if address in seen:
                continue
            seen.add(address)

            if self._exists(address):
                refs.append(AccountRef(owner=owner, token=token, address=address))
            else:
                missing.append(AccountSpec(address=address, mint=token.mint, program=token.program))
                refs.append(AccountRef(owner=owner, token=token, address=address, created=True))

        if not missing:
            return refs

        addresses = [str(spec.address) for spec in missing]
        logger.info("creating_token_accounts", owner=str(owner), accounts=addresses)
        try:
            signature = self.ledger.create_accounts(owner, missing, signer)
        except LedgerError as e:
            logger.error(
                "token_account_batch_rejected",
                owner=str(owner),
                accounts=addresses,
                error=str(e),
            )
            raise AccountProvisioningError(
                f"Account creation rejected, no accounts created ({', '.join(addresses)}): {e}",
                accounts=addresses,
            ) from e

        logger.info("token_accounts_created", owner=str(owner), signature=signature)
        return refs

    def wrap_native(self, owner: Pubkey, lamports: int, signer: Keypair) -> tuple[Pubkey, str]:
        """Wrap native balance into the owner's wrapped-native account.

        The account is created in the same operation set when missing.

        Returns:
            Tuple of (wrapped-native account, transaction signature)

        Raises:
            InvalidParametersError: If ``lamports`` is not positive
            InsufficientBalanceError: If balance does not cover amount plus fee reserve
        """
        if lamports <= 0:
            raise InvalidParametersError("Amount must be greater than 0")
        check_signer(owner, signer)

        balance = self.ledger.get_balance(owner)
        required = lamports + self.config.wrap_fee_reserve
        if balance < required:
            raise InsufficientBalanceError(
                f"Insufficient native balance. Need {required} lamports, have {balance}"
            )

        account = derive_token_account(NATIVE_MINT, owner, TokenProgram.LEGACY)
        create = not self._exists(account)
        logger.info(
            "wrapping_native",
            owner=str(owner),
            lamports=lamports,
            account=str(account),
            create_account=create,
        )
        signature = self.ledger.wrap_native(owner, account, lamports, create, signer)
        return account, signature

    def token_balance(self, token: Token, owner: Pubkey) -> int:
        """Token balance in smallest units; 0 when the account does not exist."""
        info = self.ledger.get_account(self.address_for(token, owner))
        return info.amount if info is not None else 0

    def native_balance(self, owner: Pubkey) -> int:
        return self.ledger.get_balance(owner)

    def _exists(self, address: Pubkey) -> bool:
        return self.ledger.get_account(address) is not None
