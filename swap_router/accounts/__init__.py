"""Owner token account package."""

from .keys import parse_signer
from .provisioner import AccountProvisioner, AccountRef, check_signer, derive_token_account

__all__ = [
    "AccountProvisioner",
    "AccountRef",
    "check_signer",
    "derive_token_account",
    "parse_signer",
]
