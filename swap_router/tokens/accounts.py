"""Associated token account derivation."""

from solders.pubkey import Pubkey

from swap_router.constants import ASSOCIATED_TOKEN_PROGRAM_ID
from swap_router.tokens.registry import TokenProgram


def derive_token_account(mint: Pubkey, owner: Pubkey, program: TokenProgram) -> Pubkey:
    """Derive the owner's associated token account for a mint.

    Seeds are (owner, token program id, mint) under the associated token
    program, so the same mint yields different accounts under the legacy and
    extended token programs.
    """
    address, _bump = Pubkey.find_program_address(
        [bytes(owner), bytes(program.program_id), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return address
