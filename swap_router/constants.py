"""Protocol constants for the Invariant swap router.

Centralizes well-known program ids, mints and exchange parameters.
"""

from solders.pubkey import Pubkey


def _validate_pubkey(name: str, address: str) -> Pubkey:
    """Parse and return a base58 public key.

    Args:
        name: Name of the key (for error messages)
        address: The base58 string to parse

    Returns:
        The parsed Pubkey

    Raises:
        ValueError: If the address is not a valid 32-byte base58 key
    """
    try:
        return Pubkey.from_string(address)
    except ValueError as err:
        raise ValueError(f"Invalid {name} address: {address}") from err


# Invariant program on Eclipse mainnet
INVARIANT_PROGRAM_ID = _validate_pubkey(
    "INVARIANT_PROGRAM_ID", "iNvTyprs4TX8m6UeUEkeqDFjAL9zRCRWcexK9Sd4WEU"
)

# SPL token programs
TOKEN_PROGRAM_ID = _validate_pubkey("TOKEN_PROGRAM_ID", "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
TOKEN_2022_PROGRAM_ID = _validate_pubkey(
    "TOKEN_2022_PROGRAM_ID", "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"
)
ASSOCIATED_TOKEN_PROGRAM_ID = _validate_pubkey(
    "ASSOCIATED_TOKEN_PROGRAM_ID", "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
)

# Wrapped native token. Eclipse displays it as ETH, SVM tooling calls it SOL.
NATIVE_MINT = _validate_pubkey("NATIVE_MINT", "So11111111111111111111111111111111111111112")

# Well-known token mints on Eclipse mainnet
USDT_MINT = _validate_pubkey("USDT", "CEBP3CqAbW4zdZA57H2wfaSG1QNdzQ72GiQEbQXyW9Tm")
USDC_MINT = _validate_pubkey("USDC", "AKEWE7Bgh87GPp171b4cJPSSZfmZwQ3KaqYqXoKLNAEE")
WBTC_MINT = _validate_pubkey("WBTC", "9n4nbM75f5Ui33ZbPYXn59EwSgE8CGsHtAeTH5YFeJ9E")

# Seed prefix for pool program-derived addresses
POOL_SEED = b"poolv1"

# Pool fees are fractions with 12 decimal places: 10**12 == 100%.
# 100_000_000 is therefore 0.01%.
FEE_DENOMINATOR = 10**12
FEE_PERCENT_DIVISOR = FEE_DENOMINATOR // 100

# Tick spacing assumed when a pool record does not carry one
DEFAULT_TICK_SPACING = 1

# Maximum tick crossings per swap instruction for native-token swaps
TICK_CROSSES_PER_IX_NATIVE_TOKEN = 40

# Native balance kept back for transaction fees when wrapping (lamports)
WRAP_FEE_RESERVE = 5_000

NATIVE_DECIMALS = 9
