"""Shared type definitions for API and snapshot models."""

from decimal import ROUND_DOWN, Decimal
from typing import Annotated, Any

from pydantic import BeforeValidator, Field
from solders.pubkey import Pubkey


def validate_pubkey(value: Any) -> str:
    """Validate that a value is a base58 32-byte public key.

    Args:
        value: Value to validate (string or Pubkey)

    Returns:
        The key as a base58 string

    Raises:
        ValueError: If value is not a valid public key
    """
    if isinstance(value, Pubkey):
        return str(value)
    if not isinstance(value, str):
        raise ValueError(f"Public key must be a string, got {type(value).__name__}")
    try:
        return str(Pubkey.from_string(value))
    except ValueError as err:
        raise ValueError(f"Invalid public key: '{value}'") from err


# Base58 public key (mint, owner, account or program)
PubkeyStr = Annotated[
    str,
    BeforeValidator(validate_pubkey),
    Field(description="Base58-encoded 32-byte public key"),
]


def to_base_units(amount: Decimal, decimals: int) -> int:
    """Convert a human amount to the token's smallest unit, rounding down.

    Examples:
        to_base_units(Decimal("0.5"), 9) == 500_000_000
    """
    scaled = (amount * (Decimal(10) ** decimals)).quantize(Decimal(1), rounding=ROUND_DOWN)
    return int(scaled)


def from_base_units(amount: int, decimals: int) -> Decimal:
    """Convert smallest units back to a human amount."""
    return Decimal(amount) / (Decimal(10) ** decimals)
