"""Signer parsing."""

import json

from solders.keypair import Keypair
from solders.signature import Signature

from swap_router.errors import InvalidSignerError


def parse_signer(raw: str) -> Keypair:
    """Parse a secret key given as base58 or as a JSON integer array.

    Raises:
        InvalidSignerError: If the value is not a valid 64-byte keypair
    """
    value = raw.strip()
    try:
        if value.startswith("["):
            arr = json.loads(value)
            if not isinstance(arr, list):
                raise ValueError("Private key JSON must be an integer array")
            return Keypair.from_bytes(bytes(arr))
        # Checked base58 decode of the 64-byte secret
        return Keypair.from_bytes(bytes(Signature.from_string(value)))
    except (ValueError, TypeError) as e:
        raise InvalidSignerError("Invalid private key") from e
