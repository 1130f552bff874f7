"""Pydantic models for the swap router API and ledger snapshots."""

from .api import (
    BalanceRequest,
    ErrorResponse,
    QuoteRequest,
    SwapApiRequest,
    WalletInfoRequest,
    WrapRequest,
)
from .snapshot import LedgerSnapshot, SnapshotAccount, SnapshotPool
from .types import PubkeyStr, from_base_units, to_base_units, validate_pubkey

__all__ = [
    "BalanceRequest",
    "ErrorResponse",
    "LedgerSnapshot",
    "PubkeyStr",
    "QuoteRequest",
    "SnapshotAccount",
    "SnapshotPool",
    "SwapApiRequest",
    "WalletInfoRequest",
    "WrapRequest",
    "from_base_units",
    "to_base_units",
    "validate_pubkey",
]
