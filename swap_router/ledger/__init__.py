"""Ledger client package.

- base.py: LedgerClient protocol and value types
- memory.py: InMemoryLedger, a process-local implementation
"""

from .base import AccountInfo, AccountSpec, LedgerClient, SimulationOutcome, SimulationStatus
from .memory import InMemoryLedger, MemoryPool

__all__ = [
    "AccountInfo",
    "AccountSpec",
    "InMemoryLedger",
    "LedgerClient",
    "MemoryPool",
    "SimulationOutcome",
    "SimulationStatus",
]
