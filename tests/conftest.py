"""Pytest configuration and fixtures."""

from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from swap_router.ledger.memory import InMemoryLedger
from swap_router.routing.orchestrator import SwapOrchestrator
from swap_router.service import SwapService
from swap_router.tokens.registry import Token, TokenRegistry, default_token_registry

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Undo any structlog configuration a test applied (the CLI configures it)."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the fixtures directory path."""
    return FIXTURES_DIR


@pytest.fixture
def registry() -> TokenRegistry:
    """The Eclipse mainnet token registry."""
    return default_token_registry()


@pytest.fixture
def usdc(registry: TokenRegistry) -> Token:
    return registry.resolve("USDC")


@pytest.fixture
def eth(registry: TokenRegistry) -> Token:
    return registry.resolve("ETH")


@pytest.fixture
def ledger() -> InMemoryLedger:
    """An empty in-memory ledger that records its calls."""
    return InMemoryLedger(record_calls=True)


@pytest.fixture
def signer() -> Keypair:
    return Keypair()


@pytest.fixture
def owner(signer: Keypair) -> Pubkey:
    return signer.pubkey()


@pytest.fixture
def orchestrator(registry: TokenRegistry, ledger: InMemoryLedger) -> SwapOrchestrator:
    return SwapOrchestrator(registry, ledger)


@pytest.fixture
def service(registry: TokenRegistry, ledger: InMemoryLedger) -> SwapService:
    return SwapService(ledger, registry)
