"""Tests for router configuration."""

from decimal import Decimal

import pytest

from swap_router.config import DEFAULT_CONFIG, RouterConfig
from swap_router.constants import INVARIANT_PROGRAM_ID
from tests.helpers import LOW


class TestRouterConfig:
    def test_defaults(self) -> None:
        assert DEFAULT_CONFIG.program_id == INVARIANT_PROGRAM_ID
        assert DEFAULT_CONFIG.max_slippage == Decimal(50)
        assert DEFAULT_CONFIG.default_slippage == Decimal("0.5")
        assert DEFAULT_CONFIG.max_step_budget == 40
        assert DEFAULT_CONFIG.wrap_fee_reserve == 5_000

    def test_empty_environment_keeps_defaults(self) -> None:
        assert RouterConfig.from_env({}) == DEFAULT_CONFIG

    def test_reads_environment(self) -> None:
        config = RouterConfig.from_env(
            {
                "SWAP_ROUTER_PROGRAM_ID": str(LOW),
                "SWAP_ROUTER_MAX_SLIPPAGE": "10",
                "SWAP_ROUTER_MAX_STEP_BUDGET": "12",
                "SWAP_ROUTER_REQUEST_TIMEOUT": "2.5",
            }
        )
        assert config.program_id == LOW
        assert config.max_slippage == Decimal(10)
        assert config.max_step_budget == 12
        assert config.request_timeout == 2.5
        assert config.default_slippage == DEFAULT_CONFIG.default_slippage

    def test_malformed_value_raises(self) -> None:
        with pytest.raises(ValueError):
            RouterConfig.from_env({"SWAP_ROUTER_MAX_STEP_BUDGET": "forty"})

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            DEFAULT_CONFIG.max_step_budget = 1  # type: ignore[misc]
