"""Tests for pool discovery and fee ranking."""

from swap_router.ledger.memory import InMemoryLedger
from swap_router.pools.discovery import PoolDiscovery
from tests.helpers import ETH, FEE_001, FEE_005, FEE_01, FEE_03, USDC, USDT, add_pool


class TestFindCandidates:
    def test_sorted_by_fee_ascending(self, ledger: InMemoryLedger) -> None:
        for fee in (FEE_03, FEE_001, FEE_01, FEE_005):
            add_pool(ledger, USDC, ETH, fee=fee)

        pools = PoolDiscovery(ledger).find_candidates(USDC, ETH)

        assert [pool.fee for pool in pools] == [FEE_001, FEE_005, FEE_01, FEE_03]

    def test_equal_fees_keep_enumeration_order(self, ledger: InMemoryLedger) -> None:
        """Stable sort: ties stay in ledger order."""
        add_pool(ledger, USDC, ETH, fee=FEE_005, tick_spacing=10)
        add_pool(ledger, USDC, ETH, fee=FEE_001, tick_spacing=1)
        add_pool(ledger, ETH, USDC, fee=FEE_005, tick_spacing=1)

        pools = PoolDiscovery(ledger).find_candidates(USDC, ETH)

        assert [(pool.fee, pool.tick_spacing) for pool in pools] == [
            (FEE_001, 1),
            (FEE_005, 10),
            (FEE_005, 1),
        ]

    def test_filters_other_pairs(self, ledger: InMemoryLedger) -> None:
        add_pool(ledger, USDC, ETH, fee=FEE_005)
        add_pool(ledger, USDT, USDC, fee=FEE_001)
        add_pool(ledger, USDT, ETH, fee=FEE_001)

        pools = PoolDiscovery(ledger).find_candidates(ETH, USDC)

        assert len(pools) == 1
        assert pools[0].tokens == frozenset((USDC, ETH))

    def test_argument_order_irrelevant(self, ledger: InMemoryLedger) -> None:
        add_pool(ledger, USDC, ETH, fee=FEE_001)
        discovery = PoolDiscovery(ledger)
        assert discovery.find_candidates(USDC, ETH) == discovery.find_candidates(ETH, USDC)

    def test_no_pools_is_empty_list(self, ledger: InMemoryLedger) -> None:
        add_pool(ledger, USDT, ETH)
        assert PoolDiscovery(ledger).find_candidates(USDC, ETH) == []

    def test_ledger_enumerated_once_per_call(self, ledger: InMemoryLedger) -> None:
        """No caching: each call enumerates the ledger exactly once."""
        add_pool(ledger, USDC, ETH)
        discovery = PoolDiscovery(ledger)

        discovery.find_candidates(USDC, ETH)
        assert len(ledger.calls_to("list_pools")) == 1

        add_pool(ledger, USDC, ETH, fee=FEE_005)
        assert len(discovery.find_candidates(USDC, ETH)) == 2
        assert len(ledger.calls_to("list_pools")) == 2


class TestMarketViews:
    def test_all_pools_unfiltered(self, ledger: InMemoryLedger) -> None:
        add_pool(ledger, USDC, ETH)
        add_pool(ledger, USDT, USDC)
        assert len(PoolDiscovery(ledger).all_pools()) == 2

    def test_pool_counts_by_mint(self, ledger: InMemoryLedger) -> None:
        add_pool(ledger, USDC, ETH, fee=FEE_001)
        add_pool(ledger, USDC, ETH, fee=FEE_005)
        add_pool(ledger, USDT, USDC)

        counts = PoolDiscovery(ledger).pool_counts_by_mint()

        assert counts[USDC] == 3
        assert counts[ETH] == 2
        assert counts[USDT] == 1
