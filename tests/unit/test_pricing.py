"""
test_pricing.py - Unit tests for share pricing

Tests:
- Floor division pricing
- Rounding loss bounds
- Determinism of PropertyLedger.share_value
"""

import pytest

from propshare import (
    compute_share_value, rounding_loss,
    InvalidArgument, NotFound,
)


class TestComputeShareValue:

    def test_exact_division(self):
        assert compute_share_value(1000, 100) == 10

    def test_floors(self):
        assert compute_share_value(1000, 3) == 333
        assert compute_share_value(99, 100) == 0

    def test_zero_shares_rejected(self):
        with pytest.raises(InvalidArgument):
            compute_share_value(1000, 0)

    def test_negative_value_rejected(self):
        with pytest.raises(InvalidArgument):
            compute_share_value(-1, 10)

    def test_large_values(self):
        assert compute_share_value(10 ** 30, 10 ** 6) == 10 ** 24


class TestRoundingLoss:

    def test_no_loss_when_exact(self):
        assert rounding_loss(1000, 100) == 0

    def test_loss_below_total_shares(self):
        for value, shares in [(1000, 3), (999, 1000), (12345, 97)]:
            loss = rounding_loss(value, shares)
            assert 0 <= loss < shares
            assert shares * compute_share_value(value, shares) + loss == value


class TestLedgerShareValue:

    def test_share_value(self, listed_ledger):
        assert listed_ledger.share_value(0) == 10

    def test_unregistered(self, listed_ledger):
        with pytest.raises(NotFound):
            listed_ledger.share_value(1)

    def test_deterministic_across_trades(self, listed_ledger):
        first = listed_ledger.share_value(0)
        listed_ledger.purchase_shares("alice", 0, 5, 50)
        listed_ledger.sell_shares("alice", 0, 2)
        assert listed_ledger.share_value(0) == first
