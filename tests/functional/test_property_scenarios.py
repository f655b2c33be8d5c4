"""
test_property_scenarios.py - End-to-end ledger scenarios

Walks through complete property lifecycles: registration, trading, rent
collection, distribution, rent-rate updates and shutdown.
"""

from datetime import timedelta

import pytest

from propshare import (
    EventType, InvalidPayment, TooSoon, Obsolete,
)


class TestSinglePropertyLifecycle:
    """Register, sell, collect rent and distribute for one property."""

    def test_reference_scenario(self, ledger, payments, sink):
        pid = ledger.register_property("admin", 100, 10, 1000)
        assert pid == 0
        assert ledger.share_value(pid) == 10

        assert ledger.purchase_shares("alice", pid, 20, 200) == 200
        assert ledger.get_balance(pid, "alice") == 20
        assert ledger.get_property_details(pid).available_shares == 80

        assert ledger.required_rent(pid) == 800
        with pytest.raises(InvalidPayment):
            ledger.receive_rental_payment("admin", pid, 799)
        ledger.receive_rental_payment("admin", pid, 800)
        assert ledger.pool_balance == 800

        result = ledger.distribute_dividends("admin", pid)
        assert result.pool_balance == 800
        assert result.per_share == 8
        assert payments.received("alice") == 160
        assert [(p.holder, p.amount) for p in result.payouts] == [("alice", 160)]
        assert ledger.pool_balance == 640
        assert ledger.reserve_balance == 200
        assert ledger.verify_conservation()['valid']

        kinds = [n.event_type for n in sink.notifications]
        assert kinds == [
            EventType.PROPERTY_REGISTERED,
            EventType.SHARES_PURCHASED,
            EventType.RENT_RECEIVED,
            EventType.DIVIDENDS_DISTRIBUTED,
        ]

    def test_purchase_sale_round_trip(self, listed_ledger, payments):
        before = listed_ledger.get_property_details(0)
        listed_ledger.purchase_shares("carol", 0, 37, 370)
        listed_ledger.sell_shares("carol", 0, 37)
        assert listed_ledger.get_property_details(0) == before
        assert listed_ledger.get_balance(0, "carol") == 0
        assert listed_ledger.reserve_balance == 0
        assert payments.received("carol") == 370

    def test_holders_change_over_time(self, held_ledger, payments):
        held_ledger.sell_shares("alice", 0, 20)
        held_ledger.purchase_shares("carol", 0, 10, 100)
        assert held_ledger.list_holders(0) == ["bob", "carol"]

        # 60 shares available -> rent 600 -> 6 per share
        held_ledger.receive_rental_payment("admin", 0, held_ledger.required_rent(0))
        result = held_ledger.distribute_dividends("admin", 0)
        assert {p.holder: p.amount for p in result.payouts} == {"bob": 180, "carol": 60}

    def test_rent_rate_update_changes_required_rent(self, held_ledger, clock):
        held_ledger.update_annual_rent("admin", 12, property_id=0)
        assert held_ledger.required_rent(0) == 12 * 50
        clock.advance(timedelta(days=30))
        with pytest.raises(TooSoon):
            held_ledger.update_annual_rent("admin", 13, property_id=0)
        assert held_ledger.required_rent(0) == 12 * 50


class TestMultiPropertyLedger:

    def test_ids_and_books_are_independent(self, ledger):
        a = ledger.register_property("admin", 100, 10, 1000)
        b = ledger.register_property("admin", 40, 3, 4000)
        assert (a, b) == (0, 1)
        ledger.purchase_shares("alice", a, 5, 50)
        ledger.purchase_shares("alice", b, 4, 400)
        assert ledger.get_balance(a, "alice") == 5
        assert ledger.get_balance(b, "alice") == 4
        assert ledger.get_property_details(b).available_shares == 36

    def test_distribution_pays_only_that_propertys_holders(self, ledger, payments):
        a = ledger.register_property("admin", 100, 10, 1000)
        b = ledger.register_property("admin", 100, 10, 1000)
        ledger.purchase_shares("alice", a, 10, 100)
        ledger.purchase_shares("bob", b, 10, 100)
        ledger.receive_rental_payment("admin", a, 900)
        ledger.distribute_dividends("admin", a)
        assert payments.received("alice") == 90   # 900 // 100 = 9 per share
        assert payments.received("bob") == 0

    def test_pool_is_shared_between_properties(self, ledger, payments):
        a = ledger.register_property("admin", 100, 10, 1000)
        b = ledger.register_property("admin", 100, 10, 1000)
        ledger.purchase_shares("alice", a, 10, 100)
        ledger.purchase_shares("bob", b, 10, 100)
        ledger.receive_rental_payment("admin", a, 900)
        # b's holders are paid from rent collected for a
        ledger.distribute_dividends("admin", b)
        assert payments.received("bob") == 90

    def test_rent_cooldown_is_shared(self, ledger, clock):
        a = ledger.register_property("admin", 100, 10, 1000)
        b = ledger.register_property("admin", 100, 10, 1000)
        ledger.update_annual_rent("admin", 11, property_id=a)
        clock.advance(timedelta(days=364))
        with pytest.raises(TooSoon):
            ledger.update_annual_rent("admin", 12, property_id=b)
        clock.advance(timedelta(days=2))
        ledger.update_annual_rent("admin", 12, property_id=b)
        assert ledger.get_property_details(a).rental_payment == 11
        assert ledger.get_property_details(b).rental_payment == 12


class TestShutdown:

    def test_obsolete_ledger_is_read_only(self, held_ledger, payments, sink):
        held_ledger.receive_rental_payment("admin", 0, 500)
        held_ledger.distribute_dividends("admin", 0)
        paid = payments.total_paid
        held_ledger.set_obsolete("admin")

        with pytest.raises(Obsolete):
            held_ledger.sell_shares("bob", 0, 30)
        with pytest.raises(Obsolete):
            held_ledger.distribute_dividends("admin", 0)

        assert payments.total_paid == paid
        assert held_ledger.get_balance(0, "bob") == 30
        assert held_ledger.get_property_details(0).available_shares == 50
        assert sink.notifications[-1].event_type == EventType.CONTRACT_OBSOLETED
