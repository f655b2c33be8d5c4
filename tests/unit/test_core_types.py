"""
test_core_types.py - Unit tests for core types and validation helpers

Tests:
- Exception hierarchy
- PropertyDetails and Notification records
- require_int / require_positive / require_non_negative
- Collaborator protocols
"""

import pytest
from datetime import datetime, timezone

from propshare import (
    PropertyLedgerError, InvalidArgument, NotFound, Unauthorized, Obsolete,
    InsufficientSupply, InsufficientBalance, InsufficientPayment, InvalidPayment,
    NoAvailableShares, TooSoon, TransferFailed, ReentrantCall,
    PropertyDetails, Notification, EventType,
    AdminCapability, ValueTransfer, SupportsRollback, Clock, NotificationSink,
    StaticAdministrators, InMemoryTransfer, ManualClock, CollectingSink,
)
from propshare.core import require_int, require_positive, require_non_negative


class TestExceptions:
    """Every failure kind is a PropertyLedgerError and distinguishable."""

    @pytest.mark.parametrize("exc", [
        InvalidArgument, NotFound, Unauthorized, Obsolete,
        InsufficientSupply, InsufficientBalance, InsufficientPayment,
        InvalidPayment, NoAvailableShares, TooSoon, TransferFailed, ReentrantCall,
    ])
    def test_subclasses_base(self, exc):
        assert issubclass(exc, PropertyLedgerError)

    def test_invalid_argument_is_value_error(self):
        assert issubclass(InvalidArgument, ValueError)

    def test_not_found_is_key_error(self):
        assert issubclass(NotFound, KeyError)

    def test_not_found_message_not_quoted(self):
        assert str(NotFound("Property 7 not registered")) == "Property 7 not registered"

    def test_transfer_failed_carries_details(self):
        e = TransferFailed("rejected", recipient="alice", amount=50)
        assert e.recipient == "alice"
        assert e.amount == 50
        assert str(e) == "rejected"


class TestPropertyDetails:

    def test_as_tuple_order(self):
        d = PropertyDetails(
            property_id=0, owner="admin", total_shares=100,
            available_shares=80, rental_payment=10, property_value=1000,
        )
        assert d.as_tuple() == ("admin", 100, 80, 10, 1000)

    def test_frozen(self):
        d = PropertyDetails(0, "admin", 100, 100, 10, 1000)
        with pytest.raises(AttributeError):
            d.available_shares = 5


class TestNotification:

    def test_repr_includes_event_and_property(self):
        n = Notification(
            event_type=EventType.SHARES_PURCHASED,
            sequence=3,
            timestamp=datetime(2025, 1, 1, tzinfo=timezone.utc),
            property_id=0,
            caller="alice",
            data={'count': 20},
        )
        text = repr(n)
        assert "#3" in text
        assert "shares_purchased" in text
        assert "property=0" in text

    def test_seven_event_types(self):
        assert len(EventType) == 7


class TestValidationHelpers:

    def test_require_int_accepts_int(self):
        assert require_int("x", 5) == 5

    @pytest.mark.parametrize("value", [1.0, "1", None, True, False])
    def test_require_int_rejects_non_int(self, value):
        with pytest.raises(InvalidArgument, match="must be an int"):
            require_int("x", value)

    def test_require_positive(self):
        assert require_positive("x", 1) == 1
        with pytest.raises(InvalidArgument, match="must be positive"):
            require_positive("x", 0)
        with pytest.raises(InvalidArgument):
            require_positive("x", -3)

    def test_require_non_negative(self):
        assert require_non_negative("x", 0) == 0
        with pytest.raises(InvalidArgument, match="non-negative"):
            require_non_negative("x", -1)

    def test_big_ints_supported(self):
        huge = 10 ** 40
        assert require_positive("x", huge) == huge


class TestProtocols:
    """Reference adapters satisfy the collaborator protocols."""

    def test_admin_capability(self):
        assert isinstance(StaticAdministrators({"a"}), AdminCapability)

    def test_value_transfer(self):
        payments = InMemoryTransfer()
        assert isinstance(payments, ValueTransfer)
        assert isinstance(payments, SupportsRollback)

    def test_clock(self):
        assert isinstance(ManualClock(), Clock)

    def test_sink(self):
        assert isinstance(CollectingSink(), NotificationSink)

    def test_plain_transfer_without_rollback(self):
        class Wire:
            def transfer(self, recipient, amount):
                pass

        assert isinstance(Wire(), ValueTransfer)
        assert not isinstance(Wire(), SupportsRollback)
