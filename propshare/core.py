"""
Core types and collaborator protocols for the property share ledger.

This module provides the foundational pieces every other module builds on:
1. Constants and aliases: cooldown window, Identity, Holdings
2. Exceptions: PropertyLedgerError and one subclass per failure kind
3. Protocols: AdminCapability, ValueTransfer, Clock, NotificationSink, SupportsRollback
4. Immutable records: PropertyDetails, Notification
5. Validation helpers for caller-supplied integers

Nothing in this module mutates ledger state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Hashable, Optional, Protocol, runtime_checkable


# ============================================================================
# CONSTANTS
# ============================================================================

# Minimum elapsed time between two rent-rate updates (shared by all properties).
RENT_UPDATE_COOLDOWN = timedelta(days=365)

# Holder identities are any hashable value (wallet address, user id, ...).
Identity = Hashable

# Mapping from holder identity to share count for a single property.
Holdings = Dict[Identity, int]


# ============================================================================
# EXCEPTIONS
# ============================================================================

class PropertyLedgerError(Exception):
    """Base exception for all property ledger errors."""
    pass


class InvalidArgument(PropertyLedgerError, ValueError):
    """Raised when a caller-supplied numeric input is out of range or of the wrong type."""
    pass


class NotFound(PropertyLedgerError, KeyError):
    """Raised when a property id was never registered."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class Unauthorized(PropertyLedgerError):
    """Raised when a non-administrator calls an administrator-only operation."""
    pass


class Obsolete(PropertyLedgerError):
    """Raised when a mutating operation is attempted after the ledger was made obsolete."""
    pass


class InsufficientSupply(PropertyLedgerError):
    """Raised when a purchase asks for more shares than the pool holds."""
    pass


class InsufficientBalance(PropertyLedgerError):
    """Raised when a holder tries to sell more shares than they own."""
    pass


class InsufficientPayment(PropertyLedgerError):
    """Raised when the tendered payment does not cover the purchase price."""
    pass


class InvalidPayment(PropertyLedgerError):
    """Raised when a rent deposit does not match the required amount exactly."""
    pass


class NoAvailableShares(PropertyLedgerError):
    """Raised when dividends are distributed for a property whose pool is empty."""
    pass


class TooSoon(PropertyLedgerError):
    """Raised when the rent rate is updated before the cooldown window has elapsed."""
    pass


class TransferFailed(PropertyLedgerError):
    """Raised when an outgoing value transfer is rejected."""

    def __init__(self, message: str, recipient: Any = None, amount: Optional[int] = None):
        super().__init__(message)
        self.recipient = recipient
        self.amount = amount


class ReentrantCall(PropertyLedgerError):
    """Raised when a mutating entry point is invoked while another one is still running."""
    pass


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class AdminCapability(Protocol):
    """Decides whether a caller may perform administrator-only operations."""

    def is_administrator(self, caller: Identity) -> bool:
        ...


@runtime_checkable
class ValueTransfer(Protocol):
    """
    Pays an amount out of the pool to a recipient.

    Implementations raise TransferFailed if the recipient cannot accept funds.
    The call is synchronous: when it returns, the payment has been made.
    """

    def transfer(self, recipient: Identity, amount: int) -> None:
        ...


@runtime_checkable
class SupportsRollback(Protocol):
    """
    Transactional extension of ValueTransfer, required by PropertyLedger.

    The ledger takes a savepoint before running an operation and rolls the
    collaborator back to it if the operation fails, so a distribution that
    fails half-way leaves no payment behind.
    """

    def savepoint(self) -> Any:
        ...

    def rollback_to(self, token: Any) -> None:
        ...


@runtime_checkable
class Clock(Protocol):
    """Monotonic wall clock consulted by the lifecycle gate."""

    def now(self) -> datetime:
        ...


@runtime_checkable
class NotificationSink(Protocol):
    """
    Receives notifications after an operation commits.

    Delivery is best-effort: exceptions raised by emit() are logged by the
    ledger and never fail the triggering operation.
    """

    def emit(self, notification: 'Notification') -> None:
        ...


# ============================================================================
# ENUMS
# ============================================================================

class EventType(Enum):
    """Kinds of notification emitted by the ledger."""
    PROPERTY_REGISTERED = "property_registered"
    SHARES_PURCHASED = "shares_purchased"
    SHARES_SOLD = "shares_sold"
    RENT_RECEIVED = "rent_received"
    DIVIDENDS_DISTRIBUTED = "dividends_distributed"
    CONTRACT_OBSOLETED = "contract_obsoleted"
    RENT_RATE_UPDATED = "rent_rate_updated"


# ============================================================================
# IMMUTABLE RECORDS
# ============================================================================

@dataclass(frozen=True, slots=True)
class PropertyDetails:
    """
    Read-only snapshot of a property's fields.

    Attributes:
        property_id: Sequential id assigned at registration
        owner: Administrator who registered the property
        total_shares: Total share supply (fixed at registration)
        available_shares: Shares still held by the pool
        rental_payment: Per-share rent rate used to validate rent deposits
        property_value: Valuation used to price shares
    """
    property_id: int
    owner: Identity
    total_shares: int
    available_shares: int
    rental_payment: int
    property_value: int

    def as_tuple(self):
        """Return (owner, total_shares, available_shares, rental_payment, property_value)."""
        return (
            self.owner,
            self.total_shares,
            self.available_shares,
            self.rental_payment,
            self.property_value,
        )


@dataclass(frozen=True, slots=True)
class Notification:
    """
    Record of a committed operation.

    Attributes:
        event_type: What happened
        sequence: Monotonic position within the ledger's notification log
        timestamp: Clock time when the operation committed
        property_id: Property the operation referenced (None for ledger-wide events)
        caller: Identity that invoked the operation
        data: Event-specific payload (amounts, counts, rates)
    """
    event_type: EventType
    sequence: int
    timestamp: datetime
    property_id: Optional[int] = None
    caller: Optional[Identity] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        target = f" property={self.property_id}" if self.property_id is not None else ""
        return f"Notification(#{self.sequence} {self.event_type.value}{target} {self.data})"


# ============================================================================
# VALIDATION HELPERS
# ============================================================================

def require_int(name: str, value: Any) -> int:
    """
    Return value if it is a plain int, otherwise raise InvalidArgument.

    bool is rejected even though it subclasses int.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{name} must be an int, got {type(value).__name__}")
    return value


def require_positive(name: str, value: Any) -> int:
    """Return value if it is an int greater than zero, otherwise raise InvalidArgument."""
    value = require_int(name, value)
    if value <= 0:
        raise InvalidArgument(f"{name} must be positive, got {value}")
    return value


def require_non_negative(name: str, value: Any) -> int:
    """Return value if it is an int greater than or equal to zero, otherwise raise InvalidArgument."""
    value = require_int(name, value)
    if value < 0:
        raise InvalidArgument(f"{name} must be non-negative, got {value}")
    return value
