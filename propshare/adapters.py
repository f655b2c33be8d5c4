"""
adapters.py - In-memory collaborators

Reference implementations of the collaborator protocols in core.py:

- StaticAdministrators: AdminCapability backed by a fixed set of identities
- InMemoryTransfer: ValueTransfer that records payouts per recipient and
  supports savepoint/rollback for all-or-nothing payouts
- ManualClock: logical clock that only moves forward
- SystemClock: wall clock (UTC)
- CollectingSink: NotificationSink that keeps every notification in a list

Production deployments replace these with real payment rails and identity
services; the ledger only depends on the protocols.
"""

from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .core import (
    Identity, Notification, EventType,
    TransferFailed,
    require_positive,
)


class StaticAdministrators:
    """AdminCapability with a fixed (but editable) set of administrators."""

    def __init__(self, admins: Iterable[Identity]):
        self.admins: Set[Identity] = set(admins)

    def is_administrator(self, caller: Identity) -> bool:
        return caller in self.admins

    def grant(self, identity: Identity) -> None:
        self.admins.add(identity)

    def revoke(self, identity: Identity) -> None:
        self.admins.discard(identity)

    def __repr__(self) -> str:
        return f"StaticAdministrators({len(self.admins)} admins)"


class InMemoryTransfer:
    """
    ValueTransfer that credits an in-memory account per recipient.

    Recipients listed in `rejecting` cannot accept funds; transfers to them
    raise TransferFailed. Every accepted transfer is appended to `history`.

    Example:
        payments = InMemoryTransfer(rejecting={"contract_wallet"})
        payments.transfer("alice", 160)
        payments.received("alice")      # 160
    """

    def __init__(self, rejecting: Optional[Iterable[Identity]] = None):
        self.rejecting: Set[Identity] = set(rejecting or ())
        self.history: List[Tuple[Identity, int]] = []
        self._received: Dict[Identity, int] = {}

    def transfer(self, recipient: Identity, amount: int) -> None:
        require_positive("amount", amount)
        if recipient in self.rejecting:
            raise TransferFailed(
                f"Recipient {recipient!r} cannot accept {amount}",
                recipient=recipient,
                amount=amount,
            )
        self.history.append((recipient, amount))
        self._received[recipient] = self._received.get(recipient, 0) + amount

    def received(self, recipient: Identity) -> int:
        """Total amount paid to recipient so far."""
        return self._received.get(recipient, 0)

    @property
    def total_paid(self) -> int:
        return sum(amount for _, amount in self.history)

    def savepoint(self) -> int:
        return len(self.history)

    def rollback_to(self, token: int) -> None:
        """Undo every transfer made after the savepoint."""
        for recipient, amount in self.history[token:]:
            remaining = self._received[recipient] - amount
            if remaining:
                self._received[recipient] = remaining
            else:
                del self._received[recipient]
        del self.history[token:]

    def __repr__(self) -> str:
        return f"InMemoryTransfer({len(self.history)} transfers, total={self.total_paid})"


class ManualClock:
    """
    Logical clock for simulations and tests.

    Time can only move forward, never backward.
    """

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime(2025, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta) -> datetime:
        """Move the clock forward by delta and return the new time."""
        if delta < timedelta(0):
            raise ValueError(f"Cannot move time backwards: {delta}")
        self._now = self._now + delta
        return self._now

    def set(self, new_time: datetime) -> None:
        """
        Jump to new_time.

        Raises:
            ValueError: If new_time is before the current time
        """
        if new_time < self._now:
            raise ValueError(f"Cannot move time backwards: {new_time} < {self._now}")
        self._now = new_time

    def __repr__(self) -> str:
        return f"ManualClock({self._now.isoformat()})"


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class CollectingSink:
    """NotificationSink that keeps everything it receives."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def emit(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def of_type(self, event_type: EventType) -> List[Notification]:
        return [n for n in self.notifications if n.event_type == event_type]

    def clear(self) -> None:
        self.notifications.clear()

    def __len__(self) -> int:
        return len(self.notifications)
