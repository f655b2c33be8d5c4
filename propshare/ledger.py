"""
ledger.py - Stateful property share ledger

PropertyLedger is the only object that mutates state. It wires the registry,
share books, pricing, trading, distribution and lifecycle gate together and
exposes the public entry points.

Key responsibilities:
    - Serializes every call behind one lock, so one call commits before the
      next begins. A collaborator may read the ledger from inside a call but
      may not start another mutating call (ReentrantCall)
    - Runs every mutating call inside a scoped rollback: if anything fails,
      including an outgoing transfer, all state touched by the call is
      restored and the transfer collaborator is rolled back to its savepoint
    - Checks authorization through the injected AdminCapability
    - Keeps two funds: the pool (rent income, paid out as dividends) and
      the reserve (purchase proceeds, paid out as refunds and buy-backs)
    - Commits ledger state before any value transfer is attempted
    - Emits notifications only after the call commits; sink failures are
      logged and never fail the call
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple
import threading

from .adapters import SystemClock
from .config import LedgerConfig
from .core import (
    # Types
    EventType, Identity, Notification, PropertyDetails,
    # Protocols
    AdminCapability, Clock, NotificationSink, SupportsRollback, ValueTransfer,
    # Exceptions
    InvalidArgument, ReentrantCall, TransferFailed, Unauthorized,
)
from .distribution import (
    DistributionResult,
    compute_dividend_payouts, required_rent, validate_rent_payment,
)
from .lifecycle import LifecycleGate, RentUpdate
from .logging import get_logger
from .pricing import compute_share_value
from .registry import PropertyRegistry
from .trading import PurchaseQuote, SaleQuote, compute_purchase, compute_sale


logger = get_logger(__name__)

# Fund names
POOL = "pool"
RESERVE = "reserve"


class PropertyLedger:
    """
    Fractional-ownership ledger for real-estate-backed shares.

    Implements the full set of entry points: registration, trading against
    the pool, rent receipt, dividend distribution, rent-rate updates and
    obsoletion. Every entry point takes the calling identity as its first
    argument.

    Thread Safety:
        Safe to share between threads; all calls are serialized.

    Example:
        ledger = PropertyLedger(
            admin=StaticAdministrators({"admin"}),
            transfers=InMemoryTransfer(),
            clock=ManualClock(),
        )
        pid = ledger.register_property("admin", 100, 10, 1000)
        ledger.purchase_shares("alice", pid, 20, 200)      # 200
        ledger.receive_rental_payment("admin", pid, 800)
        ledger.distribute_dividends("admin", pid)          # alice receives 160
    """

    def __init__(
        self,
        admin: AdminCapability,
        transfers: ValueTransfer,
        clock: Optional[Clock] = None,
        sink: Optional[NotificationSink] = None,
        config: Optional[LedgerConfig] = None,
    ):
        """
        Create a ledger.

        Args:
            admin: Decides who may call administrator-only operations
            transfers: Pays funds out of the pool and reserve; must implement
                SupportsRollback so failed payouts can be undone
            clock: Time source for the rent cooldown (default: SystemClock)
            sink: Optional receiver for committed notifications
            config: Ledger settings (default: LedgerConfig())

        Raises:
            InvalidArgument: transfers does not support savepoints
        """
        if not isinstance(transfers, SupportsRollback):
            raise InvalidArgument(
                f"{type(transfers).__name__} must implement savepoint() and rollback_to()"
            )
        self.config = config or LedgerConfig()
        self.name = self.config.name
        self.admin = admin
        self.transfers = transfers
        self.clock = clock or SystemClock()
        self.sink = sink

        self.registry = PropertyRegistry()
        self.gate = LifecycleGate(self.config.rent_update_cooldown)
        self._funds: Dict[str, int] = {POOL: 0, RESERVE: 0}
        # Audit trail of committed notifications
        self.notifications: List[Notification] = []
        self._next_sequence: int = 0
        self._pending: List[Tuple[EventType, Optional[int], Identity, Dict[str, Any]]] = []
        # Reads stay available to collaborators called from inside an operation
        self._lock = threading.RLock()
        self._active: bool = False

    # ========================================================================
    # READ-ONLY QUERIES
    # ========================================================================

    @property
    def pool_balance(self) -> int:
        """Distributable funds (rent income, all properties)."""
        with self._lock:
            return self._funds[POOL]

    @property
    def reserve_balance(self) -> int:
        """Purchase proceeds available for refunds and buy-backs (all properties)."""
        with self._lock:
            return self._funds[RESERVE]

    @property
    def is_obsolete(self) -> bool:
        with self._lock:
            return self.gate.is_obsolete

    @property
    def last_rent_update(self) -> Optional[RentUpdate]:
        with self._lock:
            return self.gate.last_rent_update

    @property
    def property_count(self) -> int:
        """Number of registered properties (also the next id to be assigned)."""
        with self._lock:
            return len(self.registry)

    def get_property_details(self, property_id: int) -> PropertyDetails:
        """
        Return a snapshot of a property's fields.

        Raises:
            NotFound: If the property was never registered
        """
        with self._lock:
            return self.registry.details(property_id)

    def share_value(self, property_id: int) -> int:
        """
        Per-share value: property_value // total_shares.

        Raises:
            NotFound: If the property was never registered
        """
        with self._lock:
            prop = self.registry.get(property_id)
            return compute_share_value(prop.property_value, prop.total_shares)

    def get_balance(self, property_id: int, holder: Identity) -> int:
        """Shares of property_id held by holder (0 if none)."""
        with self._lock:
            return self.registry.get(property_id).book.balance_of(holder)

    def list_holders(self, property_id: int) -> List[Identity]:
        """Identities holding a positive balance of property_id, in first-purchase order."""
        with self._lock:
            return self.registry.get(property_id).book.holders()

    def required_rent(self, property_id: int) -> int:
        """Exact deposit receive_rental_payment() will accept for property_id."""
        with self._lock:
            return required_rent(self.registry.details(property_id))

    def quote_purchase(self, caller: Identity, property_id: int, count: int, payment_amount: int) -> PurchaseQuote:
        """Validate and price a purchase without executing it."""
        with self._lock:
            return compute_purchase(self.registry.details(property_id), caller, count, payment_amount)

    def quote_sale(self, caller: Identity, property_id: int, count: int) -> SaleQuote:
        """Validate and price a sale without executing it."""
        with self._lock:
            prop = self.registry.get(property_id)
            return compute_sale(prop.details(), caller, prop.book.balance_of(caller), count)

    def verify_conservation(self) -> Dict[str, Any]:
        """
        Check share conservation for every property and that no balance or fund is negative.

        For each property: available_shares + sum(balances) == total_shares,
        and no balance or available_shares is negative.

        Returns:
            Dict with keys:
            - 'valid': bool - True if every property passes
            - 'properties': Dict[int, Dict] - held/available/total per property
            - 'discrepancies': List[Dict] - one entry per failed check

        Example:
            result = ledger.verify_conservation()
            assert result['valid'], result['discrepancies']
        """
        with self._lock:
            properties = {}
            discrepancies = []
            for prop in self.registry:
                held = prop.book.total_held()
                properties[prop.property_id] = {
                    'total_shares': prop.total_shares,
                    'available_shares': prop.available_shares,
                    'held_shares': held,
                    'holders': len(prop.book),
                }
                if prop.available_shares + held != prop.total_shares:
                    discrepancies.append({
                        'property_id': prop.property_id,
                        'check': 'conservation',
                        'expected': prop.total_shares,
                        'actual': prop.available_shares + held,
                    })
                if prop.available_shares < 0:
                    discrepancies.append({
                        'property_id': prop.property_id,
                        'check': 'available_shares_non_negative',
                        'actual': prop.available_shares,
                    })
                for holder, shares in prop.book:
                    if shares <= 0:
                        discrepancies.append({
                            'property_id': prop.property_id,
                            'check': 'holder_balance_positive',
                            'holder': holder,
                            'actual': shares,
                        })
            for fund, balance in self._funds.items():
                if balance < 0:
                    discrepancies.append({
                        'property_id': None,
                        'check': f'{fund}_balance_non_negative',
                        'actual': balance,
                    })

            return {
                'valid': len(discrepancies) == 0,
                'properties': properties,
                'discrepancies': discrepancies,
            }

    # ========================================================================
    # REGISTRY (Mutating)
    # ========================================================================

    def register_property(
        self,
        caller: Identity,
        total_shares: int,
        rental_payment: int,
        property_value: int,
    ) -> int:
        """
        Register a property and return its id. Administrator-only.

        Raises:
            Unauthorized: caller is not an administrator
            Obsolete: ledger is obsolete
            InvalidArgument: any amount <= 0
        """
        with self._operation("register_property", caller):
            self._require_admin(caller)
            self.gate.require_active()
            property_id = self.registry.register(caller, total_shares, rental_payment, property_value)
            self._notify(EventType.PROPERTY_REGISTERED, property_id, caller, {
                'total_shares': total_shares,
                'rental_payment': rental_payment,
                'property_value': property_value,
            })
            return property_id

    # ========================================================================
    # TRADING (Mutating)
    # ========================================================================

    def purchase_shares(
        self,
        caller: Identity,
        property_id: int,
        count: int,
        payment_amount: int,
    ) -> int:
        """
        Buy count shares from the pool. Returns the amount charged.

        The tendered payment joins the reserve; any excess is refunded to the
        caller after the share balances are committed.

        Raises:
            Obsolete, NotFound, InvalidArgument, InsufficientSupply,
            InsufficientPayment, TransferFailed (refund rejected)
        """
        with self._operation("purchase_shares", caller, property_id):
            self.gate.require_active()
            self._require_identity(caller)
            prop = self.registry.get(property_id)
            quote = compute_purchase(prop.details(), caller, count, payment_amount)

            prop.take_from_pool(quote.count)
            prop.book.credit(caller, quote.count)
            self._funds[RESERVE] += quote.payment_amount

            if quote.refund > 0:
                self._pay_out(RESERVE, caller, quote.refund)

            self._notify(EventType.SHARES_PURCHASED, property_id, caller, {
                'count': quote.count,
                'amount_charged': quote.amount_charged,
                'share_value': quote.share_value,
            })
            return quote.amount_charged

    def sell_shares(self, caller: Identity, property_id: int, count: int) -> int:
        """
        Sell count shares back to the pool. Returns the amount paid to the caller.

        Raises:
            Obsolete, NotFound, InvalidArgument, InsufficientBalance,
            TransferFailed (payout rejected or reserve cannot fund it)
        """
        with self._operation("sell_shares", caller, property_id):
            self.gate.require_active()
            self._require_identity(caller)
            prop = self.registry.get(property_id)
            quote = compute_sale(prop.details(), caller, prop.book.balance_of(caller), count)

            prop.book.debit(caller, quote.count)
            prop.return_to_pool(quote.count)

            if quote.amount_received > 0:
                self._pay_out(RESERVE, caller, quote.amount_received)

            self._notify(EventType.SHARES_SOLD, property_id, caller, {
                'count': quote.count,
                'amount_received': quote.amount_received,
                'share_value': quote.share_value,
            })
            return quote.amount_received

    # ========================================================================
    # RENT & DISTRIBUTION (Mutating)
    # ========================================================================

    def receive_rental_payment(self, caller: Identity, property_id: int, amount_tendered: int) -> None:
        """
        Accept a rent deposit into the pool. Administrator-only.

        The deposit must equal rental_payment * available_shares exactly.

        Raises:
            Unauthorized, Obsolete, NotFound, InvalidPayment
        """
        with self._operation("receive_rental_payment", caller, property_id):
            self._require_admin(caller)
            self.gate.require_active()
            prop = self.registry.get(property_id)
            accepted = validate_rent_payment(prop.details(), amount_tendered)
            self._funds[POOL] += accepted
            self._notify(EventType.RENT_RECEIVED, property_id, caller, {
                'amount': accepted,
                'pool_balance': self._funds[POOL],
            })

    def distribute_dividends(self, caller: Identity, property_id: int) -> DistributionResult:
        """
        Pay every holder of property_id its share of the pool. Administrator-only.

        per_share = pool_balance // total_shares; each holder receives
        per_share * balance exactly once. Any transfer failure reverts the
        whole distribution.

        Raises:
            Unauthorized, Obsolete, NotFound, NoAvailableShares, TransferFailed
        """
        with self._operation("distribute_dividends", caller, property_id):
            self._require_admin(caller)
            self.gate.require_active()
            prop = self.registry.get(property_id)
            pool_at_call = self._funds[POOL]
            plan = compute_dividend_payouts(prop.details(), pool_at_call, prop.book.positions())

            for payout in plan.payouts:
                if payout.amount > 0:
                    self._pay_out(POOL, payout.holder, payout.amount)

            self._notify(EventType.DIVIDENDS_DISTRIBUTED, property_id, caller, {
                'pool_balance': pool_at_call,
                'per_share': plan.per_share,
                'total_paid': plan.total_paid,
                'recipients': len(plan.payouts),
            })
            return DistributionResult(
                property_id=property_id,
                pool_balance=pool_at_call,
                per_share=plan.per_share,
                total_paid=plan.total_paid,
                payouts=plan.payouts,
            )

    # ========================================================================
    # LIFECYCLE (Mutating)
    # ========================================================================

    def set_obsolete(self, caller: Identity) -> None:
        """
        Shut the ledger down permanently. Administrator-only.

        Raises:
            Unauthorized, Obsolete (already obsolete)
        """
        with self._operation("set_obsolete", caller):
            self._require_admin(caller)
            self.gate.mark_obsolete()
            self._notify(EventType.CONTRACT_OBSOLETED, None, caller, {})
            logger.info("Ledger %s marked obsolete by %r", self.name, caller)

    def update_annual_rent(
        self,
        caller: Identity,
        new_rate: int,
        property_id: Optional[int] = None,
    ) -> RentUpdate:
        """
        Record a new rent rate. Administrator-only, at most once per cooldown.

        The cooldown is shared by every property. When property_id is given,
        that property's rental_payment is set to new_rate as well.

        Raises:
            Unauthorized, Obsolete, TooSoon, InvalidArgument, NotFound
        """
        with self._operation("update_annual_rent", caller, property_id):
            self._require_admin(caller)
            now = self.clock.now()
            self.gate.check_rent_update(now, new_rate)
            if property_id is not None:
                prop = self.registry.get(property_id)
                prop.rental_payment = new_rate
            update = self.gate.record_rent_update(now, new_rate)
            self._notify(EventType.RENT_RATE_UPDATED, property_id, caller, {
                'new_rate': new_rate,
            })
            logger.info("Rent rate updated to %d by %r (property=%s)", new_rate, caller, property_id)
            return update

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _require_admin(self, caller: Identity) -> None:
        if not self.admin.is_administrator(caller):
            raise Unauthorized(f"{caller!r} is not an administrator")

    @staticmethod
    def _require_identity(caller: Identity) -> None:
        if caller is None:
            raise InvalidArgument("Caller identity cannot be None")

    def _pay_out(self, fund: str, recipient: Identity, amount: int) -> None:
        """
        Debit fund and transfer amount to recipient.

        Raises:
            TransferFailed: fund cannot cover the amount or recipient rejects it
        """
        available = self._funds[fund]
        if amount > available:
            raise TransferFailed(
                f"{fund.capitalize()} holds {available}, cannot pay {amount} to {recipient!r}",
                recipient=recipient,
                amount=amount,
            )
        self._funds[fund] -= amount
        self.transfers.transfer(recipient, amount)

    def _notify(
        self,
        event_type: EventType,
        property_id: Optional[int],
        caller: Identity,
        data: Dict[str, Any],
    ) -> None:
        # Queued until the enclosing operation commits
        self._pending.append((event_type, property_id, caller, data))

    def _flush_notifications(self) -> None:
        pending, self._pending = self._pending, []
        timestamp = self.clock.now()
        for event_type, property_id, caller, data in pending:
            notification = Notification(
                event_type=event_type,
                sequence=self._next_sequence,
                timestamp=timestamp,
                property_id=property_id,
                caller=caller,
                data=data,
            )
            self._next_sequence += 1
            self.notifications.append(notification)
            if self.sink is None:
                continue
            try:
                self.sink.emit(notification)
            except Exception:
                logger.warning("Notification sink failed for %r", notification, exc_info=True)

    @contextmanager
    def _operation(
        self,
        name: str,
        caller: Identity,
        property_id: Optional[int] = None,
    ) -> Iterator[None]:
        """
        Serialize and scope one mutating call.

        Only one mutating call runs at a time. A nested call made by a
        collaborator on the same thread raises ReentrantCall before any state
        is touched, and fails the outer call once it propagates.

        On any exception the fund balances, lifecycle gate, id counter and
        referenced property are restored, the transfer collaborator is rolled
        back to its savepoint and queued notifications are dropped. The
        exception then propagates unchanged.
        """
        with self._lock:
            if self._active:
                raise ReentrantCall(
                    f"{name} called by {caller!r} while another operation is in progress"
                )
            self._active = True
            try:
                yield from self._scoped(name, caller, property_id)
            finally:
                self._active = False

    def _scoped(
        self,
        name: str,
        caller: Identity,
        property_id: Optional[int],
    ) -> Iterator[None]:
        snapshot = (
            dict(self._funds),
            self.gate.copy(),
            self.registry.snapshot(property_id),
        )
        token = self.transfers.savepoint()
        self._pending = []
        try:
            yield
        except Exception as e:
            self._funds, self.gate, registry_snapshot = snapshot
            self.registry.restore(registry_snapshot)
            self.transfers.rollback_to(token)
            self._pending = []
            logger.warning(
                "%s rejected for %r (property=%s): %s: %s",
                name, caller, property_id, type(e).__name__, e,
                extra={"fields": {
                    "ledger": self.name,
                    "operation": name,
                    "property_id": property_id,
                    "error": type(e).__name__,
                }},
            )
            raise
        self._flush_notifications()
        logger.debug(
            "%s applied for %r (property=%s), pool=%d reserve=%d",
            name, caller, property_id, self._funds[POOL], self._funds[RESERVE],
            extra={"fields": {
                "ledger": self.name,
                "operation": name,
                "property_id": property_id,
                "pool_balance": self._funds[POOL],
                "reserve_balance": self._funds[RESERVE],
            }},
        )

    # ========================================================================
    # CLONING
    # ========================================================================

    def clone(self) -> PropertyLedger:
        """
        Create an independent copy of this ledger's state.

        Properties, share books, fund balances, lifecycle state and the
        notification log are copied; collaborators (admin, transfers, clock,
        sink) are shared with the original.
        """
        with self._lock:
            cloned = PropertyLedger.__new__(PropertyLedger)
            cloned.config = self.config
            cloned.name = self.name
            cloned.admin = self.admin
            cloned.transfers = self.transfers
            cloned.clock = self.clock
            cloned.sink = self.sink
            cloned.registry = self.registry.copy()
            cloned.gate = self.gate.copy()
            cloned._funds = dict(self._funds)
            cloned.notifications = list(self.notifications)
            cloned._next_sequence = self._next_sequence
            cloned._pending = []
            cloned._lock = threading.RLock()
            cloned._active = False
            return cloned

    def __repr__(self) -> str:
        state = "obsolete" if self.gate.is_obsolete else "active"
        return (
            f"PropertyLedger({self.name!r}, {len(self.registry)} properties, "
            f"pool={self._funds[POOL]}, reserve={self._funds[RESERVE]}, {state})"
        )
