"""
distribution.py - Rent receipt and dividend distribution

=== RENT ===

A rent deposit for a property must equal rental_payment * available_shares
exactly. Rent is charged on pool-held (unsold) shares only.

=== DIVIDENDS ===

    per_share = pool_balance // total_shares
    payout(holder) = per_share * balance(holder)

for every holder with a strictly positive balance. Pool-held shares receive
nothing; the remainder stays in the pool.

=== PURE FUNCTIONS ===

    required_rent(details) -> int
    compute_dividend_payouts(details, pool_balance, positions)
        -> DistributionPlan

Holders are visited in sorted order (by repr for identities that do not
order), so the same inputs always produce the same plan.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping, Tuple

from .core import (
    Identity, PropertyDetails,
    InvalidArgument, InvalidPayment, NoAvailableShares,
    require_int, require_non_negative, require_positive,
)


@dataclass(frozen=True, slots=True)
class DividendPayout:
    """Instruction to pay one holder."""
    holder: Identity
    shares: int
    amount: int


@dataclass(frozen=True, slots=True)
class DistributionPlan:
    """
    Every payout of a single distribution.

    Attributes:
        property_id: Property whose holders are paid
        pool_balance: Pool balance when the plan was computed
        total_shares: Share supply used as the divisor
        per_share: pool_balance // total_shares
        payouts: One entry per holder, each holder exactly once
    """
    property_id: int
    pool_balance: int
    total_shares: int
    per_share: int
    payouts: Tuple[DividendPayout, ...]

    @property
    def total_paid(self) -> int:
        return sum(p.amount for p in self.payouts)

    @property
    def recipients(self) -> Tuple[Identity, ...]:
        return tuple(p.holder for p in self.payouts)


@dataclass(frozen=True, slots=True)
class DistributionResult:
    """What a committed distribution paid out."""
    property_id: int
    pool_balance: int
    per_share: int
    total_paid: int
    payouts: Tuple[DividendPayout, ...]


def _holder_sort_key(item):
    holder = item[0]
    return (type(holder).__name__, repr(holder))


def required_rent(details: PropertyDetails) -> int:
    """Exact rent deposit accepted for a property: rental_payment * available_shares."""
    return details.rental_payment * details.available_shares


def validate_rent_payment(details: PropertyDetails, amount_tendered: int) -> int:
    """
    Check a rent deposit against the required amount. Pure function.

    Returns:
        The accepted amount

    Raises:
        InvalidArgument: amount_tendered is not an int or is negative
        InvalidPayment: amount_tendered differs from the required rent
    """
    require_non_negative("amount_tendered", amount_tendered)
    required = required_rent(details)
    if amount_tendered != required:
        raise InvalidPayment(
            f"Property {details.property_id}: rent must be exactly {required} "
            f"({details.rental_payment} x {details.available_shares} available shares), "
            f"tendered {amount_tendered}"
        )
    return amount_tendered


def compute_dividend_payouts(
    details: PropertyDetails,
    pool_balance: int,
    positions: Mapping[Identity, int],
) -> DistributionPlan:
    """
    Compute the payout for every holder. Pure function.

    Args:
        details: Snapshot of the property being distributed
        pool_balance: Funds currently in the pool
        positions: Holder -> share count (holders with zero are skipped)

    Returns:
        DistributionPlan with one payout per holder

    Raises:
        NoAvailableShares: The property's pool holds no shares
        InvalidArgument: pool_balance is negative or a position is not an int

    Invariants:
        - Each holder appears at most once
        - payout == per_share * shares
        - total_paid <= pool_balance * held_shares // total_shares <= pool_balance
    """
    require_non_negative("pool_balance", pool_balance)
    require_positive("total_shares", details.total_shares)
    if details.available_shares == 0:
        raise NoAvailableShares(
            f"Property {details.property_id}: no available shares in the pool"
        )

    per_share = pool_balance // details.total_shares
    payouts = []
    for holder, shares in sorted(positions.items(), key=_holder_sort_key):
        require_int("shares", shares)
        if shares < 0:
            raise InvalidArgument(f"Negative position for {holder!r}: {shares}")
        if shares == 0:
            continue
        payouts.append(DividendPayout(holder=holder, shares=shares, amount=per_share * shares))

    return DistributionPlan(
        property_id=details.property_id,
        pool_balance=pool_balance,
        total_shares=details.total_shares,
        per_share=per_share,
        payouts=tuple(payouts),
    )
