"""
trading.py - Share purchase and sale against the pool

=== TRADE MODEL ===

Every trade is against the pool at the current share value:

    purchase: holder pays count * share_value, receives count shares from
              the pool; any excess payment is refunded
    sale:     holder returns count shares to the pool, receives
              share_value * count

=== PURE FUNCTIONS ===

    compute_purchase(details, buyer, count, payment_amount) -> PurchaseQuote
    compute_sale(details, seller, held, count) -> SaleQuote

Both validate every precondition and return a frozen quote describing what
must happen. The ledger applies the quote (mutates balances and supply) and
only then performs the value transfers.
"""

from __future__ import annotations
from dataclasses import dataclass

from .core import (
    Identity, PropertyDetails,
    InsufficientBalance, InsufficientPayment, InsufficientSupply,
    require_non_negative, require_positive,
)
from .pricing import compute_share_value


@dataclass(frozen=True, slots=True)
class PurchaseQuote:
    """
    Outcome of a validated purchase.

    amount_charged is what the buyer pays; refund is returned to the buyer.
    amount_charged + refund == payment_amount.
    """
    property_id: int
    buyer: Identity
    count: int
    share_value: int
    payment_amount: int
    amount_charged: int
    refund: int


@dataclass(frozen=True, slots=True)
class SaleQuote:
    """Outcome of a validated sale."""
    property_id: int
    seller: Identity
    count: int
    share_value: int
    amount_received: int


def compute_purchase(
    details: PropertyDetails,
    buyer: Identity,
    count: int,
    payment_amount: int,
) -> PurchaseQuote:
    """
    Validate a purchase and price it. Pure function.

    Args:
        details: Snapshot of the property being traded
        buyer: Identity receiving the shares
        count: Number of shares requested
        payment_amount: Amount tendered by the buyer

    Raises:
        InvalidArgument: count <= 0 or payment_amount < 0
        InsufficientSupply: count exceeds the pool
        InsufficientPayment: payment_amount below count * share_value
    """
    require_positive("count", count)
    require_non_negative("payment_amount", payment_amount)

    if count > details.available_shares:
        raise InsufficientSupply(
            f"Property {details.property_id}: requested {count} shares, "
            f"only {details.available_shares} available"
        )

    share_value = compute_share_value(details.property_value, details.total_shares)
    amount_charged = count * share_value
    if payment_amount < amount_charged:
        raise InsufficientPayment(
            f"Property {details.property_id}: {count} shares cost {amount_charged}, "
            f"tendered {payment_amount}"
        )

    return PurchaseQuote(
        property_id=details.property_id,
        buyer=buyer,
        count=count,
        share_value=share_value,
        payment_amount=payment_amount,
        amount_charged=amount_charged,
        refund=payment_amount - amount_charged,
    )


def compute_sale(
    details: PropertyDetails,
    seller: Identity,
    held: int,
    count: int,
) -> SaleQuote:
    """
    Validate a sale and price it. Pure function.

    Args:
        details: Snapshot of the property being traded
        seller: Identity returning shares to the pool
        held: Seller's current share count
        count: Number of shares to sell

    Raises:
        InvalidArgument: count <= 0
        InsufficientBalance: seller holds fewer than count shares
    """
    require_positive("count", count)
    if held < count:
        raise InsufficientBalance(
            f"Property {details.property_id}: {seller!r} holds {held} shares, "
            f"cannot sell {count}"
        )

    share_value = compute_share_value(details.property_value, details.total_shares)
    return SaleQuote(
        property_id=details.property_id,
        seller=seller,
        count=count,
        share_value=share_value,
        amount_received=share_value * count,
    )
