"""
pricing.py - Share pricing

Per-share value is a pure function of a property's recorded valuation and
total share supply:

    share_value = property_value // total_shares

Floor division means total_shares * share_value may fall short of
property_value by up to total_shares - 1. That loss is deterministic and
accepted.
"""

from __future__ import annotations

from .core import require_non_negative, require_positive


def compute_share_value(property_value: int, total_shares: int) -> int:
    """
    Return the floor per-share value. Pure function.

    Args:
        property_value: Recorded valuation (must be >= 0)
        total_shares: Total share supply (must be > 0)

    Example:
        compute_share_value(1000, 100)  # 10
        compute_share_value(1000, 3)    # 333
    """
    require_non_negative("property_value", property_value)
    require_positive("total_shares", total_shares)
    return property_value // total_shares


def rounding_loss(property_value: int, total_shares: int) -> int:
    """Value left unpriced by floor division: property_value - total_shares * share_value."""
    return property_value - total_shares * compute_share_value(property_value, total_shares)
