"""
book.py - Per-property share balances

A ShareBook records how many shares of one property each identity holds.
It keeps two structures side by side:

    balances: identity -> share count, created lazily on first credit and
              never removed (a zero balance stays readable as 0)
    holders:  identities with a strictly positive balance, in first-credit
              order; entries are added on the first positive credit and
              dropped when the balance returns to zero

Distribution iterates `holders`, never the balance map and never a numeric
index space, so every holder is visited exactly once.
"""

from __future__ import annotations
from typing import Dict, Iterator, List, Tuple

from .core import (
    Holdings, Identity,
    InsufficientBalance,
    require_positive,
)


class ShareBook:
    """
    Balance ledger for a single property.

    All arithmetic is on Python ints; a debit that would go negative raises
    InsufficientBalance and leaves the book unchanged.
    """

    __slots__ = ("_balances", "_holders")

    def __init__(self):
        self._balances: Dict[Identity, int] = {}
        # dict used as an insertion-ordered set
        self._holders: Dict[Identity, None] = {}

    def balance_of(self, holder: Identity) -> int:
        """Return the holder's share count (0 if the holder never held any)."""
        return self._balances.get(holder, 0)

    def credit(self, holder: Identity, count: int) -> int:
        """
        Add count shares to holder and return the new balance.

        Raises:
            InvalidArgument: If count is not a positive int
        """
        require_positive("count", count)
        new_balance = self._balances.get(holder, 0) + count
        self._balances[holder] = new_balance
        self._holders[holder] = None
        return new_balance

    def debit(self, holder: Identity, count: int) -> int:
        """
        Remove count shares from holder and return the new balance.

        Raises:
            InvalidArgument: If count is not a positive int
            InsufficientBalance: If the holder owns fewer than count shares
        """
        require_positive("count", count)
        current = self._balances.get(holder, 0)
        if current < count:
            raise InsufficientBalance(
                f"{holder!r} holds {current} shares, cannot remove {count}"
            )
        new_balance = current - count
        self._balances[holder] = new_balance
        if new_balance == 0:
            self._holders.pop(holder, None)
        return new_balance

    def holders(self) -> List[Identity]:
        """Identities with a strictly positive balance, in first-credit order."""
        return list(self._holders)

    def positions(self) -> Holdings:
        """Mapping of every holder with a positive balance to their share count."""
        return {h: self._balances[h] for h in self._holders}

    def total_held(self) -> int:
        """Sum of all balances (shares outside the pool)."""
        return sum(self._balances[h] for h in self._holders)

    def is_holder(self, holder: Identity) -> bool:
        return holder in self._holders

    def copy(self) -> ShareBook:
        cloned = ShareBook()
        cloned._balances = dict(self._balances)
        cloned._holders = dict(self._holders)
        return cloned

    def __iter__(self) -> Iterator[Tuple[Identity, int]]:
        for holder in self._holders:
            yield holder, self._balances[holder]

    def __len__(self) -> int:
        return len(self._holders)

    def __contains__(self, holder: Identity) -> bool:
        return holder in self._holders

    def __repr__(self) -> str:
        return f"ShareBook({len(self._holders)} holders, {self.total_held()} shares held)"
