"""
lifecycle.py - Ledger-wide lifecycle gate

Two pieces of process-wide state:

    obsolete:  one-way flag. Once set, every mutating entry point fails with
               Obsolete; reads keep working.
    cooldown:  (last_rent_update, last_rent_amount). A rent-rate update is
               accepted only when now > last_rent_update + cooldown. The
               cooldown is shared by all properties.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .core import (
    RENT_UPDATE_COOLDOWN,
    Obsolete, TooSoon,
    require_positive,
)


@dataclass(frozen=True, slots=True)
class RentUpdate:
    """Last accepted rent-rate update."""
    timestamp: datetime
    amount: int


class LifecycleGate:
    """
    Guard consulted by every mutating entry point.

    Example:
        gate = LifecycleGate()
        gate.require_active()            # passes
        gate.mark_obsolete()
        gate.require_active()            # raises Obsolete
    """

    def __init__(self, cooldown: timedelta = RENT_UPDATE_COOLDOWN):
        if cooldown < timedelta(0):
            raise ValueError(f"Cooldown cannot be negative: {cooldown}")
        self.cooldown = cooldown
        self._obsolete: bool = False
        self._last_rent_update: Optional[RentUpdate] = None

    @property
    def is_obsolete(self) -> bool:
        return self._obsolete

    @property
    def last_rent_update(self) -> Optional[RentUpdate]:
        return self._last_rent_update

    def require_active(self) -> None:
        """Raise Obsolete if the ledger has been shut down."""
        if self._obsolete:
            raise Obsolete("Ledger is obsolete; no further changes are accepted")

    def mark_obsolete(self) -> None:
        """
        Move to the terminal obsolete state.

        Raises:
            Obsolete: If the ledger is already obsolete
        """
        self.require_active()
        self._obsolete = True

    def next_rent_update_after(self) -> Optional[datetime]:
        """Earliest instant a rent update is accepted is strictly after this time (None = any time)."""
        if self._last_rent_update is None:
            return None
        return self._last_rent_update.timestamp + self.cooldown

    def check_rent_update(self, now: datetime, new_rate: int) -> None:
        """
        Validate a rent-rate update without recording it.

        Raises:
            Obsolete: Ledger is obsolete
            TooSoon: The cooldown has not elapsed
            InvalidArgument: new_rate is not a positive int
        """
        self.require_active()
        threshold = self.next_rent_update_after()
        if threshold is not None and not now > threshold:
            raise TooSoon(
                f"Rent rate last updated at {self._last_rent_update.timestamp.isoformat()}; "
                f"next update allowed after {threshold.isoformat()}"
            )
        require_positive("new_rate", new_rate)

    def record_rent_update(self, now: datetime, new_rate: int) -> RentUpdate:
        """Validate and record a rent-rate update."""
        self.check_rent_update(now, new_rate)
        self._last_rent_update = RentUpdate(timestamp=now, amount=new_rate)
        return self._last_rent_update

    def copy(self) -> LifecycleGate:
        cloned = LifecycleGate(self.cooldown)
        cloned._obsolete = self._obsolete
        cloned._last_rent_update = self._last_rent_update
        return cloned

    def __repr__(self) -> str:
        state = "obsolete" if self._obsolete else "active"
        return f"LifecycleGate({state}, last_rent_update={self._last_rent_update})"
