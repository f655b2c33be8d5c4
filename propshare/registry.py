"""
registry.py - Property records and id allocation

The registry owns every Property and hands out ids. Ids start at 0, grow by
one per registration and are never reused; a property is never deleted.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .book import ShareBook
from .core import (
    Identity, PropertyDetails,
    InsufficientSupply, InvalidArgument, NotFound,
    require_int, require_positive,
)


@dataclass(slots=True)
class Property:
    """
    Mutable record for one registered asset.

    owner and total_shares are fixed at creation. available_shares moves with
    trading; rental_payment can be changed by a rent-rate update.
    """
    property_id: int
    owner: Identity
    total_shares: int
    rental_payment: int
    property_value: int
    available_shares: Optional[int] = None
    book: ShareBook = field(default_factory=ShareBook)

    def __post_init__(self):
        # A new property starts with every share in the pool
        if self.available_shares is None:
            self.available_shares = self.total_shares

    def take_from_pool(self, count: int) -> None:
        """Move count shares out of the pool (purchase side)."""
        require_positive("count", count)
        if count > self.available_shares:
            raise InsufficientSupply(
                f"Property {self.property_id}: requested {count} shares, "
                f"only {self.available_shares} available"
            )
        self.available_shares -= count

    def return_to_pool(self, count: int) -> None:
        """Move count shares back into the pool (sale side)."""
        require_positive("count", count)
        if self.available_shares + count > self.total_shares:
            raise InsufficientSupply(
                f"Property {self.property_id}: pool cannot exceed {self.total_shares} shares"
            )
        self.available_shares += count

    def details(self) -> PropertyDetails:
        return PropertyDetails(
            property_id=self.property_id,
            owner=self.owner,
            total_shares=self.total_shares,
            available_shares=self.available_shares,
            rental_payment=self.rental_payment,
            property_value=self.property_value,
        )

    def copy(self) -> Property:
        return Property(
            property_id=self.property_id,
            owner=self.owner,
            total_shares=self.total_shares,
            rental_payment=self.rental_payment,
            property_value=self.property_value,
            available_shares=self.available_shares,
            book=self.book.copy(),
        )


@dataclass(frozen=True, slots=True)
class RegistrySnapshot:
    """Point to roll the registry back to (see PropertyRegistry.snapshot)."""
    next_id: int
    saved: Optional[Property] = None


class PropertyRegistry:
    """
    Creates and looks up properties.

    Example:
        registry = PropertyRegistry()
        pid = registry.register("admin", 100, 10, 1000)   # 0
        registry.get(pid).available_shares                # 100
    """

    def __init__(self):
        self._properties: Dict[int, Property] = {}
        self._next_id: int = 0

    @property
    def next_id(self) -> int:
        """Id the next registration will receive."""
        return self._next_id

    def register(
        self,
        owner: Identity,
        total_shares: int,
        rental_payment: int,
        property_value: int,
    ) -> int:
        """
        Store a new property and return its id.

        Raises:
            InvalidArgument: If any of the three amounts is not a positive int
        """
        require_positive("total_shares", total_shares)
        require_positive("rental_payment", rental_payment)
        require_positive("property_value", property_value)
        if owner is None:
            raise InvalidArgument("Property owner cannot be None")

        property_id = self._next_id
        self._properties[property_id] = Property(
            property_id=property_id,
            owner=owner,
            total_shares=total_shares,
            rental_payment=rental_payment,
            property_value=property_value,
        )
        self._next_id += 1
        return property_id

    def get(self, property_id: int) -> Property:
        """
        Return the live Property record.

        Raises:
            InvalidArgument: If property_id is not an int
            NotFound: If the id was never registered
        """
        require_int("property_id", property_id)
        prop = self._properties.get(property_id)
        if prop is None:
            raise NotFound(f"Property {property_id} not registered")
        return prop

    def exists(self, property_id: int) -> bool:
        return property_id in self._properties

    def details(self, property_id: int) -> PropertyDetails:
        return self.get(property_id).details()

    def ids(self) -> List[int]:
        return sorted(self._properties)

    def snapshot(self, property_id: Optional[int] = None) -> RegistrySnapshot:
        """
        Capture the id counter and, if it exists, one property.

        Enough to undo a single operation: registrations only append, and
        every other mutation touches at most the referenced property.
        """
        saved = None
        if isinstance(property_id, int) and property_id in self._properties:
            saved = self._properties[property_id].copy()
        return RegistrySnapshot(next_id=self._next_id, saved=saved)

    def restore(self, snapshot: RegistrySnapshot) -> None:
        """Undo everything done since snapshot() was taken."""
        for pid in range(snapshot.next_id, self._next_id):
            self._properties.pop(pid, None)
        self._next_id = snapshot.next_id
        if snapshot.saved is not None:
            self._properties[snapshot.saved.property_id] = snapshot.saved

    def copy(self) -> PropertyRegistry:
        cloned = PropertyRegistry()
        cloned._properties = {pid: prop.copy() for pid, prop in self._properties.items()}
        cloned._next_id = self._next_id
        return cloned

    def __iter__(self) -> Iterator[Property]:
        for pid in sorted(self._properties):
            yield self._properties[pid]

    def __len__(self) -> int:
        return len(self._properties)

    def __repr__(self) -> str:
        return f"PropertyRegistry({len(self._properties)} properties, next_id={self._next_id})"
