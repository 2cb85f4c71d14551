"""Item aggregate: a stock-keeping unit and its reservation ledger.

``quantity`` is the stock currently available.  Saga participants move
it only through ``reserve()`` and ``restore()``; every other field is
administrative and changes only through ``update()``.

The ledger records, per order, what the inventory side has already
decided.  It travels in the same row as ``quantity`` so a single
conditional write can both move stock and remember why.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from serp.domain.exceptions import ValidationError
from serp.domain.model.value_objects import Money


class ReservationStatus(Enum):
    RESERVED = "RESERVED"
    REJECTED = "REJECTED"
    RESTORED = "RESTORED"
    VOID = "VOID"


@dataclass(frozen=True)
class Reservation:
    quantity: int
    status: ReservationStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _check_stock(quantity: object) -> int:
    if not isinstance(quantity, int) or isinstance(quantity, bool):
        raise ValidationError(
            f"Item quantity must be an integer, got {type(quantity).__name__}"
        )
    if quantity < 0:
        raise ValidationError(f"Item quantity cannot be negative, got {quantity}")
    return quantity


@dataclass
class Item:
    """Aggregate root for inventory.

    Invariants:
    - ``quantity`` is always >= 0
    - at most one ledger entry per order
    """

    id: str
    name: str
    description: str
    quantity: int
    unit_price: Money
    category: str
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    reservations: dict[str, Reservation] = field(default_factory=dict)

    # --- Factory (used for NEW items only) ------------------------------------

    @staticmethod
    def create(
        name: str,
        quantity: int,
        unit_price: Money,
        description: str = "",
        category: str = "",
        now: datetime | None = None,
    ) -> Item:
        if not name or not name.strip():
            raise ValidationError("Item name is required")
        now = now or _utcnow()
        return Item(
            id=str(uuid.uuid4()),
            name=name.strip(),
            description=description,
            quantity=_check_stock(quantity),
            unit_price=unit_price,
            category=category.strip(),
            created_at=now,
            updated_at=now,
        )

    # --- Administrative changes -----------------------------------------------

    def update(
        self,
        name: str | None = None,
        description: str | None = None,
        quantity: int | None = None,
        unit_price: Money | None = None,
        category: str | None = None,
        now: datetime | None = None,
    ) -> None:
        """Apply a partial administrative update.  ``None`` means unchanged."""
        if name is not None:
            if not name.strip():
                raise ValidationError("Item name cannot be blank")
            self.name = name.strip()
        if description is not None:
            self.description = description
        if quantity is not None:
            self.quantity = _check_stock(quantity)
        if unit_price is not None:
            self.unit_price = unit_price
        if category is not None:
            self.category = category.strip()
        self.updated_at = now or _utcnow()

    # --- Reservation ledger ---------------------------------------------------

    def reservation_for(self, order_id: str) -> Reservation | None:
        return self.reservations.get(order_id)

    def can_reserve(self, order_id: str, quantity: int) -> bool:
        return order_id not in self.reservations and self.quantity >= quantity

    def reserve(self, order_id: str, quantity: int, now: datetime | None = None) -> None:
        """Take ``quantity`` units out of stock for ``order_id``.

        Raises ValidationError rather than clamping when stock is short.
        """
        self._assert_undecided(order_id)
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive")
        if quantity > self.quantity:
            raise ValidationError(
                f"Insufficient inventory for {self.name} "
                f"(need {quantity}, have {self.quantity} available)"
            )
        self.quantity -= quantity
        self.reservations[order_id] = Reservation(quantity, ReservationStatus.RESERVED)
        self.updated_at = now or _utcnow()

    def reject(self, order_id: str, quantity: int, now: datetime | None = None) -> None:
        """Record that ``order_id`` could not be served.  Stock is untouched."""
        self._assert_undecided(order_id)
        self.reservations[order_id] = Reservation(quantity, ReservationStatus.REJECTED)
        self.updated_at = now or _utcnow()

    def restore(self, order_id: str, now: datetime | None = None) -> int:
        """Return the stock reserved for ``order_id``; returns the amount."""
        entry = self.reservations.get(order_id)
        if entry is None or entry.status is not ReservationStatus.RESERVED:
            raise ValidationError(
                f"Nothing reserved for order '{order_id}' on item {self.name}"
            )
        self.quantity += entry.quantity
        self.reservations[order_id] = Reservation(entry.quantity, ReservationStatus.RESTORED)
        self.updated_at = now or _utcnow()
        return entry.quantity

    def void(self, order_id: str, quantity: int, now: datetime | None = None) -> None:
        """Tombstone an order cancelled before any reservation was made."""
        self._assert_undecided(order_id)
        self.reservations[order_id] = Reservation(quantity, ReservationStatus.VOID)
        self.updated_at = now or _utcnow()

    def _assert_undecided(self, order_id: str) -> None:
        if order_id in self.reservations:
            raise ValidationError(
                f"Order '{order_id}' already has a "
                f"{self.reservations[order_id].status.value} entry on item {self.name}"
            )
