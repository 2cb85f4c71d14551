"""Order aggregate, the core of the ordering domain.

The Order owns its line items, which never change after creation.
Status moves PENDING -> CONFIRMED | CANCELLED in response to inventory
outcomes; the later shipping statuses are administrative.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from serp.domain.exceptions import ValidationError
from serp.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


# Once goods have left the warehouse the order can no longer be cancelled.
NON_CANCELLABLE = frozenset({OrderStatus.SHIPPED, OrderStatus.DELIVERED})

MAX_LINE_ITEMS = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class OrderItem:
    """A line item with the unit price captured at order-creation time."""

    id: str
    order_id: str
    item_id: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use ``Order.create()`` for new orders.  The ``__init__`` stays plain
    so the repository can reconstitute stored orders without
    re-validating them.
    """

    id: str
    customer_id: str
    items: list[OrderItem]
    total_amount: Money
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    reserved_item_ids: set[str] = field(default_factory=set)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        customer_id: str,
        lines: list[tuple[str, Quantity, Money]],
        now: datetime | None = None,
    ) -> Order:
        """Create a PENDING order from ``(item_id, quantity, unit_price)`` lines.

        ``total_amount`` is computed here once and never recomputed.
        """
        if not customer_id or not customer_id.strip():
            raise ValidationError("Customer ID is required")
        if not lines:
            raise ValidationError("Order must contain at least one item")
        if len(lines) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")

        seen: set[str] = set()
        for item_id, _, _ in lines:
            if item_id in seen:
                raise ValidationError(f"Item '{item_id}' appears more than once in order")
            seen.add(item_id)

        order_id = str(uuid.uuid4())
        items = [
            OrderItem(
                id=str(uuid.uuid4()),
                order_id=order_id,
                item_id=item_id,
                quantity=quantity,
                unit_price=unit_price,
            )
            for item_id, quantity, unit_price in lines
        ]

        total = Money.zero()
        for item in items:
            total = total + item.line_total

        now = now or _utcnow()
        return Order(
            id=order_id,
            customer_id=customer_id.strip(),
            items=items,
            total_amount=total,
            created_at=now,
            updated_at=now,
        )

    # --- Saga transitions -----------------------------------------------------

    def awaits_reservation(self, item_id: str) -> bool:
        return (
            self.status == OrderStatus.PENDING
            and item_id not in self.reserved_item_ids
            and any(line.item_id == item_id for line in self.items)
        )

    def mark_reserved(self, item_id: str, now: datetime | None = None) -> None:
        """Record a successful reservation; confirm once every line is in."""
        if not self.awaits_reservation(item_id):
            raise ValidationError(
                f"Order {self.id} is not awaiting a reservation for item '{item_id}' "
                f"(status {self.status.value})"
            )
        self.reserved_item_ids.add(item_id)
        if all(line.item_id in self.reserved_item_ids for line in self.items):
            self.status = OrderStatus.CONFIRMED
        self.updated_at = now or _utcnow()

    def fail_reservation(self, now: datetime | None = None) -> None:
        """Transition PENDING -> CANCELLED after an inventory rejection."""
        if self.status != OrderStatus.PENDING:
            raise ValidationError(
                f"Cannot reject order {self.id}: current status is "
                f"{self.status.value}, expected PENDING"
            )
        self.status = OrderStatus.CANCELLED
        self.updated_at = now or _utcnow()

    # --- Administrative transitions -------------------------------------------

    def cancel(self, now: datetime | None = None) -> bool:
        """Cancel the order.  Returns False when it was already cancelled."""
        if self.status == OrderStatus.CANCELLED:
            return False
        if self.status in NON_CANCELLABLE:
            raise ValidationError(
                f"Cannot cancel order in {self.status.value} status"
            )
        self.status = OrderStatus.CANCELLED
        self.updated_at = now or _utcnow()
        return True

    def change_status(self, new_status: OrderStatus, now: datetime | None = None) -> None:
        """Administrative move to a non-cancelled status."""
        if new_status == OrderStatus.CANCELLED:
            raise ValidationError("Use cancel() to cancel an order")
        if self.status == OrderStatus.CANCELLED:
            raise ValidationError(f"Order {self.id} is cancelled and cannot change status")
        if new_status == OrderStatus.PENDING and self.status != OrderStatus.PENDING:
            raise ValidationError("An order cannot be moved back to PENDING")
        self.status = new_status
        self.updated_at = now or _utcnow()
