"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry results out of the application layer without exposing
domain internals such as the reservation ledger.  ``to_dict`` gives the
camelCase JSON shape the gateway returns.
"""

from __future__ import annotations

from dataclasses import dataclass

from serp.domain.events import format_timestamp
from serp.domain.model.item import Item
from serp.domain.model.order import Order
from serp.domain.model.value_objects import Money


def _amount(money: Money) -> str:
    return f"{money.amount:.2f}"


@dataclass(frozen=True)
class ItemDTO:
    id: str
    name: str
    description: str
    quantity: int
    unit_price: str  # decimal string, e.g. "15.00"
    category: str
    created_at: str
    updated_at: str

    @staticmethod
    def from_domain(item: Item) -> ItemDTO:
        return ItemDTO(
            id=item.id,
            name=item.name,
            description=item.description,
            quantity=item.quantity,
            unit_price=_amount(item.unit_price),
            category=item.category,
            created_at=format_timestamp(item.created_at),
            updated_at=format_timestamp(item.updated_at),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "category": self.category,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class OrderItemDTO:
    id: str
    order_id: str
    item_id: str
    quantity: int
    unit_price: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "orderId": self.order_id,
            "itemId": self.item_id,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
        }


@dataclass(frozen=True)
class OrderDTO:
    id: str
    customer_id: str
    status: str
    items: list[OrderItemDTO]
    total_amount: str
    created_at: str
    updated_at: str

    @staticmethod
    def from_domain(order: Order) -> OrderDTO:
        return OrderDTO(
            id=order.id,
            customer_id=order.customer_id,
            status=order.status.value,
            items=[
                OrderItemDTO(
                    id=line.id,
                    order_id=line.order_id,
                    item_id=line.item_id,
                    quantity=line.quantity.value,
                    unit_price=_amount(line.unit_price),
                )
                for line in order.items
            ],
            total_amount=_amount(order.total_amount),
            created_at=format_timestamp(order.created_at),
            updated_at=format_timestamp(order.updated_at),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customerId": self.customer_id,
            "status": self.status,
            "items": [line.to_dict() for line in self.items],
            "totalAmount": self.total_amount,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
