"""RecordStore-backed implementation of OrderRepository.

Line items are stored inline with the order since they never change.
Each order also gets a pointer in its customer's ``CUSTOMER#<id>``
partition; a failed pointer write is logged, not raised.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from serp.domain.events import format_timestamp, parse_timestamp
from serp.domain.exceptions import TransientInfrastructureError
from serp.domain.model.order import Order, OrderItem, OrderStatus
from serp.domain.model.value_objects import Money, Quantity
from serp.domain.repository.order_repository import (
    OrderMutation,
    OrderPrecondition,
    OrderRepository,
)
from serp.domain.repository.record_store import Record, RecordStore
from serp.infrastructure.persistence.keys import (
    CUSTOMER_INDEX_PREFIX,
    ORDER_PREFIX,
    customer_index_key,
    is_primary,
    order_key,
)

logger = structlog.get_logger(__name__)


class RecordOrderRepository(OrderRepository):

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: str) -> Order | None:
        record = self._store.get(order_key(order_id))
        if record is None:
            return None
        return self._to_domain(record.attributes)

    def list_all(
        self,
        customer_id: str | None = None,
        status: OrderStatus | None = None,
    ) -> list[Order]:
        if customer_id is None:
            orders = [
                self._to_domain(record.attributes)
                for record in self._store.query_by_prefix(ORDER_PREFIX)
                if is_primary(record.key)
            ]
        else:
            partition = f"{CUSTOMER_INDEX_PREFIX}{customer_id}"
            orders = []
            for pointer in self._store.query_by_prefix(partition):
                if pointer.key.pk != partition:
                    continue
                order = self.get_by_id(pointer.attributes["orderId"])
                if order is not None:
                    orders.append(order)

        if status is not None:
            orders = [o for o in orders if o.status == status]
        return sorted(orders, key=lambda o: (o.created_at, o.id))

    def add(self, order: Order) -> None:
        self._store.put(Record(order_key(order.id), self._to_raw(order)))
        pointer = Record(
            customer_index_key(order.customer_id, order.id),
            {
                "type": "METADATA",
                "orderId": order.id,
                "createdAt": format_timestamp(order.created_at),
            },
        )
        try:
            self._store.put(pointer)
        except TransientInfrastructureError as exc:
            logger.error(
                "Customer index write failed; order stored but unindexed",
                order_id=order.id,
                customer_id=order.customer_id,
                error=str(exc),
            )

    def update(
        self,
        order_id: str,
        mutation: OrderMutation,
        precondition: OrderPrecondition,
    ) -> Order:
        def apply(attributes: dict) -> dict:
            order = self._to_domain(attributes)
            mutation(order)
            return self._to_raw(order)

        record = self._store.conditional_update(
            order_key(order_id),
            apply,
            lambda attributes: precondition(self._to_domain(attributes)),
        )
        return self._to_domain(record.attributes)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "type": "ORDER",
            "id": order.id,
            "customerId": order.customer_id,
            "status": order.status.value,
            "totalAmount": str(order.total_amount.amount),
            "currency": order.total_amount.currency,
            "createdAt": format_timestamp(order.created_at),
            "updatedAt": format_timestamp(order.updated_at),
            "reservedItemIds": sorted(order.reserved_item_ids),
            "items": [
                {
                    "id": item.id,
                    "orderId": item.order_id,
                    "itemId": item.item_id,
                    "quantity": item.quantity.value,
                    "unitPrice": str(item.unit_price.amount),
                    "currency": item.unit_price.currency,
                }
                for item in order.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        items = [
            OrderItem(
                id=i["id"],
                order_id=i["orderId"],
                item_id=i["itemId"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unitPrice"]), i.get("currency", "USD")),
            )
            for i in raw["items"]
        ]
        return Order(
            id=raw["id"],
            customer_id=raw["customerId"],
            items=items,
            total_amount=Money(Decimal(raw["totalAmount"]), raw.get("currency", "USD")),
            status=OrderStatus(raw["status"]),
            created_at=parse_timestamp(raw["createdAt"]),
            updated_at=parse_timestamp(raw["updatedAt"]),
            reserved_item_ids=set(raw.get("reservedItemIds", [])),
        )
