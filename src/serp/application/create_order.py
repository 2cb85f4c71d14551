"""Application service: Create Order use case.

Writes the order as PENDING, then publishes one ORDER_CREATED per line
item.  The order only becomes CONFIRMED or CANCELLED later, when the
inventory side answers.
"""

from __future__ import annotations

import structlog

from serp.application.dto import OrderDTO
from serp.application.requests import CreateOrderRequest
from serp.domain.events import Event, EventType
from serp.domain.exceptions import ValidationError
from serp.domain.model.order import Order
from serp.domain.model.value_objects import Money, Quantity
from serp.domain.repository.event_channel import EventChannel
from serp.domain.repository.item_repository import ItemRepository
from serp.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        item_repo: ItemRepository,
        channel: EventChannel,
    ) -> None:
        self._order_repo = order_repo
        self._item_repo = item_repo
        self._channel = channel

    def handle(self, request: CreateOrderRequest) -> OrderDTO:
        """Create a new order.

        Steps:
        1. Resolve each line's unit price (explicit, or the item's
           current price as a snapshot).
        2. Let the Order aggregate validate and total the lines.
        3. Persist, then publish the lifecycle events.
        """
        lines: list[tuple[str, Quantity, Money]] = []
        for spec in request.lines:
            if spec.unit_price is not None:
                unit_price = Money(spec.unit_price)
            else:
                item = self._item_repo.get_by_id(spec.item_id)
                if item is None:
                    raise ValidationError(
                        f"Unknown item '{spec.item_id}' and no unitPrice given"
                    )
                unit_price = item.unit_price  # <-- price snapshot
            lines.append((spec.item_id, Quantity(spec.quantity), unit_price))

        order = Order.create(customer_id=request.customer_id, lines=lines)
        self._order_repo.add(order)

        for line in order.items:
            self._channel.publish(
                Event(
                    type=EventType.ORDER_CREATED,
                    order_id=order.id,
                    item_id=line.item_id,
                    quantity=line.quantity.value,
                )
            )

        logger.info(
            "Order created",
            order_id=order.id,
            customer_id=order.customer_id,
            lines=len(order.items),
            total_amount=str(order.total_amount.amount),
        )
        return OrderDTO.from_domain(order)
