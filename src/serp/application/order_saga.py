"""Order saga participant.

Consumes inventory outcome events and moves orders out of PENDING:

- INVENTORY_UPDATED      -> mark the line reserved; CONFIRMED once every
                            line is reserved
- INSUFFICIENT_INVENTORY -> CANCELLED, then ORDER_CANCELLED for every
                            line so reservations already made on other
                            lines are given back

Both transitions are conditional on the order still being PENDING, so
duplicates and events that arrive after an administrative change are
dropped as benign no-ops.
"""

from __future__ import annotations

import structlog

from serp.domain.events import Event, EventType
from serp.domain.exceptions import PreconditionFailed, ValidationError
from serp.domain.model.order import OrderStatus
from serp.domain.repository.event_channel import EventChannel
from serp.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


class OrderSagaParticipant:

    def __init__(self, order_repo: OrderRepository, channel: EventChannel) -> None:
        self._order_repo = order_repo
        self._channel = channel

    def handle(self, event: Event) -> None:
        if event.type == EventType.INVENTORY_UPDATED:
            self._mark_reserved(event)
        elif event.type == EventType.INSUFFICIENT_INVENTORY:
            self._reject(event)
        elif event.type == EventType.INVENTORY_RESTORED:
            logger.info(
                "Stock restored for cancelled order",
                order_id=event.order_id,
                item_id=event.item_id,
                quantity=event.quantity,
            )
        else:
            raise ValidationError(f"Orders do not handle {event.type.value}")

    def _mark_reserved(self, event: Event) -> None:
        item_id = event.item_id
        try:
            order = self._order_repo.update(
                event.order_id,
                lambda o: o.mark_reserved(item_id),
                lambda o: o.awaits_reservation(item_id),
            )
        except PreconditionFailed:
            logger.info(
                "Ignoring inventory update for order no longer awaiting it",
                order_id=event.order_id,
                item_id=item_id,
            )
            return

        if order.status == OrderStatus.CONFIRMED:
            logger.info("Order confirmed", order_id=order.id)
        else:
            logger.info(
                "Order line reserved; awaiting remaining lines",
                order_id=order.id,
                item_id=item_id,
                reserved=len(order.reserved_item_ids),
                lines=len(order.items),
            )

    def _reject(self, event: Event) -> None:
        try:
            order = self._order_repo.update(
                event.order_id,
                lambda o: o.fail_reservation(),
                lambda o: o.status == OrderStatus.PENDING,
            )
        except PreconditionFailed:
            logger.info(
                "Ignoring insufficient-inventory for order no longer pending",
                order_id=event.order_id,
                item_id=event.item_id,
            )
            return

        logger.info(
            "Order cancelled: insufficient inventory",
            order_id=order.id,
            item_id=event.item_id,
        )
        for line in order.items:
            self._channel.publish(
                Event(
                    type=EventType.ORDER_CANCELLED,
                    order_id=order.id,
                    item_id=line.item_id,
                    quantity=line.quantity.value,
                )
            )
