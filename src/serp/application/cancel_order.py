"""Application service: Cancel Order use case.

Cancelling is idempotent: an order that is already CANCELLED is
returned as-is and nothing is published.  Otherwise the status change
is a conditional write on the status we just read, followed by one
ORDER_CANCELLED per line so the inventory side can restore stock.
"""

from __future__ import annotations

import structlog

from serp.application.dto import OrderDTO
from serp.application.requests import CancelOrderRequest
from serp.domain.events import Event, EventType
from serp.domain.exceptions import PreconditionFailed
from serp.domain.model.order import OrderStatus
from serp.domain.repository.event_channel import EventChannel
from serp.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


class CancelOrderHandler:

    def __init__(self, order_repo: OrderRepository, channel: EventChannel) -> None:
        self._order_repo = order_repo
        self._channel = channel

    def handle(self, request: CancelOrderRequest) -> OrderDTO | None:
        order = self._order_repo.get_by_id(request.id)
        if order is None:
            return None
        if order.status == OrderStatus.CANCELLED:
            logger.info("Order already cancelled", order_id=order.id)
            return OrderDTO.from_domain(order)

        observed = order.status
        try:
            order = self._order_repo.update(
                order.id,
                lambda o: o.cancel(),
                lambda o: o.status == observed,
            )
        except PreconditionFailed as exc:
            raise PreconditionFailed(
                f"Order {request.id} changed while cancelling "
                f"(was {observed.value}); reload and retry"
            ) from exc

        for line in order.items:
            self._channel.publish(
                Event(
                    type=EventType.ORDER_CANCELLED,
                    order_id=order.id,
                    item_id=line.item_id,
                    quantity=line.quantity.value,
                )
            )
        logger.info("Order cancelled", order_id=order.id, previous_status=observed.value)
        return OrderDTO.from_domain(order)
