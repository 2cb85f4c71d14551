"""Application service: Update Order Status use case.

Administrative status changes (PROCESSING, SHIPPED, ...).  A request
for CANCELLED is routed through the cancel use case so stock is
restored.  The write is conditional on the status read beforehand; a
concurrent change is reported to the caller.
"""

from __future__ import annotations

import structlog

from serp.application.cancel_order import CancelOrderHandler
from serp.application.dto import OrderDTO
from serp.application.requests import CancelOrderRequest, UpdateOrderStatusRequest
from serp.domain.exceptions import PreconditionFailed
from serp.domain.model.order import OrderStatus
from serp.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


class UpdateOrderStatusHandler:

    def __init__(self, order_repo: OrderRepository, cancel_handler: CancelOrderHandler) -> None:
        self._order_repo = order_repo
        self._cancel_handler = cancel_handler

    def handle(self, request: UpdateOrderStatusRequest) -> OrderDTO | None:
        if request.status == OrderStatus.CANCELLED:
            return self._cancel_handler.handle(CancelOrderRequest(id=request.id))

        order = self._order_repo.get_by_id(request.id)
        if order is None:
            return None
        if order.status == request.status:
            return OrderDTO.from_domain(order)

        observed = order.status
        try:
            order = self._order_repo.update(
                order.id,
                lambda o: o.change_status(request.status),
                lambda o: o.status == observed,
            )
        except PreconditionFailed as exc:
            raise PreconditionFailed(
                f"Order {request.id} changed while updating status "
                f"(was {observed.value}); reload and retry"
            ) from exc

        logger.info(
            "Order status changed",
            order_id=order.id,
            previous_status=observed.value,
            status=order.status.value,
        )
        return OrderDTO.from_domain(order)
