"""Application service: Show Order use case (query)."""

from __future__ import annotations

from serp.application.dto import OrderDTO
from serp.application.requests import GetOrderRequest
from serp.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, request: GetOrderRequest) -> OrderDTO | None:
        order = self._order_repo.get_by_id(request.id)
        if order is None:
            return None
        return OrderDTO.from_domain(order)
