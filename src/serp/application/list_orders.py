"""Application service: List Orders use case (query).

Customer filtering goes through the customer index; status is filtered
after the read.
"""

from __future__ import annotations

from serp.application.dto import OrderDTO
from serp.application.requests import ListOrdersRequest
from serp.domain.repository.order_repository import OrderRepository


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, request: ListOrdersRequest) -> list[OrderDTO]:
        orders = self._order_repo.list_all(
            customer_id=request.customer_id,
            status=request.status,
        )
        return [OrderDTO.from_domain(order) for order in orders]
