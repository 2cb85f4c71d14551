"""Mutation gateway: the synchronous entry point.

Callers name a field (``createOrder``, ``getItem``, ...) and pass a
loosely-typed argument bag.  The bag is turned into a typed request at
the boundary, routed to its use-case handler, and the result comes back
as JSON-ready data: a dict, a list of dicts, or None for "not found".
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from serp.application.cancel_order import CancelOrderHandler
from serp.application.create_item import CreateItemHandler
from serp.application.create_order import CreateOrderHandler
from serp.application.delete_item import DeleteItemHandler
from serp.application.list_items import ListItemsHandler
from serp.application.list_orders import ListOrdersHandler
from serp.application.requests import (
    CancelOrderRequest,
    CreateItemRequest,
    CreateOrderRequest,
    DeleteItemRequest,
    GetItemRequest,
    GetOrderRequest,
    ListItemsRequest,
    ListOrdersRequest,
    UpdateItemRequest,
    UpdateOrderStatusRequest,
    parse_request,
)
from serp.application.show_item import ShowItemHandler
from serp.application.show_order import ShowOrderHandler
from serp.application.update_item import UpdateItemHandler
from serp.application.update_order_status import UpdateOrderStatusHandler
from serp.domain.repository.event_channel import EventChannel
from serp.domain.repository.item_repository import ItemRepository
from serp.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


class MutationGateway:

    def __init__(
        self,
        item_repo: ItemRepository,
        order_repo: OrderRepository,
        channel: EventChannel,
    ) -> None:
        cancel = CancelOrderHandler(order_repo, channel)
        self._routes: dict[type, Callable] = {
            GetItemRequest: ShowItemHandler(item_repo).handle,
            ListItemsRequest: ListItemsHandler(item_repo).handle,
            CreateItemRequest: CreateItemHandler(item_repo).handle,
            UpdateItemRequest: UpdateItemHandler(item_repo).handle,
            DeleteItemRequest: DeleteItemHandler(item_repo).handle,
            GetOrderRequest: ShowOrderHandler(order_repo).handle,
            ListOrdersRequest: ListOrdersHandler(order_repo).handle,
            CreateOrderRequest: CreateOrderHandler(order_repo, item_repo, channel).handle,
            UpdateOrderStatusRequest: UpdateOrderStatusHandler(order_repo, cancel).handle,
            CancelOrderRequest: cancel.handle,
        }

    def handle(self, field_name: str, arguments: dict | None = None) -> dict | list[dict] | None:
        """Validate, dispatch and serialise one gateway call.

        Raises ValidationError for an unknown field or malformed
        arguments; other DomainExceptions propagate unchanged.
        """
        request = parse_request(field_name, arguments)
        logger.debug("Gateway call", field=field_name, request=type(request).__name__)
        result = self._routes[type(request)](request)
        if result is None:
            return None
        if isinstance(result, list):
            return [dto.to_dict() for dto in result]
        return result.to_dict()
