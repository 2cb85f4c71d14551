"""Application service: Create Item use case."""

from __future__ import annotations

import structlog

from serp.application.dto import ItemDTO
from serp.application.requests import CreateItemRequest
from serp.domain.model.item import Item
from serp.domain.model.value_objects import Money
from serp.domain.repository.item_repository import ItemRepository

logger = structlog.get_logger(__name__)


class CreateItemHandler:

    def __init__(self, item_repo: ItemRepository) -> None:
        self._item_repo = item_repo

    def handle(self, request: CreateItemRequest) -> ItemDTO:
        """Add a new item to inventory with its opening stock."""
        item = Item.create(
            name=request.name,
            quantity=request.quantity,
            unit_price=Money(request.unit_price),
            description=request.description,
            category=request.category,
        )
        self._item_repo.add(item)
        logger.info("Item created", item_id=item.id, quantity=item.quantity)
        return ItemDTO.from_domain(item)
