"""Application service: Delete Item use case."""

from __future__ import annotations

import structlog

from serp.application.dto import ItemDTO
from serp.application.requests import DeleteItemRequest
from serp.domain.repository.item_repository import ItemRepository

logger = structlog.get_logger(__name__)


class DeleteItemHandler:

    def __init__(self, item_repo: ItemRepository) -> None:
        self._item_repo = item_repo

    def handle(self, request: DeleteItemRequest) -> ItemDTO | None:
        """Delete an item; None means there was nothing to delete."""
        item = self._item_repo.delete(request.id)
        if item is None:
            return None
        logger.info("Item deleted", item_id=item.id)
        return ItemDTO.from_domain(item)
