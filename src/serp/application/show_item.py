"""Application service: Show Item use case (query)."""

from __future__ import annotations

from serp.application.dto import ItemDTO
from serp.application.requests import GetItemRequest
from serp.domain.repository.item_repository import ItemRepository


class ShowItemHandler:

    def __init__(self, item_repo: ItemRepository) -> None:
        self._item_repo = item_repo

    def handle(self, request: GetItemRequest) -> ItemDTO | None:
        item = self._item_repo.get_by_id(request.id)
        if item is None:
            return None
        return ItemDTO.from_domain(item)
