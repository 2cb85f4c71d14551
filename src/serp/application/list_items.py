"""Application service: List Items use case (query)."""

from __future__ import annotations

from serp.application.dto import ItemDTO
from serp.application.requests import ListItemsRequest
from serp.domain.repository.item_repository import ItemRepository


class ListItemsHandler:

    def __init__(self, item_repo: ItemRepository) -> None:
        self._item_repo = item_repo

    def handle(self, request: ListItemsRequest) -> list[ItemDTO]:
        items = self._item_repo.list_all(category=request.category)
        return [ItemDTO.from_domain(item) for item in items]
