"""Application service: Update Item use case.

Administrative, partial update: only the supplied fields change.  The
write is applied atomically against the current record so it never
overwrites a concurrent reservation's stock movement with stale data.
"""

from __future__ import annotations

from serp.application.dto import ItemDTO
from serp.application.requests import UpdateItemRequest
from serp.domain.exceptions import PreconditionFailed
from serp.domain.model.value_objects import Money
from serp.domain.repository.item_repository import ItemRepository


class UpdateItemHandler:

    def __init__(self, item_repo: ItemRepository) -> None:
        self._item_repo = item_repo

    def handle(self, request: UpdateItemRequest) -> ItemDTO | None:
        """Return the updated item, or None if it does not exist."""
        unit_price = None if request.unit_price is None else Money(request.unit_price)
        try:
            item = self._item_repo.update(
                request.id,
                lambda item: item.update(
                    name=request.name,
                    description=request.description,
                    quantity=request.quantity,
                    unit_price=unit_price,
                    category=request.category,
                ),
                lambda item: True,
            )
        except PreconditionFailed:
            # Unconditional update: the only way to fail is a missing item.
            return None
        return ItemDTO.from_domain(item)
