"""RecordStore-backed implementation of ItemRepository.

Every item has a primary record plus, when it has a category, a
pointer record in the ``METADATA#CATEGORY#<category>`` partition.  The
pointer is written after the primary record; if that second write
fails the item is stored correctly but missing from category listings
until it is next updated.  Such failures are logged at error level.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from serp.domain.events import format_timestamp, parse_timestamp
from serp.domain.exceptions import TransientInfrastructureError
from serp.domain.model.item import Item, Reservation, ReservationStatus
from serp.domain.model.value_objects import Money
from serp.domain.repository.item_repository import (
    ItemMutation,
    ItemPrecondition,
    ItemRepository,
)
from serp.domain.repository.record_store import Record, RecordStore
from serp.infrastructure.persistence.keys import (
    CATEGORY_INDEX_PREFIX,
    ITEM_PREFIX,
    category_index_key,
    is_primary,
    item_key,
)

logger = structlog.get_logger(__name__)


class RecordItemRepository(ItemRepository):

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    # --- ItemRepository interface ---------------------------------------------

    def get_by_id(self, item_id: str) -> Item | None:
        record = self._store.get(item_key(item_id))
        if record is None:
            return None
        return self._to_domain(record.attributes)

    def list_all(self, category: str | None = None) -> list[Item]:
        if category is None:
            return [
                self._to_domain(record.attributes)
                for record in self._store.query_by_prefix(ITEM_PREFIX)
                if is_primary(record.key)
            ]

        partition = f"{CATEGORY_INDEX_PREFIX}{category}"
        items: list[Item] = []
        for pointer in self._store.query_by_prefix(partition):
            if pointer.key.pk != partition:
                continue
            item = self.get_by_id(pointer.attributes["itemId"])
            # Pointers can outlive a category change whose cleanup failed.
            if item is not None and item.category == category:
                items.append(item)
        return items

    def add(self, item: Item) -> None:
        self._store.put(Record(item_key(item.id), self._to_raw(item)))
        if item.category:
            self._write_index(item)

    def update(
        self,
        item_id: str,
        mutation: ItemMutation,
        precondition: ItemPrecondition,
    ) -> Item:
        previous: dict[str, str] = {}

        def apply(attributes: dict) -> dict:
            item = self._to_domain(attributes)
            previous["category"] = item.category
            mutation(item)
            return self._to_raw(item)

        record = self._store.conditional_update(
            item_key(item_id),
            apply,
            lambda attributes: precondition(self._to_domain(attributes)),
        )
        item = self._to_domain(record.attributes)

        old_category = previous.get("category", item.category)
        if old_category != item.category:
            if old_category:
                self._remove_index(old_category, item.id)
            if item.category:
                self._write_index(item)
        return item

    def delete(self, item_id: str) -> Item | None:
        record = self._store.delete(item_key(item_id))
        if record is None:
            return None
        item = self._to_domain(record.attributes)
        if item.category:
            self._remove_index(item.category, item.id)
        return item

    # --- Category index -------------------------------------------------------

    def _write_index(self, item: Item) -> None:
        pointer = Record(
            category_index_key(item.category, item.id),
            {
                "type": "METADATA",
                "itemId": item.id,
                "createdAt": format_timestamp(item.created_at),
            },
        )
        try:
            self._store.put(pointer)
        except TransientInfrastructureError as exc:
            logger.error(
                "Category index write failed; item stored but unindexed",
                item_id=item.id,
                category=item.category,
                error=str(exc),
            )

    def _remove_index(self, category: str, item_id: str) -> None:
        try:
            self._store.delete(category_index_key(category, item_id))
        except TransientInfrastructureError as exc:
            logger.error(
                "Category index cleanup failed; stale pointer left behind",
                item_id=item_id,
                category=category,
                error=str(exc),
            )

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(item: Item) -> dict:
        return {
            "type": "ITEM",
            "id": item.id,
            "name": item.name,
            "description": item.description,
            "quantity": item.quantity,
            "unitPrice": str(item.unit_price.amount),
            "currency": item.unit_price.currency,
            "category": item.category,
            "createdAt": format_timestamp(item.created_at),
            "updatedAt": format_timestamp(item.updated_at),
            "reservations": {
                order_id: {"quantity": entry.quantity, "status": entry.status.value}
                for order_id, entry in item.reservations.items()
            },
        }

    @staticmethod
    def _to_domain(raw: dict) -> Item:
        return Item(
            id=raw["id"],
            name=raw["name"],
            description=raw.get("description", ""),
            quantity=raw["quantity"],
            unit_price=Money(Decimal(raw["unitPrice"]), raw.get("currency", "USD")),
            category=raw.get("category", ""),
            created_at=parse_timestamp(raw["createdAt"]),
            updated_at=parse_timestamp(raw["updatedAt"]),
            reservations={
                order_id: Reservation(entry["quantity"], ReservationStatus(entry["status"]))
                for order_id, entry in raw.get("reservations", {}).items()
            },
        )
