"""Abstract repository for the Item aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from serp.domain.model.item import Item

ItemMutation = Callable[[Item], object]
ItemPrecondition = Callable[[Item], bool]


class ItemRepository(ABC):

    @abstractmethod
    def get_by_id(self, item_id: str) -> Item | None:
        """Return an item by its ID, or None if not found."""

    @abstractmethod
    def list_all(self, category: str | None = None) -> list[Item]:
        """Return every item, optionally only those in ``category``."""

    @abstractmethod
    def add(self, item: Item) -> None:
        """Persist a new item and index it by category."""

    @abstractmethod
    def update(
        self,
        item_id: str,
        mutation: ItemMutation,
        precondition: ItemPrecondition,
    ) -> Item:
        """Atomically apply ``mutation`` if ``precondition`` holds.

        Raises PreconditionFailed if the item is missing or the
        precondition does not hold.  Returns the updated item.
        """

    @abstractmethod
    def delete(self, item_id: str) -> Item | None:
        """Remove an item; return it, or None if there was nothing to delete."""
