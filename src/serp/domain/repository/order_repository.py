"""Abstract repository for the Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from serp.domain.model.order import Order, OrderStatus

OrderMutation = Callable[[Order], object]
OrderPrecondition = Callable[[Order], bool]


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def list_all(
        self,
        customer_id: str | None = None,
        status: OrderStatus | None = None,
    ) -> list[Order]:
        """Return orders, optionally filtered by customer and/or status."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Persist a new order and index it by customer."""

    @abstractmethod
    def update(
        self,
        order_id: str,
        mutation: OrderMutation,
        precondition: OrderPrecondition,
    ) -> Order:
        """Atomically apply ``mutation`` if ``precondition`` holds.

        Raises PreconditionFailed if the order is missing or the
        precondition does not hold.  Returns the updated order.
        """
