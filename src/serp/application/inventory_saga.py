"""Inventory saga participant.

Consumes order lifecycle events and answers with outcome events:

- ORDER_CREATED   -> reserve stock, publish INVENTORY_UPDATED, or
                     publish INSUFFICIENT_INVENTORY without touching stock
- ORDER_CANCELLED -> restore what this order reserved, publish
                     INVENTORY_RESTORED

Every stock movement is one conditional write on the item row that
also records the decision in the item's reservation ledger.  That ledger
is what makes redelivered events harmless: a replay finds the decision
already taken and re-publishes its outcome instead of moving stock
again.  The participant keeps no state of its own.
"""

from __future__ import annotations

import structlog

from serp.domain.events import Event, EventType
from serp.domain.exceptions import (
    PreconditionFailed,
    TransientInfrastructureError,
    ValidationError,
)
from serp.domain.model.item import Reservation, ReservationStatus
from serp.domain.repository.event_channel import EventChannel
from serp.domain.repository.item_repository import ItemRepository

logger = structlog.get_logger(__name__)

_REPLAYED_OUTCOMES = {
    ReservationStatus.RESERVED: EventType.INVENTORY_UPDATED,
    ReservationStatus.REJECTED: EventType.INSUFFICIENT_INVENTORY,
}


def _is_reserved(entry: Reservation | None) -> bool:
    return entry is not None and entry.status is ReservationStatus.RESERVED


class InventorySagaParticipant:

    def __init__(self, item_repo: ItemRepository, channel: EventChannel) -> None:
        self._item_repo = item_repo
        self._channel = channel

    def handle(self, event: Event) -> None:
        if event.quantity <= 0:
            raise ValidationError(
                f"{event.type.value} for order {event.order_id} has non-positive "
                f"quantity {event.quantity}"
            )
        if event.type == EventType.ORDER_CREATED:
            self._reserve(event)
        elif event.type == EventType.ORDER_CANCELLED:
            self._restore(event)
        else:
            raise ValidationError(f"Inventory does not handle {event.type.value}")

    # --- ORDER_CREATED --------------------------------------------------------

    def _reserve(self, event: Event) -> None:
        order_id, qty = event.order_id, event.quantity
        try:
            item = self._item_repo.update(
                event.item_id,
                lambda item: item.reserve(order_id, qty),
                lambda item: item.can_reserve(order_id, qty),
            )
        except PreconditionFailed:
            self._settle_unreserved(event)
            return

        logger.info(
            "Stock reserved",
            order_id=order_id,
            item_id=event.item_id,
            quantity=qty,
            remaining=item.quantity,
        )
        self._channel.publish(event.outcome(EventType.INVENTORY_UPDATED))

    def _settle_unreserved(self, event: Event) -> None:
        """The reserve precondition failed: stock is short or already decided."""
        order_id, qty = event.order_id, event.quantity
        item = self._item_repo.get_by_id(event.item_id)
        if item is None:
            logger.warning(
                "Reservation rejected for unknown item",
                order_id=order_id,
                item_id=event.item_id,
            )
            self._channel.publish(event.outcome(EventType.INSUFFICIENT_INVENTORY))
            return

        entry = item.reservation_for(order_id)
        if entry is not None:
            self._replay(event, entry)
            return

        try:
            self._item_repo.update(
                event.item_id,
                lambda item: item.reject(order_id, qty),
                lambda item: item.reservation_for(order_id) is None and item.quantity < qty,
            )
        except PreconditionFailed as exc:
            # Stock moved between the two writes; let the channel redeliver.
            raise TransientInfrastructureError(
                f"Item {event.item_id} changed while deciding order {order_id}"
            ) from exc

        logger.info(
            "Reservation rejected: insufficient stock",
            order_id=order_id,
            item_id=event.item_id,
            requested=qty,
            available=item.quantity,
        )
        self._channel.publish(event.outcome(EventType.INSUFFICIENT_INVENTORY))

    def _replay(self, event: Event, entry: Reservation) -> None:
        outcome = _REPLAYED_OUTCOMES.get(entry.status)
        if outcome is None:
            logger.info(
                "Order already cancelled for this item; nothing to reserve",
                order_id=event.order_id,
                item_id=event.item_id,
                status=entry.status.value,
            )
            return
        logger.info(
            "Duplicate order event; re-publishing recorded outcome",
            order_id=event.order_id,
            item_id=event.item_id,
            status=entry.status.value,
        )
        self._channel.publish(event.outcome(outcome))

    # --- ORDER_CANCELLED ------------------------------------------------------

    def _restore(self, event: Event) -> None:
        order_id = event.order_id
        try:
            item = self._item_repo.update(
                event.item_id,
                lambda item: item.restore(order_id),
                lambda item: _is_reserved(item.reservation_for(order_id)),
            )
        except PreconditionFailed:
            self._settle_unrestored(event)
            return

        restored = item.reservation_for(order_id).quantity
        logger.info(
            "Stock restored",
            order_id=order_id,
            item_id=event.item_id,
            quantity=restored,
            available=item.quantity,
        )
        self._channel.publish(
            Event(
                type=EventType.INVENTORY_RESTORED,
                order_id=order_id,
                item_id=event.item_id,
                quantity=restored,
            )
        )

    def _settle_unrestored(self, event: Event) -> None:
        """Nothing RESERVED for this order: duplicate, rejected, or never seen."""
        order_id = event.order_id
        item = self._item_repo.get_by_id(event.item_id)
        if item is None:
            logger.warning(
                "Cannot restore stock for a deleted item",
                order_id=order_id,
                item_id=event.item_id,
            )
            return

        entry = item.reservation_for(order_id)
        if entry is None:
            try:
                self._item_repo.update(
                    event.item_id,
                    lambda item: item.void(order_id, event.quantity),
                    lambda item: item.reservation_for(order_id) is None,
                )
            except PreconditionFailed as exc:
                raise TransientInfrastructureError(
                    f"Item {event.item_id} changed while voiding order {order_id}"
                ) from exc
            logger.info(
                "Cancellation arrived before any reservation; voided",
                order_id=order_id,
                item_id=event.item_id,
            )
        elif entry.status is ReservationStatus.RESTORED:
            logger.info(
                "Duplicate cancellation; re-publishing restore",
                order_id=order_id,
                item_id=event.item_id,
            )
            self._channel.publish(
                Event(
                    type=EventType.INVENTORY_RESTORED,
                    order_id=order_id,
                    item_id=event.item_id,
                    quantity=entry.quantity,
                )
            )
        else:
            logger.info(
                "Nothing reserved for cancelled order",
                order_id=order_id,
                item_id=event.item_id,
                status=entry.status.value,
            )
