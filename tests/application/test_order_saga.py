"""Tests for the order saga participant in isolation."""

import pytest

from serp.application.order_saga import OrderSagaParticipant
from serp.domain.events import Event, EventType
from serp.domain.exceptions import ValidationError
from serp.domain.model.order import Order, OrderStatus
from serp.domain.model.value_objects import Money, Quantity
from serp.infrastructure.persistence.in_memory_record_store import InMemoryRecordStore
from serp.infrastructure.persistence.record_order_repository import RecordOrderRepository
from tests.fakes import RecordingChannel


def _setup(*item_ids: str):
    orders = RecordOrderRepository(InMemoryRecordStore())
    channel = RecordingChannel()
    order = Order.create("C1", [(i, Quantity(2), Money.of("1")) for i in item_ids or ("I1",)])
    orders.add(order)
    return OrderSagaParticipant(orders, channel), orders, channel, order


def _outcome(event_type: EventType, order: Order, item_id: str = "I1") -> Event:
    return Event(type=event_type, order_id=order.id, item_id=item_id, quantity=2)


class TestInventoryUpdated:

    def test_confirms_single_line_order(self):
        participant, orders, _, order = _setup()
        participant.handle(_outcome(EventType.INVENTORY_UPDATED, order))
        assert orders.get_by_id(order.id).status == OrderStatus.CONFIRMED

    def test_waits_for_every_line(self):
        participant, orders, _, order = _setup("I1", "I2")
        participant.handle(_outcome(EventType.INVENTORY_UPDATED, order, "I1"))
        assert orders.get_by_id(order.id).status == OrderStatus.PENDING
        participant.handle(_outcome(EventType.INVENTORY_UPDATED, order, "I2"))
        assert orders.get_by_id(order.id).status == OrderStatus.CONFIRMED

    def test_duplicate_is_a_no_op(self):
        participant, orders, _, order = _setup()
        participant.handle(_outcome(EventType.INVENTORY_UPDATED, order))
        updated_at = orders.get_by_id(order.id).updated_at
        participant.handle(_outcome(EventType.INVENTORY_UPDATED, order))
        assert orders.get_by_id(order.id).updated_at == updated_at

    def test_cancelled_order_stays_cancelled(self):
        participant, orders, _, order = _setup()
        orders.update(order.id, lambda o: o.cancel(), lambda o: True)
        participant.handle(_outcome(EventType.INVENTORY_UPDATED, order))
        assert orders.get_by_id(order.id).status == OrderStatus.CANCELLED

    def test_unknown_order_is_a_no_op(self):
        participant, _, channel, order = _setup()
        order.id = "missing"
        participant.handle(_outcome(EventType.INVENTORY_UPDATED, order))
        assert channel.published == []


class TestInsufficientInventory:

    def test_cancels_and_compensates_every_line(self):
        participant, orders, channel, order = _setup("I1", "I2")
        participant.handle(_outcome(EventType.INSUFFICIENT_INVENTORY, order, "I2"))
        assert orders.get_by_id(order.id).status == OrderStatus.CANCELLED
        cancelled = channel.of_type(EventType.ORDER_CANCELLED)
        assert sorted(e.item_id for e in cancelled) == ["I1", "I2"]

    def test_duplicate_compensates_once(self):
        participant, _, channel, order = _setup("I1", "I2")
        participant.handle(_outcome(EventType.INSUFFICIENT_INVENTORY, order, "I1"))
        participant.handle(_outcome(EventType.INSUFFICIENT_INVENTORY, order, "I1"))
        assert len(channel.of_type(EventType.ORDER_CANCELLED)) == 2

    def test_confirmed_order_is_not_cancelled(self):
        participant, orders, channel, order = _setup()
        participant.handle(_outcome(EventType.INVENTORY_UPDATED, order))
        participant.handle(_outcome(EventType.INSUFFICIENT_INVENTORY, order))
        assert orders.get_by_id(order.id).status == OrderStatus.CONFIRMED
        assert channel.published == []


class TestOtherEvents:

    def test_restored_is_acknowledged(self):
        participant, orders, channel, order = _setup()
        participant.handle(_outcome(EventType.INVENTORY_RESTORED, order))
        assert orders.get_by_id(order.id).status == OrderStatus.PENDING
        assert channel.published == []

    def test_lifecycle_events_rejected(self):
        participant, _, _, order = _setup()
        with pytest.raises(ValidationError, match="does not handle"):
            participant.handle(_outcome(EventType.ORDER_CREATED, order))
