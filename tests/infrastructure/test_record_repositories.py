"""Tests for the single-table item and order repositories."""

from serp.domain.model.item import Item, ReservationStatus
from serp.domain.model.order import Order, OrderStatus
from serp.domain.model.value_objects import Money, Quantity
from serp.infrastructure.persistence.in_memory_record_store import InMemoryRecordStore
from serp.infrastructure.persistence.keys import category_index_key, customer_index_key, item_key
from serp.infrastructure.persistence.record_item_repository import RecordItemRepository
from serp.infrastructure.persistence.record_order_repository import RecordOrderRepository
from tests.fakes import FlakyRecordStore


def _item(name: str = "Widget", category: str = "", quantity: int = 5) -> Item:
    return Item.create(name=name, quantity=quantity, unit_price=Money.of("15.00"), category=category)


def _order(customer: str = "C1", item_id: str = "I1") -> Order:
    return Order.create(customer_id=customer, lines=[(item_id, Quantity(2), Money.of("3.50"))])


# ── Items ────────────────────────────────────────────────────────────────────


class TestRecordItemRepository:

    def test_round_trip_keeps_ledger_and_price(self):
        repo = RecordItemRepository(InMemoryRecordStore())
        item = _item()
        item.reserve("O1", 2)
        repo.add(item)
        loaded = repo.get_by_id(item.id)
        assert loaded == item
        assert loaded.reservation_for("O1").status is ReservationStatus.RESERVED

    def test_stored_record_uses_item_keys(self):
        store = InMemoryRecordStore()
        item = _item()
        RecordItemRepository(store).add(item)
        raw = store.get(item_key(item.id)).attributes
        assert raw["type"] == "ITEM"
        assert raw["unitPrice"] == "15.00"

    def test_list_all_skips_index_records(self):
        repo = RecordItemRepository(InMemoryRecordStore())
        repo.add(_item("A", category="tools"))
        repo.add(_item("B"))
        assert sorted(i.name for i in repo.list_all()) == ["A", "B"]

    def test_list_by_category_uses_exact_partition(self):
        repo = RecordItemRepository(InMemoryRecordStore())
        repo.add(_item("Hammer", category="tool"))
        repo.add(_item("Toolbox", category="tools"))
        assert [i.name for i in repo.list_all(category="tool")] == ["Hammer"]

    def test_category_change_moves_index_pointer(self):
        store = InMemoryRecordStore()
        repo = RecordItemRepository(store)
        item = _item(category="tools")
        repo.add(item)
        repo.update(item.id, lambda i: i.update(category="garden"), lambda i: True)
        assert repo.list_all(category="tools") == []
        assert [i.id for i in repo.list_all(category="garden")] == [item.id]
        assert store.get(category_index_key("tools", item.id)) is None

    def test_delete_removes_index_pointer(self):
        store = InMemoryRecordStore()
        repo = RecordItemRepository(store)
        item = _item(category="tools")
        repo.add(item)
        assert repo.delete(item.id).id == item.id
        assert store.get(category_index_key("tools", item.id)) is None
        assert repo.delete(item.id) is None

    def test_failed_index_write_keeps_item(self):
        store = FlakyRecordStore(fail_put=lambda r: r.key.pk.startswith("METADATA#"))
        repo = RecordItemRepository(store)
        item = _item(category="tools")
        repo.add(item)
        assert repo.get_by_id(item.id) is not None
        assert repo.list_all(category="tools") == []


# ── Orders ───────────────────────────────────────────────────────────────────


class TestRecordOrderRepository:

    def test_round_trip(self):
        repo = RecordOrderRepository(InMemoryRecordStore())
        order = _order()
        order.mark_reserved("I1")
        repo.add(order)
        assert repo.get_by_id(order.id) == order

    def test_writes_customer_index(self):
        store = InMemoryRecordStore()
        order = _order("C7")
        RecordOrderRepository(store).add(order)
        assert store.get(customer_index_key("C7", order.id)).attributes["orderId"] == order.id

    def test_list_by_customer_and_status(self):
        repo = RecordOrderRepository(InMemoryRecordStore())
        first, second, other = _order("C1"), _order("C1", "I2"), _order("C2")
        second.cancel()
        for order in (first, second, other):
            repo.add(order)

        assert {o.id for o in repo.list_all(customer_id="C1")} == {first.id, second.id}
        assert [o.id for o in repo.list_all(customer_id="C1", status=OrderStatus.CANCELLED)] == [second.id]
        assert len(repo.list_all()) == 3

    def test_conditional_update(self):
        repo = RecordOrderRepository(InMemoryRecordStore())
        order = _order()
        repo.add(order)
        updated = repo.update(order.id, lambda o: o.cancel(), lambda o: o.status == OrderStatus.PENDING)
        assert updated.status == OrderStatus.CANCELLED
        assert repo.get_by_id(order.id).status == OrderStatus.CANCELLED

    def test_failed_index_write_keeps_order(self):
        store = FlakyRecordStore(fail_put=lambda r: r.key.pk.startswith("CUSTOMER#"))
        repo = RecordOrderRepository(store)
        order = _order()
        repo.add(order)
        assert repo.get_by_id(order.id) is not None
        assert repo.list_all(customer_id="C1") == []
