"""Unit tests for the Order aggregate."""

from decimal import Decimal

import pytest

from serp.domain.exceptions import ValidationError
from serp.domain.model.order import MAX_LINE_ITEMS, Order, OrderStatus
from serp.domain.model.value_objects import Money, Quantity


def _order(*lines: tuple[str, int, str]) -> Order:
    if not lines:
        lines = (("I1", 3, "15.00"),)
    return Order.create(
        customer_id="C1",
        lines=[(item_id, Quantity(qty), Money.of(price)) for item_id, qty, price in lines],
    )


# ── Creation ─────────────────────────────────────────────────────────────────


class TestOrderCreate:

    def test_new_order_is_pending(self):
        order = _order()
        assert order.status == OrderStatus.PENDING
        assert order.reserved_item_ids == set()

    def test_total_is_sum_of_lines(self):
        order = _order(("I1", 3, "15.00"), ("I2", 2, "2.50"))
        assert order.total_amount.amount == Decimal("50.00")

    def test_lines_carry_order_id(self):
        order = _order(("I1", 3, "15.00"), ("I2", 2, "2.50"))
        assert {line.order_id for line in order.items} == {order.id}
        assert len({line.id for line in order.items}) == 2

    def test_blank_customer_rejected(self):
        with pytest.raises(ValidationError, match="Customer ID is required"):
            Order.create(customer_id=" ", lines=[("I1", Quantity(1), Money.of("1"))])

    def test_empty_order_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.create(customer_id="C1", lines=[])

    def test_too_many_lines_rejected(self):
        lines = [(f"I{n}", Quantity(1), Money.of("1")) for n in range(MAX_LINE_ITEMS + 1)]
        with pytest.raises(ValidationError, match="Maximum 50 items"):
            Order.create(customer_id="C1", lines=lines)

    def test_fifty_lines_allowed(self):
        lines = [(f"I{n}", Quantity(1), Money.of("1")) for n in range(MAX_LINE_ITEMS)]
        assert len(Order.create(customer_id="C1", lines=lines).items) == MAX_LINE_ITEMS

    def test_duplicate_item_rejected(self):
        with pytest.raises(ValidationError, match="more than once"):
            _order(("I1", 1, "1"), ("I1", 2, "1"))


# ── Saga transitions ─────────────────────────────────────────────────────────


class TestMarkReserved:

    def test_single_line_confirms(self):
        order = _order()
        order.mark_reserved("I1")
        assert order.status == OrderStatus.CONFIRMED

    def test_multi_line_confirms_only_when_all_reserved(self):
        order = _order(("I1", 1, "1"), ("I2", 1, "1"))
        order.mark_reserved("I1")
        assert order.status == OrderStatus.PENDING
        order.mark_reserved("I2")
        assert order.status == OrderStatus.CONFIRMED

    def test_duplicate_reservation_rejected(self):
        order = _order(("I1", 1, "1"), ("I2", 1, "1"))
        order.mark_reserved("I1")
        assert not order.awaits_reservation("I1")
        with pytest.raises(ValidationError, match="not awaiting"):
            order.mark_reserved("I1")

    def test_unknown_item_rejected(self):
        with pytest.raises(ValidationError, match="not awaiting"):
            _order().mark_reserved("I9")

    def test_cancelled_order_does_not_confirm(self):
        order = _order()
        order.cancel()
        assert not order.awaits_reservation("I1")


class TestFailReservation:

    def test_pending_becomes_cancelled(self):
        order = _order()
        order.fail_reservation()
        assert order.status == OrderStatus.CANCELLED

    def test_confirmed_order_rejected(self):
        order = _order()
        order.mark_reserved("I1")
        with pytest.raises(ValidationError, match="expected PENDING"):
            order.fail_reservation()


# ── Administrative transitions ───────────────────────────────────────────────


class TestCancel:

    @pytest.mark.parametrize("status", [
        OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING,
    ])
    def test_cancellable_statuses(self, status):
        order = _order()
        order.status = status
        assert order.cancel() is True
        assert order.status == OrderStatus.CANCELLED

    def test_cancel_is_idempotent(self):
        order = _order()
        order.cancel()
        assert order.cancel() is False
        assert order.status == OrderStatus.CANCELLED

    @pytest.mark.parametrize("status", [OrderStatus.SHIPPED, OrderStatus.DELIVERED])
    def test_shipped_orders_cannot_be_cancelled(self, status):
        order = _order()
        order.status = status
        with pytest.raises(ValidationError, match=f"Cannot cancel order in {status.value}"):
            order.cancel()


class TestChangeStatus:

    def test_moves_forward(self):
        order = _order()
        order.mark_reserved("I1")
        order.change_status(OrderStatus.SHIPPED)
        assert order.status == OrderStatus.SHIPPED

    def test_cancelled_is_routed_through_cancel(self):
        with pytest.raises(ValidationError, match="Use cancel"):
            _order().change_status(OrderStatus.CANCELLED)

    def test_cancelled_order_is_frozen(self):
        order = _order()
        order.cancel()
        with pytest.raises(ValidationError, match="cannot change status"):
            order.change_status(OrderStatus.PROCESSING)

    def test_no_way_back_to_pending(self):
        order = _order()
        order.mark_reserved("I1")
        with pytest.raises(ValidationError, match="back to PENDING"):
            order.change_status(OrderStatus.PENDING)

