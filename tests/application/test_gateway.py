"""Tests for the mutation gateway's routing and JSON shapes."""

import pytest

from serp.domain.exceptions import ValidationError
from tests.fakes import place_order, services, stock_item


class TestGatewayItems:

    def test_create_and_get(self):
        svc = services()
        created = svc.gateway.handle("createItem", {
            "input": {"name": "Widget", "quantity": 5, "unitPrice": "15", "category": "tools"},
        })
        assert set(created) == {
            "id", "name", "description", "quantity", "unitPrice", "category", "createdAt", "updatedAt",
        }
        assert created["unitPrice"] == "15.00"
        assert svc.gateway.handle("getItem", {"id": created["id"]}) == created

    def test_list_returns_list_of_dicts(self):
        svc = services()
        stock_item(svc, 1, name="A", category="tools")
        stock_item(svc, 1, name="B", category="garden")
        listed = svc.gateway.handle("listItems", {"filter": {"category": "garden"}})
        assert [i["name"] for i in listed] == ["B"]

    def test_missing_item_is_none(self):
        assert services().gateway.handle("getItem", {"id": "nope"}) is None

    def test_delete(self):
        svc = services()
        item = stock_item(svc, 1)
        assert svc.gateway.handle("deleteItem", {"id": item.id})["id"] == item.id
        assert svc.gateway.handle("getItem", {"id": item.id}) is None


class TestGatewayOrders:

    def test_create_order_shape(self):
        svc = services()
        item = stock_item(svc, 5)
        order = place_order(svc, "C1", (item.id, 3))
        assert order["status"] == "PENDING"
        assert order["totalAmount"] == "45.00"
        assert order["items"][0] == {
            "id": order["items"][0]["id"],
            "orderId": order["id"],
            "itemId": item.id,
            "quantity": 3,
            "unitPrice": "15.00",
        }

    def test_list_orders_by_customer(self):
        svc = services()
        item = stock_item(svc, 5)
        place_order(svc, "C1", (item.id, 1))
        place_order(svc, "C2", (item.id, 1))
        listed = svc.gateway.handle("listOrders", {"filter": {"customerId": "C1"}})
        assert [o["customerId"] for o in listed] == ["C1"]

    def test_update_status_through_gateway(self):
        svc = services()
        item = stock_item(svc, 5)
        order = place_order(svc, "C1", (item.id, 1))
        svc.channel.drain()
        updated = svc.gateway.handle("updateOrderStatus", {
            "input": {"id": order["id"], "status": "PROCESSING"},
        })
        assert updated["status"] == "PROCESSING"


class TestGatewayErrors:

    def test_unknown_field(self):
        with pytest.raises(ValidationError, match="Unknown field"):
            services().gateway.handle("explode", {})

    def test_malformed_arguments_write_nothing(self):
        svc = services()
        with pytest.raises(ValidationError):
            svc.gateway.handle("createOrder", {"input": {"customerId": "C1", "items": [{"itemId": "I1"}]}})
        assert svc.gateway.handle("listOrders") == []
        assert svc.channel.published == []
