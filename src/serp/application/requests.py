"""Typed requests for the mutation gateway.

Callers hand the gateway a field name and a loosely-typed argument bag.
Each field maps to one frozen pydantic model; ``parse_request`` validates
the bag (or its ``input``/``filter`` envelope) against it and re-raises
any failure as a domain ValidationError naming the offending argument.
Nothing past this module sees raw argument dicts.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Optional, Union

import pydantic
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt, StringConstraints
from pydantic.alias_generators import to_camel

from serp.domain.exceptions import ValidationError
from serp.domain.model.order import OrderStatus

NonBlank = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Stock = Annotated[StrictInt, Field(ge=0)]
Price = Annotated[Decimal, Field(ge=0, allow_inf_nan=False)]


class _Request(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


# --- Item requests -----------------------------------------------------------


class GetItemRequest(_Request):
    id: NonBlank


class ListItemsRequest(_Request):
    category: Optional[str] = None


class CreateItemRequest(_Request):
    name: NonBlank
    quantity: Stock
    unit_price: Price
    description: str = ""
    category: str = ""


class UpdateItemRequest(_Request):
    id: NonBlank
    name: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[Stock] = None
    unit_price: Optional[Price] = None
    category: Optional[str] = None


class DeleteItemRequest(_Request):
    id: NonBlank


# --- Order requests ----------------------------------------------------------


class GetOrderRequest(_Request):
    id: NonBlank


class ListOrdersRequest(_Request):
    customer_id: Optional[str] = None
    status: Optional[OrderStatus] = None


class OrderLineSpec(_Request):
    """What the customer asked for.  ``unit_price`` None means "current price"."""

    item_id: NonBlank
    quantity: Annotated[StrictInt, Field(gt=0)]
    unit_price: Optional[Price] = None


class CreateOrderRequest(_Request):
    customer_id: NonBlank
    lines: tuple[OrderLineSpec, ...] = Field(alias="items")


class UpdateOrderStatusRequest(_Request):
    # Older callers send the order id as ``orderId``.
    id: NonBlank = Field(validation_alias=AliasChoices("id", "orderId"))
    status: OrderStatus


class CancelOrderRequest(_Request):
    id: NonBlank


Request = Union[
    GetItemRequest,
    ListItemsRequest,
    CreateItemRequest,
    UpdateItemRequest,
    DeleteItemRequest,
    GetOrderRequest,
    ListOrdersRequest,
    CreateOrderRequest,
    UpdateOrderStatusRequest,
    CancelOrderRequest,
]

# Field name -> (request model, argument that wraps its fields, if any).
REQUEST_TYPES: dict[str, tuple[type[_Request], Optional[str]]] = {
    "getItem": (GetItemRequest, None),
    "listItems": (ListItemsRequest, "filter"),
    "createItem": (CreateItemRequest, "input"),
    "updateItem": (UpdateItemRequest, "input"),
    "deleteItem": (DeleteItemRequest, None),
    "getOrder": (GetOrderRequest, None),
    "listOrders": (ListOrdersRequest, "filter"),
    "createOrder": (CreateOrderRequest, "input"),
    "updateOrderStatus": (UpdateOrderStatusRequest, "input"),
    "cancelOrder": (CancelOrderRequest, None),
}


def parse_request(field_name: str, arguments: object) -> Request:
    """Turn a ``(field name, argument bag)`` pair into a typed request."""
    entry = REQUEST_TYPES.get(field_name)
    if entry is None:
        raise ValidationError(f"Unknown field: {field_name}")
    model, envelope = entry

    args = arguments if arguments is not None else {}
    if not isinstance(args, dict):
        raise ValidationError(f"Arguments must be an object, got {type(args).__name__}")
    payload = args
    if envelope is not None:
        payload = args.get(envelope)
        # Filters are optional; an absent one matches everything.
        if payload is None and envelope == "filter":
            payload = {}

    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError.from_errors(exc.errors(), "argument", root=envelope or "") from exc
