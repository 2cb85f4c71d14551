"""CLI commands for the Order aggregate."""

from __future__ import annotations

from decimal import Decimal

import click

from serp.infrastructure.cli.context import CliState, call


def _parse_items(raw: str) -> list[dict]:
    """Parse 'itemA:3,itemB:5' (optionally 'itemA:3@15.00') into line specs."""
    lines: list[dict] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ItemId:Quantity'."
            )
        item_id, rest = pair.split(":", 1)
        qty_str, _, price = rest.partition("@")
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for item '{item_id}'."
            )
        line: dict = {"itemId": item_id.strip(), "quantity": qty}
        if price:
            line["unitPrice"] = price.strip()
        lines.append(line)
    return lines


def _line_total(line: dict) -> str:
    return f"{Decimal(line['unitPrice']) * line['quantity']:.2f}"


def _display_order(order: dict) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {order['id']}  (status={order['status']})")
    click.echo(f"Customer: {order['customerId']}")
    click.echo(f"Created:  {order['createdAt']}")
    click.echo()
    click.echo(f"  {'Item':<38} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*66}")
    for line in order["items"]:
        click.echo(
            f"  {line['itemId']:<38} {line['quantity']:>5} "
            f"{line['unitPrice']:>10} {_line_total(line):>10}"
        )
    click.echo(f"  {'-'*66}")
    click.echo(f"  {'Order Total':<44} {order['totalAmount']:>21}")


@click.command("create")
@click.option("--customer", required=True, help="Customer ID.")
@click.option(
    "--items",
    required=True,
    help="Lines as 'ItemId:Qty,ItemId:Qty'; append '@price' to override the item price.",
)
@click.pass_obj
def order_create(state: CliState, customer: str, items: str) -> None:
    """Create an order and run the reservation saga."""
    lines = _parse_items(items)
    created = call(state, "createOrder", {"input": {"customerId": customer, "items": lines}})

    # The saga has settled by now; show where it left the order.
    order = call(state, "getOrder", {"id": created["id"]}) or created
    _display_order(order)


@click.command("status")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--status", "new_status", required=True, help="New status, e.g. SHIPPED.")
@click.pass_obj
def order_status(state: CliState, order_id: str, new_status: str) -> None:
    """Move an order to a new status."""
    order = call(state, "updateOrderStatus", {"input": {"id": order_id, "status": new_status}})
    if order is None:
        raise click.ClickException(f"Order '{order_id}' not found")
    click.echo(f"Order {order['id']} is now {order['status']}.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.pass_obj
def order_cancel(state: CliState, order_id: str) -> None:
    """Cancel an order and return its reserved stock."""
    order = call(state, "cancelOrder", {"id": order_id})
    if order is None:
        raise click.ClickException(f"Order '{order_id}' not found")
    click.echo(f"Order {order['id']} cancelled.")


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.pass_obj
def order_show(state: CliState, order_id: str) -> None:
    """Display an order."""
    order = call(state, "getOrder", {"id": order_id})
    if order is None:
        raise click.ClickException(f"Order '{order_id}' not found")
    _display_order(order)


@click.command("list")
@click.option("--customer", default=None, help="Only this customer's orders.")
@click.option("--status", default=None, help="Only orders in this status.")
@click.pass_obj
def order_list(state: CliState, customer: str | None, status: str | None) -> None:
    """List orders."""
    filters = {}
    if customer:
        filters["customerId"] = customer
    if status:
        filters["status"] = status
    orders = call(state, "listOrders", {"filter": filters} if filters else {})

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<38} {'Customer':<16} {'Status':<10} {'Lines':>5} {'Total':>10}")
    click.echo("-" * 83)
    for order in orders:
        click.echo(
            f"{order['id']:<38} {order['customerId']:<16} {order['status']:<10} "
            f"{len(order['items']):>5} {order['totalAmount']:>10}"
        )
