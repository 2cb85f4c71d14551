"""CLI commands for the Item aggregate."""

from __future__ import annotations

import click

from serp.infrastructure.cli.context import CliState, call


def _display_item(item: dict) -> None:
    click.echo(f"Item {item['id']}")
    click.echo(f"  Name:        {item['name']}")
    if item["description"]:
        click.echo(f"  Description: {item['description']}")
    click.echo(f"  Category:    {item['category'] or '-'}")
    click.echo(f"  Quantity:    {item['quantity']}")
    click.echo(f"  Unit price:  ${item['unitPrice']}")
    click.echo(f"  Updated:     {item['updatedAt']}")


@click.command("create")
@click.option("--name", required=True, help="Item name.")
@click.option("--quantity", required=True, type=int, help="Opening stock.")
@click.option("--unit-price", required=True, help="Price (e.g. 15.00).")
@click.option("--description", default="", help="Free-text description.")
@click.option("--category", default="", help="Category used for listing.")
@click.pass_obj
def item_create(
    state: CliState,
    name: str,
    quantity: int,
    unit_price: str,
    description: str,
    category: str,
) -> None:
    """Add a new item to inventory."""
    item = call(state, "createItem", {
        "input": {
            "name": name,
            "quantity": quantity,
            "unitPrice": unit_price,
            "description": description,
            "category": category,
        },
    })
    click.echo(f"Item {item['id']} '{item['name']}' created ({item['quantity']} in stock)")


@click.command("update")
@click.option("--id", "item_id", required=True, help="Item ID.")
@click.option("--name", default=None, help="New name.")
@click.option("--description", default=None, help="New description.")
@click.option("--quantity", default=None, type=int, help="New stock level.")
@click.option("--unit-price", default=None, help="New price (e.g. 29.99).")
@click.option("--category", default=None, help="New category.")
@click.pass_obj
def item_update(state: CliState, item_id: str, **fields: object) -> None:
    """Update an item; only the given fields change."""
    names = {"unit_price": "unitPrice"}
    payload = {names.get(k, k): v for k, v in fields.items() if v is not None}
    payload["id"] = item_id

    item = call(state, "updateItem", {"input": payload})
    if item is None:
        raise click.ClickException(f"Item '{item_id}' not found")
    _display_item(item)


@click.command("delete")
@click.option("--id", "item_id", required=True, help="Item ID.")
@click.pass_obj
def item_delete(state: CliState, item_id: str) -> None:
    """Delete an item."""
    item = call(state, "deleteItem", {"id": item_id})
    if item is None:
        click.echo(f"No item with ID '{item_id}'; nothing deleted.")
        return
    click.echo(f"Item {item['id']} '{item['name']}' deleted.")


@click.command("show")
@click.option("--id", "item_id", required=True, help="Item ID.")
@click.pass_obj
def item_show(state: CliState, item_id: str) -> None:
    """Show one item."""
    item = call(state, "getItem", {"id": item_id})
    if item is None:
        raise click.ClickException(f"Item '{item_id}' not found")
    _display_item(item)


@click.command("list")
@click.option("--category", default=None, help="Only items in this category.")
@click.pass_obj
def item_list(state: CliState, category: str | None) -> None:
    """List items in inventory."""
    arguments = {"filter": {"category": category}} if category else {}
    items = call(state, "listItems", arguments)

    if not items:
        click.echo("No items found.")
        return

    click.echo(f"{'ID':<38} {'Name':<20} {'Category':<12} {'Qty':>6} {'Price':>10}")
    click.echo("-" * 90)
    for item in items:
        click.echo(
            f"{item['id']:<38} {item['name']:<20} {item['category']:<12} "
            f"{item['quantity']:>6} {item['unitPrice']:>10}"
        )
