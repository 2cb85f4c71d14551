import dataclasses
import json
from pathlib import Path

import click

from serp.domain.exceptions import DomainException
from serp.infrastructure.cli.context import CliState, call
from serp.infrastructure.cli.item_commands import (
    item_create,
    item_delete,
    item_list,
    item_show,
    item_update,
)
from serp.infrastructure.cli.order_commands import (
    order_cancel,
    order_create,
    order_list,
    order_show,
    order_status,
)
from serp.infrastructure.config import LOG_FORMATS, LOG_LEVELS, Settings
from serp.infrastructure.observability import configure_logging


@click.group()
@click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Directory holding the record table (env: SERP_DATA_DIR).")
@click.option("--table-name", default=None, help="Record table name (env: SERP_TABLE_NAME).")
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default=None,
              help="Log level (env: SERP_LOG_LEVEL).")
@click.option("--log-format", type=click.Choice(LOG_FORMATS), default=None,
              help="Log renderer (env: SERP_LOG_FORMAT).")
@click.pass_context
def cli(ctx, data_dir, table_name, log_level, log_format) -> None:
    """SERP — serverless order/inventory saga"""
    overrides = {
        "data_dir": data_dir,
        "table_name": table_name,
        "log_level": log_level.upper() if log_level else None,
        "log_format": log_format,
    }
    try:
        settings = dataclasses.replace(
            Settings.from_env(),
            **{k: v for k, v in overrides.items() if v is not None},
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))
    configure_logging(settings)
    ctx.obj = CliState(settings)


@cli.group()
def item() -> None:
    """Manage inventory items."""


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.command("invoke")
@click.argument("field_name")
@click.option("--args", "raw_args", default="{}", help="Argument bag as a JSON object.")
@click.pass_obj
def invoke(state: CliState, field_name: str, raw_args: str) -> None:
    """Call a gateway field directly and print the JSON result."""
    try:
        arguments = json.loads(raw_args)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"--args is not valid JSON: {exc}")
    result = call(state, field_name, arguments)
    click.echo(json.dumps(result, indent=2))


# Register subcommands
item.add_command(item_create)
item.add_command(item_delete)
item.add_command(item_list)
item.add_command(item_show)
item.add_command(item_update)
order.add_command(order_cancel)
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_show)
order.add_command(order_status)
