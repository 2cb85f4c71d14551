"""Shared CLI plumbing: lazy wiring and gateway calls."""

from __future__ import annotations

import click

from serp.domain.exceptions import DomainException
from serp.infrastructure.bootstrap import Services, wire
from serp.infrastructure.config import Settings


class CliState:
    """Carried in ``ctx.obj``; wires the services on first use."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._services: Services | None = None

    @property
    def services(self) -> Services:
        if self._services is None:
            try:
                self._services = wire(self.settings)
            except DomainException as exc:
                raise click.ClickException(str(exc))
        return self._services


def call(state: CliState, field_name: str, arguments: dict | None = None):
    """Invoke the gateway, then let the saga settle before returning."""
    services = state.services
    try:
        result = services.gateway.handle(field_name, arguments)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    settle(services)
    return result


def settle(services: Services) -> None:
    """Drain the channel and report anything that had to be parked."""
    already_parked = len(services.channel.parked)
    services.channel.drain()
    for parked in services.channel.parked[already_parked:]:
        click.echo(
            f"warning: {parked.event.type.value} for order {parked.event.order_id} "
            f"(item {parked.event.item_id}) parked after {parked.attempts} attempts: "
            f"{parked.error}",
            err=True,
        )
