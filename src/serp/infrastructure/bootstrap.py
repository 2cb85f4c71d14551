"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions and on the Settings it
is handed.
"""

from __future__ import annotations

from dataclasses import dataclass

from serp.application.gateway import MutationGateway
from serp.application.inventory_saga import InventorySagaParticipant
from serp.application.order_saga import OrderSagaParticipant
from serp.domain.events import LIFECYCLE_EVENTS, OUTCOME_EVENTS
from serp.domain.repository.item_repository import ItemRepository
from serp.domain.repository.order_repository import OrderRepository
from serp.domain.repository.record_store import RecordStore
from serp.infrastructure.config import Settings
from serp.infrastructure.messaging.in_memory_channel import InMemoryEventChannel
from serp.infrastructure.persistence.json_record_store import JsonFileRecordStore
from serp.infrastructure.persistence.record_item_repository import RecordItemRepository
from serp.infrastructure.persistence.record_order_repository import RecordOrderRepository


@dataclass
class Services:
    settings: Settings
    store: RecordStore
    channel: InMemoryEventChannel
    items: ItemRepository
    orders: OrderRepository
    gateway: MutationGateway


def record_store(settings: Settings) -> JsonFileRecordStore:
    return JsonFileRecordStore(settings.table_file, timeout=settings.store_timeout)


def event_channel(settings: Settings) -> InMemoryEventChannel:
    return InMemoryEventChannel(
        max_delivery_attempts=settings.max_delivery_attempts,
        name=settings.event_bus_name,
    )


def wire(settings: Settings, store: RecordStore | None = None) -> Services:
    """Build the full object graph; ``store`` overrides the JSON file store."""
    store = store if store is not None else record_store(settings)
    channel = event_channel(settings)
    items = RecordItemRepository(store)
    orders = RecordOrderRepository(store)

    inventory = InventorySagaParticipant(items, channel)
    ordering = OrderSagaParticipant(orders, channel)
    channel.subscribe(LIFECYCLE_EVENTS, inventory.handle)
    channel.subscribe(OUTCOME_EVENTS, ordering.handle)

    return Services(
        settings=settings,
        store=store,
        channel=channel,
        items=items,
        orders=orders,
        gateway=MutationGateway(items, orders, channel),
    )
