"""Abstract publish/subscribe channel for domain events.

Delivery is at least once and ordered per ``Event.partition_key``.
Handlers signal failure by raising; the channel then redelivers up to
its retry budget before parking the event.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable

from serp.domain.events import Event, EventType

EventHandler = Callable[[Event], None]


class EventChannel(ABC):

    @abstractmethod
    def publish(self, event: Event) -> None:
        """Hand ``event`` to the transport.  Fire-and-forget."""

    @abstractmethod
    def subscribe(self, event_types: Iterable[EventType], handler: EventHandler) -> None:
        """Deliver every future event of ``event_types`` to ``handler``."""
