"""In-process EventChannel with at-least-once, per-partition delivery.

``publish`` encodes the event to its JSON wire form and queues one
delivery per subscribed handler in the event's partition (its order id).
Each attempt decodes a fresh copy, so handlers never share an object
with the publisher.  ``drain`` works through the partitions round-robin,
strictly in order within each one.  A handler that raises keeps its
delivery at the head of the partition and is retried on the next pass;
after ``max_delivery_attempts`` failures the delivery is parked and the
partition moves on.  A ValidationError is never retried: the delivery
is parked after that first attempt.

``drain`` is meant to be called from a single thread at a time.
"""

from __future__ import annotations

import threading
from collections import OrderedDict, defaultdict, deque
from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from serp.domain.events import Event, EventType
from serp.domain.exceptions import ValidationError
from serp.domain.repository.event_channel import EventChannel, EventHandler

logger = structlog.get_logger(__name__)


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", repr(handler))


@dataclass
class _Delivery:
    event: Event
    payload: str
    handler: EventHandler
    attempts: int = 0
    last_error: str = ""
    retryable: bool = True


@dataclass(frozen=True)
class ParkedEvent:
    """A delivery that exhausted its retry budget or could never succeed."""

    event: Event
    handler: str
    attempts: int
    error: str


class InMemoryEventChannel(EventChannel):

    def __init__(self, max_delivery_attempts: int = 3, name: str = "serp-event-bus") -> None:
        if max_delivery_attempts < 1:
            raise ValidationError("max_delivery_attempts must be at least 1")
        self.name = name
        self._max_attempts = max_delivery_attempts
        self._subscribers: dict[EventType, list[EventHandler]] = defaultdict(list)
        self._partitions: OrderedDict[str, deque[_Delivery]] = OrderedDict()
        self._lock = threading.Lock()
        self.published: list[Event] = []
        self.parked: list[ParkedEvent] = []

    # --- EventChannel interface -----------------------------------------------

    def publish(self, event: Event) -> None:
        with self._lock:
            self.published.append(event)
            handlers = list(self._subscribers.get(event.type, ()))
            if handlers:
                payload = event.to_json()
                queue = self._partitions.setdefault(event.partition_key, deque())
                queue.extend(_Delivery(event, payload, handler) for handler in handlers)
        logger.debug(
            "Event published",
            bus=self.name,
            event_type=event.type.value,
            order_id=event.order_id,
            item_id=event.item_id,
            subscribers=len(handlers),
        )

    def subscribe(self, event_types: Iterable[EventType], handler: EventHandler) -> None:
        with self._lock:
            for event_type in event_types:
                self._subscribers[event_type].append(handler)

    # --- Delivery -------------------------------------------------------------

    @property
    def pending(self) -> int:
        with self._lock:
            return sum(len(queue) for queue in self._partitions.values())

    def drain(self) -> int:
        """Deliver until every partition is empty; return successful deliveries."""
        delivered = 0
        while True:
            with self._lock:
                heads = [(key, queue[0]) for key, queue in self._partitions.items() if queue]
            if not heads:
                return delivered

            for key, delivery in heads:
                ok = self._attempt(delivery)
                with self._lock:
                    queue = self._partitions[key]
                    if ok or not delivery.retryable or delivery.attempts >= self._max_attempts:
                        queue.popleft()
                        if not ok:
                            self._park(delivery)
                    if not queue:
                        del self._partitions[key]
                if ok:
                    delivered += 1

    def _attempt(self, delivery: _Delivery) -> bool:
        delivery.attempts += 1
        try:
            delivery.handler(Event.from_json(delivery.payload))
        except Exception as exc:
            delivery.last_error = f"{type(exc).__name__}: {exc}"
            delivery.retryable = not isinstance(exc, ValidationError)
            logger.warning(
                "Event delivery failed",
                bus=self.name,
                event_type=delivery.event.type.value,
                order_id=delivery.event.order_id,
                handler=_handler_name(delivery.handler),
                attempt=delivery.attempts,
                retryable=delivery.retryable,
                error=delivery.last_error,
            )
            return False
        return True

    def _park(self, delivery: _Delivery) -> None:
        parked = ParkedEvent(
            event=delivery.event,
            handler=_handler_name(delivery.handler),
            attempts=delivery.attempts,
            error=delivery.last_error,
        )
        self.parked.append(parked)
        logger.error(
            "Event parked",
            bus=self.name,
            event_type=delivery.event.type.value,
            order_id=delivery.event.order_id,
            item_id=delivery.event.item_id,
            handler=parked.handler,
            attempts=parked.attempts,
            error=parked.error,
        )
