"""Tests for the in-process event channel."""

import pytest

from serp.domain.events import Event, EventType
from serp.domain.exceptions import TransientInfrastructureError, ValidationError
from serp.infrastructure.messaging.in_memory_channel import InMemoryEventChannel


def _event(order_id: str = "O1", item_id: str = "I1", event_type=EventType.ORDER_CREATED) -> Event:
    return Event(type=event_type, order_id=order_id, item_id=item_id, quantity=1)


class _Recorder:

    def __init__(self, failures: int = 0) -> None:
        self.seen: list[Event] = []
        self.calls = 0
        self._failures = failures

    def __call__(self, event: Event) -> None:
        self.calls += 1
        if self._failures > 0:
            self._failures -= 1
            raise TransientInfrastructureError("store unavailable")
        self.seen.append(event)


# ── Subscription and ordering ────────────────────────────────────────────────


class TestDelivery:

    def test_delivers_only_subscribed_types(self):
        channel = InMemoryEventChannel()
        handler = _Recorder()
        channel.subscribe([EventType.ORDER_CREATED], handler)
        channel.publish(_event())
        channel.publish(_event(event_type=EventType.INVENTORY_UPDATED))
        assert channel.drain() == 1
        assert [e.type for e in handler.seen] == [EventType.ORDER_CREATED]

    def test_records_every_published_event(self):
        channel = InMemoryEventChannel()
        event = _event()
        channel.publish(event)
        assert channel.published == [event]
        assert channel.pending == 0

    def test_publish_does_not_deliver_until_drained(self):
        channel = InMemoryEventChannel()
        handler = _Recorder()
        channel.subscribe([EventType.ORDER_CREATED], handler)
        channel.publish(_event())
        assert handler.seen == []
        assert channel.pending == 1

    def test_preserves_order_within_a_partition(self):
        channel = InMemoryEventChannel()
        handler = _Recorder()
        channel.subscribe([EventType.ORDER_CREATED], handler)
        for item_id in ["I1", "I2", "I3"]:
            channel.publish(_event(item_id=item_id))
        channel.drain()
        assert [e.item_id for e in handler.seen] == ["I1", "I2", "I3"]

    def test_events_published_by_handlers_are_delivered(self):
        channel = InMemoryEventChannel()
        outcomes = _Recorder()

        def reply(event: Event) -> None:
            channel.publish(event.outcome(EventType.INVENTORY_UPDATED))

        channel.subscribe([EventType.ORDER_CREATED], reply)
        channel.subscribe([EventType.INVENTORY_UPDATED], outcomes)
        channel.publish(_event())
        assert channel.drain() == 2
        assert len(outcomes.seen) == 1

    def test_handlers_receive_a_decoded_copy(self):
        channel = InMemoryEventChannel()
        handler = _Recorder()
        channel.subscribe([EventType.ORDER_CREATED], handler)
        event = _event()
        channel.publish(event)
        channel.drain()
        assert handler.seen == [event]
        assert handler.seen[0] is not event

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValidationError, match="at least 1"):
            InMemoryEventChannel(max_delivery_attempts=0)


# ── Redelivery and parking ───────────────────────────────────────────────────


class TestRedelivery:

    def test_failed_delivery_is_retried(self):
        channel = InMemoryEventChannel(max_delivery_attempts=3)
        handler = _Recorder(failures=2)
        channel.subscribe([EventType.ORDER_CREATED], handler)
        channel.publish(_event())
        assert channel.drain() == 1
        assert handler.calls == 3
        assert channel.parked == []

    def test_exhausted_delivery_is_parked(self):
        channel = InMemoryEventChannel(max_delivery_attempts=3)
        handler = _Recorder(failures=5)
        channel.subscribe([EventType.ORDER_CREATED], handler)
        channel.publish(_event())
        assert channel.drain() == 0
        assert handler.calls == 3
        assert len(channel.parked) == 1
        parked = channel.parked[0]
        assert parked.attempts == 3
        assert "TransientInfrastructureError" in parked.error
        assert channel.pending == 0

    def test_failing_head_blocks_its_partition_only(self):
        channel = InMemoryEventChannel(max_delivery_attempts=3)
        failures = {"O1/I1": 2}
        delivered = []

        def handler(event: Event) -> None:
            key = f"{event.order_id}/{event.item_id}"
            if failures.get(key, 0) > 0:
                failures[key] -= 1
                raise TransientInfrastructureError("try again")
            delivered.append(key)

        channel.subscribe([EventType.ORDER_CREATED], handler)
        channel.publish(_event("O1", "I1"))
        channel.publish(_event("O1", "I2"))
        channel.publish(_event("O2", "I1"))
        channel.drain()

        assert delivered == ["O2/I1", "O1/I1", "O1/I2"]

    def test_partition_moves_on_after_parking(self):
        channel = InMemoryEventChannel(max_delivery_attempts=2)
        seen = []

        def handler(event: Event) -> None:
            if event.item_id == "I1":
                raise TransientInfrastructureError("never works")
            seen.append(event.item_id)

        channel.subscribe([EventType.ORDER_CREATED], handler)
        channel.publish(_event(item_id="I1"))
        channel.publish(_event(item_id="I2"))
        channel.drain()
        assert seen == ["I2"]
        assert [p.event.item_id for p in channel.parked] == ["I1"]

    def test_validation_error_is_parked_without_retry(self):
        channel = InMemoryEventChannel(max_delivery_attempts=3)
        calls = []

        def handler(event: Event) -> None:
            calls.append(event.item_id)
            raise ValidationError("quantity must be positive")

        channel.subscribe([EventType.ORDER_CREATED], handler)
        channel.publish(_event(item_id="I1"))
        channel.publish(_event(item_id="I2"))
        assert channel.drain() == 0

        assert calls == ["I1", "I2"]
        assert [p.attempts for p in channel.parked] == [1, 1]
        assert "ValidationError" in channel.parked[0].error
        assert channel.pending == 0
