"""Domain events exchanged between the ordering and inventory sides.

Every event is a fact with the same flat envelope.  The wire format is
JSON with camelCase keys and an RFC3339 UTC timestamp; unknown keys
are ignored when decoding so producers may add fields.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

import pydantic
from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from serp.domain.exceptions import ValidationError


class EventType(str, Enum):
    ORDER_CREATED = "ORDER_CREATED"
    ORDER_CANCELLED = "ORDER_CANCELLED"
    INVENTORY_UPDATED = "INVENTORY_UPDATED"
    INVENTORY_RESTORED = "INVENTORY_RESTORED"
    INSUFFICIENT_INVENTORY = "INSUFFICIENT_INVENTORY"


LIFECYCLE_EVENTS = frozenset({EventType.ORDER_CREATED, EventType.ORDER_CANCELLED})
OUTCOME_EVENTS = frozenset({
    EventType.INVENTORY_UPDATED,
    EventType.INVENTORY_RESTORED,
    EventType.INSUFFICIENT_INVENTORY,
})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(raw: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except (AttributeError, ValueError) as exc:
        raise ValidationError(f"Invalid timestamp: {raw!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Event(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    type: EventType
    order_id: str
    item_id: str
    quantity: StrictInt
    timestamp: datetime = Field(default_factory=_utcnow)

    @field_validator("timestamp")
    @classmethod
    def timestamp_in_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @field_serializer("timestamp")
    def serialize_timestamp(self, value: datetime) -> str:
        return format_timestamp(value)

    @property
    def partition_key(self) -> str:
        """Events for one order are delivered in publication order."""
        return self.order_id

    # --- Wire codec -----------------------------------------------------------

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @staticmethod
    def from_json(payload: str | bytes) -> Event:
        try:
            return Event.model_validate_json(payload)
        except pydantic.ValidationError as exc:
            errors = exc.errors()
            if errors[0]["type"] == "json_invalid":
                raise ValidationError(
                    f"Event payload is not valid JSON: {errors[0]['msg']}"
                ) from exc
            if not errors[0]["loc"]:
                raise ValidationError("Event payload must be a JSON object") from exc
            raise ValidationError.from_errors(errors, "event field") from exc

    def outcome(self, event_type: EventType, now: datetime | None = None) -> Event:
        """Derive a follow-up event for the same order line."""
        return Event(
            type=event_type,
            order_id=self.order_id,
            item_id=self.item_id,
            quantity=self.quantity,
            timestamp=now or _utcnow(),
        )
