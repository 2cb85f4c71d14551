"""Abstract key-addressed record store.

Items, orders and their index entries share one address space.  A key
is a ``(pk, sk)`` pair; ``pk`` carries the entity type and id so
different entity kinds never collide.

``conditional_update`` is the only concurrency primitive: the
precondition is evaluated and the mutation applied as one atomic step
against a single record.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass(frozen=True, order=True)
class Key:
    pk: str
    sk: str


@dataclass
class Record:
    key: Key
    attributes: dict = field(default_factory=dict)


Precondition = Callable[[dict], bool]
Mutation = Callable[[dict], dict]


class RecordStore(ABC):

    @abstractmethod
    def get(self, key: Key) -> Record | None:
        """Return the record stored under ``key``, or None."""

    @abstractmethod
    def put(self, record: Record) -> None:
        """Unconditionally write ``record``, replacing any previous value."""

    @abstractmethod
    def delete(self, key: Key) -> Record | None:
        """Remove and return the record under ``key``, or None if absent."""

    @abstractmethod
    def conditional_update(
        self,
        key: Key,
        mutation: Mutation,
        precondition: Precondition,
    ) -> Record:
        """Apply ``mutation`` if ``precondition`` holds for the current value.

        Raises PreconditionFailed when the record is absent or the
        precondition is false.  Returns the updated record.
        """

    @abstractmethod
    def query_by_prefix(self, partition_prefix: str) -> list[Record]:
        """Return every record whose ``pk`` starts with ``partition_prefix``."""
