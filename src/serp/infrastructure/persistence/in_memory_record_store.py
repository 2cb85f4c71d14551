"""Dict-backed implementation of RecordStore.

A single lock serialises every operation, which makes each
``conditional_update`` an atomic check-and-set.  Lock waits are bounded
so a wedged caller surfaces as a transient failure instead of hanging.
Subclasses backed by shared storage widen the critical section through
``_storage_lock``.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager, nullcontext

import structlog

from serp.domain.exceptions import PreconditionFailed, TransientInfrastructureError
from serp.domain.repository.record_store import (
    Key,
    Mutation,
    Precondition,
    Record,
    RecordStore,
)

logger = structlog.get_logger(__name__)


class InMemoryRecordStore(RecordStore):

    def __init__(self, timeout: float = 5.0) -> None:
        self._records: dict[Key, dict] = {}
        self._lock = threading.RLock()
        self._timeout = timeout

    # --- RecordStore interface ------------------------------------------------

    def get(self, key: Key) -> Record | None:
        with self._locked():
            attributes = self._records.get(key)
            if attributes is None:
                return None
            return Record(key, copy.deepcopy(attributes))

    def put(self, record: Record) -> None:
        with self._locked():
            self._records[record.key] = copy.deepcopy(record.attributes)
            self._persist()

    def delete(self, key: Key) -> Record | None:
        with self._locked():
            attributes = self._records.pop(key, None)
            if attributes is None:
                return None
            self._persist()
            return Record(key, attributes)

    def conditional_update(
        self,
        key: Key,
        mutation: Mutation,
        precondition: Precondition,
    ) -> Record:
        with self._locked():
            current = self._records.get(key)
            if current is None:
                raise PreconditionFailed(f"No record at {key.pk}/{key.sk}")
            if not precondition(copy.deepcopy(current)):
                raise PreconditionFailed(f"Condition failed for {key.pk}/{key.sk}")
            updated = mutation(copy.deepcopy(current))
            self._records[key] = updated
            self._persist()
            return Record(key, copy.deepcopy(updated))

    def query_by_prefix(self, partition_prefix: str) -> list[Record]:
        with self._locked():
            return [
                Record(key, copy.deepcopy(attributes))
                for key, attributes in sorted(self._records.items())
                if key.pk.startswith(partition_prefix)
            ]

    # --- Locking and persistence hooks ----------------------------------------

    @contextmanager
    def _locked(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self._timeout):
            logger.warning("Record store lock wait timed out", timeout=self._timeout)
            raise TransientInfrastructureError(
                f"Record store did not respond within {self._timeout}s"
            )
        try:
            with self._storage_lock():
                self._load()
                yield
        finally:
            self._lock.release()

    def _storage_lock(self) -> AbstractContextManager:
        """Exclusive access to backing storage shared with other processes."""
        return nullcontext()

    def _load(self) -> None:
        """Refresh ``_records`` from backing storage (no-op in memory)."""

    def _persist(self) -> None:
        """Flush ``_records`` to backing storage (no-op in memory)."""
