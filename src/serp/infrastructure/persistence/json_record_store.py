"""JSON-file-backed implementation of RecordStore.

The whole table lives in one JSON file which is re-read before each
operation and rewritten after each write.  A sidecar ``.lock`` file is
held for the whole load -> check -> mutate -> persist sequence, so
check-and-set stays atomic across every process that opens the same
table, not just across threads sharing one store object.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog
from filelock import FileLock, Timeout

from serp.domain.exceptions import TransientInfrastructureError
from serp.domain.repository.record_store import Key
from serp.infrastructure.persistence.in_memory_record_store import InMemoryRecordStore

logger = structlog.get_logger(__name__)


class JsonFileRecordStore(InMemoryRecordStore):

    def __init__(self, file_path: Path, timeout: float = 5.0) -> None:
        super().__init__(timeout=timeout)
        self._file_path = file_path
        lock_path = file_path.with_name(file_path.name + ".lock")
        try:
            lock_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise TransientInfrastructureError(
                f"Cannot create record store directory {lock_path.parent}: {exc}"
            ) from exc
        self._file_lock = FileLock(str(lock_path), timeout=timeout)
        with self._storage_lock():
            self._ensure_file()

    @property
    def file_path(self) -> Path:
        return self._file_path

    # --- Cross-process lock ---------------------------------------------------

    @contextmanager
    def _storage_lock(self) -> Iterator[None]:
        try:
            self._file_lock.acquire()
        except Timeout as exc:
            logger.warning(
                "Record store file lock wait timed out",
                lock_file=self._file_lock.lock_file,
                timeout=self._timeout,
            )
            raise TransientInfrastructureError(
                f"Record store {self._file_path} is locked by another process"
            ) from exc
        try:
            yield
        finally:
            self._file_lock.release()

    # --- File helpers ---------------------------------------------------------

    def _load(self) -> None:
        try:
            raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise TransientInfrastructureError(
                f"Cannot read record store {self._file_path}: {exc}"
            ) from exc
        self._records = {
            Key(entry["pk"], entry["sk"]): entry["attributes"] for entry in raw
        }

    def _persist(self) -> None:
        raw = [
            {"pk": key.pk, "sk": key.sk, "attributes": attributes}
            for key, attributes in sorted(self._records.items())
        ]
        tmp_path = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        try:
            tmp_path.write_text(json.dumps(raw, indent=2) + "\n", encoding="utf-8")
            tmp_path.replace(self._file_path)
        except OSError as exc:
            raise TransientInfrastructureError(
                f"Cannot write record store {self._file_path}: {exc}"
            ) from exc

    def _ensure_file(self) -> None:
        if self._file_path.exists():
            return
        try:
            self._file_path.write_text("[]", encoding="utf-8")
        except OSError as exc:
            raise TransientInfrastructureError(
                f"Cannot create record store {self._file_path}: {exc}"
            ) from exc
