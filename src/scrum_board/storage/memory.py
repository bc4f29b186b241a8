"""In-memory backend for testing and development.

WARNING: nothing is persisted.  All data is lost when the process exits.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from scrum_board.core.exceptions import PersistenceError, RecordNotFoundError
from scrum_board.core.types import RecordKind
from scrum_board.storage.base import BoardSnapshot, ScrumBackend

if TYPE_CHECKING:
    from scrum_board.core.types import AnyRecord

logger = logging.getLogger(__name__)


class InMemoryBackend(ScrumBackend):
    """Backend holding records in plain dictionaries.

    Use cases:
    - Unit testing
    - Local development and demos

    Example:
        ```python
        backend = InMemoryBackend()
        store = ScrumStore(backend)
        await store.load()

        # Inspect what the store wrote (for testing)
        backend.get_records(RecordKind.TASKS)
        backend.clear()
        ```

    Attributes:
        _records: Mapping of record kind to ``{id: record}``
        _current_project_id: Last saved current project id
    """

    def __init__(self, snapshot: BoardSnapshot | None = None) -> None:
        self._records: dict[RecordKind, dict[str, AnyRecord]] = {
            kind: {} for kind in RecordKind
        }
        self._current_project_id: str | None = None
        if snapshot is not None:
            for kind in RecordKind:
                for record in snapshot.records(kind):
                    self._records[kind][record.id] = record
            self._current_project_id = snapshot.current_project_id
        logger.info("Initialized in-memory backend")

    async def load(self) -> BoardSnapshot:
        snapshot = BoardSnapshot(
            projects=list(self._records[RecordKind.PROJECTS].values()),
            tasks=list(self._records[RecordKind.TASKS].values()),
            stories=list(self._records[RecordKind.STORIES].values()),
            sprints=list(self._records[RecordKind.SPRINTS].values()),
            current_project_id=self._current_project_id,
        )
        logger.debug("Loaded %d projects from memory", len(snapshot.projects))
        return snapshot

    async def insert(self, kind: RecordKind, record: AnyRecord) -> AnyRecord:
        collection = self._records[kind]
        if record.id in collection:
            raise PersistenceError("insert", f"{kind} id {record.id!r} already exists")
        collection[record.id] = record
        logger.debug("Inserted %s id=%s", kind, record.id)
        return record

    async def update(self, kind: RecordKind, record: AnyRecord) -> AnyRecord:
        collection = self._records[kind]
        if record.id not in collection:
            raise RecordNotFoundError(kind, record.id)
        collection[record.id] = record
        logger.debug("Updated %s id=%s", kind, record.id)
        return record

    async def delete(self, kind: RecordKind, record_id: str) -> None:
        collection = self._records[kind]
        if record_id not in collection:
            raise RecordNotFoundError(kind, record_id)
        del collection[record_id]
        logger.debug("Deleted %s id=%s", kind, record_id)

    async def save_current_project(self, project_id: str | None) -> None:
        self._current_project_id = project_id

    def get_records(self, kind: RecordKind) -> dict[str, AnyRecord]:
        """Return a copy of one collection (for testing/debugging)."""
        return self._records[kind].copy()

    @property
    def current_project_id(self) -> str | None:
        return self._current_project_id

    def clear(self) -> None:
        """Remove every record (for testing)."""
        for collection in self._records.values():
            collection.clear()
        self._current_project_id = None
        logger.info("Cleared all records from memory")

    def get_statistics(self) -> dict[str, Any]:
        """Return record counts per kind."""
        return {kind.value: len(records) for kind, records in self._records.items()}


__all__ = ["InMemoryBackend"]
