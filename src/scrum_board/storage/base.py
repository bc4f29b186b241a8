"""Abstract persistence adapter for the Scrum board store.

The store keeps every record in memory and treats the backend as a black box
that confirms each write.  Implementations:

- InMemoryBackend: tests and demos, nothing persisted
- LocalFileBackend: local key-value persistence, one JSON file per key
- RedisBackend: the same key-value namespace held in Redis
- SQLAlchemyBackend: remote relational table store
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from scrum_board.core.types import Project, RecordKind, Sprint, Story, Task

if TYPE_CHECKING:
    from scrum_board.core.types import AnyRecord


class BoardSnapshot(BaseModel):
    """Everything a backend holds, as read at store start-up."""

    model_config = ConfigDict(frozen=True)

    projects: list[Project] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)
    stories: list[Story] = Field(default_factory=list)
    sprints: list[Sprint] = Field(default_factory=list)
    current_project_id: str | None = None

    def records(self, kind: RecordKind) -> list[AnyRecord]:
        """Return the collection held under *kind*."""
        return list(getattr(self, kind.value))


class ScrumBackend(ABC):
    """Persistence adapter contract.

    Every write either completes or raises
    :class:`~scrum_board.core.exceptions.PersistenceError` (or
    :class:`~scrum_board.core.exceptions.RecordNotFoundError` for an unknown
    id), so the store can apply its in-memory change only on success.

    Example:
        ```python
        backend = LocalFileBackend("~/.scrum-board")
        await backend.initialize()
        snapshot = await backend.load()

        await backend.insert(RecordKind.TASKS, task)
        await backend.update(RecordKind.TASKS, task.model_copy(update={"status": "Done"}))
        await backend.delete(RecordKind.TASKS, task.id)
        ```
    """

    async def initialize(self) -> None:
        """Prepare the underlying storage (create tables, directories …).

        Default implementation does nothing.
        """

    @abstractmethod
    async def load(self) -> BoardSnapshot:
        """Read every persisted record.

        Raises:
            PersistenceError: If the storage cannot be read
        """

    @abstractmethod
    async def insert(self, kind: RecordKind, record: AnyRecord) -> AnyRecord:
        """Persist a new record and return it as stored.

        Raises:
            PersistenceError: If the write fails or the id already exists
        """

    @abstractmethod
    async def update(self, kind: RecordKind, record: AnyRecord) -> AnyRecord:
        """Replace the stored record with the same id.

        Raises:
            RecordNotFoundError: If no record has that id
            PersistenceError: If the write fails
        """

    @abstractmethod
    async def delete(self, kind: RecordKind, record_id: str) -> None:
        """Delete a record by id.

        Raises:
            RecordNotFoundError: If no record has that id
            PersistenceError: If the write fails
        """

    @abstractmethod
    async def save_current_project(self, project_id: str | None) -> None:
        """Persist which project is current (``None`` clears it)."""

    async def close(self) -> None:
        """Release connections.  Default implementation does nothing."""


__all__ = ["BoardSnapshot", "ScrumBackend"]
