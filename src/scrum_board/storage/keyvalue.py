"""Key-value persistence shared by the local and Redis backends.

Each record collection lives under one namespaced key and is rewritten in
full after every mutation::

    scrumProjects     -> JSON array of projects
    scrumTasks        -> JSON array of tasks
    scrumStories      -> JSON array of stories
    scrumSprints      -> JSON array of sprints
    currentProjectId  -> JSON string or null

Records are serialised with Pydantic's own JSON encoder using the camelCase
aliases (``storyPoints``, ``createdAt`` …).
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError

from scrum_board.core.exceptions import PersistenceError, RecordNotFoundError
from scrum_board.core.types import RECORD_MODELS, RecordKind
from scrum_board.storage.base import BoardSnapshot, ScrumBackend

if TYPE_CHECKING:
    from scrum_board.core.types import AnyRecord

logger = logging.getLogger(__name__)

COLLECTION_KEYS: dict[RecordKind, str] = {
    RecordKind.PROJECTS: "scrumProjects",
    RecordKind.TASKS: "scrumTasks",
    RecordKind.STORIES: "scrumStories",
    RecordKind.SPRINTS: "scrumSprints",
}
CURRENT_PROJECT_KEY = "currentProjectId"

_ADAPTERS: dict[RecordKind, TypeAdapter[list[Any]]] = {
    kind: TypeAdapter(list[model]) for kind, model in RECORD_MODELS.items()  # type: ignore[valid-type]
}
_CURRENT_ADAPTER: TypeAdapter[str | None] = TypeAdapter(str | None)


class KeyValueBackend(ScrumBackend):
    """Backend over a flat string key-value namespace.

    Subclasses only provide :meth:`_read` and :meth:`_write`.  The decoded
    collections are cached so a mutation re-serialises one collection and
    issues a single write; the cache changes only after the write succeeds.
    """

    def __init__(self) -> None:
        self._collections: dict[RecordKind, dict[str, AnyRecord]] | None = None

    @abstractmethod
    async def _read(self, key: str) -> str | None:
        """Return the raw value under *key*, or ``None`` if absent.

        Raises:
            PersistenceError: If the storage cannot be read
        """

    @abstractmethod
    async def _write(self, key: str, value: str) -> None:
        """Store *value* under *key*.

        Raises:
            PersistenceError: If the storage cannot be written
        """

    def _serialize(self, kind: RecordKind, records: dict[str, AnyRecord]) -> str:
        return _ADAPTERS[kind].dump_json(list(records.values()), by_alias=True).decode("utf-8")

    def _deserialize(self, kind: RecordKind, raw: str | None) -> dict[str, AnyRecord]:
        if not raw:
            return {}
        try:
            records = _ADAPTERS[kind].validate_json(raw)
        except ValidationError as exc:
            raise PersistenceError(
                "load", f"corrupt {COLLECTION_KEYS[kind]} value", {"errors": exc.error_count()}
            ) from exc
        return {r.id: r for r in records}

    async def _ensure_loaded(self) -> dict[RecordKind, dict[str, AnyRecord]]:
        if self._collections is None:
            await self.load()
        assert self._collections is not None
        return self._collections

    async def load(self) -> BoardSnapshot:
        collections = {
            kind: self._deserialize(kind, await self._read(key))
            for kind, key in COLLECTION_KEYS.items()
        }
        raw_current = await self._read(CURRENT_PROJECT_KEY)
        try:
            current = _CURRENT_ADAPTER.validate_json(raw_current) if raw_current else None
        except ValidationError:
            logger.warning("Ignoring unreadable %s value", CURRENT_PROJECT_KEY)
            current = None

        self._collections = collections
        logger.debug(
            "Loaded key-value namespace: %s",
            {COLLECTION_KEYS[k]: len(v) for k, v in collections.items()},
        )
        return BoardSnapshot(
            projects=list(collections[RecordKind.PROJECTS].values()),
            tasks=list(collections[RecordKind.TASKS].values()),
            stories=list(collections[RecordKind.STORIES].values()),
            sprints=list(collections[RecordKind.SPRINTS].values()),
            current_project_id=current,
        )

    async def _commit(self, kind: RecordKind, records: dict[str, AnyRecord]) -> None:
        await self._write(COLLECTION_KEYS[kind], self._serialize(kind, records))
        collections = await self._ensure_loaded()
        collections[kind] = records

    async def insert(self, kind: RecordKind, record: AnyRecord) -> AnyRecord:
        records = dict((await self._ensure_loaded())[kind])
        if record.id in records:
            raise PersistenceError("insert", f"{kind} id {record.id!r} already exists")
        records[record.id] = record
        await self._commit(kind, records)
        logger.debug("Wrote %s after insert id=%s", COLLECTION_KEYS[kind], record.id)
        return record

    async def update(self, kind: RecordKind, record: AnyRecord) -> AnyRecord:
        records = dict((await self._ensure_loaded())[kind])
        if record.id not in records:
            raise RecordNotFoundError(kind, record.id)
        records[record.id] = record
        await self._commit(kind, records)
        logger.debug("Wrote %s after update id=%s", COLLECTION_KEYS[kind], record.id)
        return record

    async def delete(self, kind: RecordKind, record_id: str) -> None:
        records = dict((await self._ensure_loaded())[kind])
        if record_id not in records:
            raise RecordNotFoundError(kind, record_id)
        del records[record_id]
        await self._commit(kind, records)
        logger.debug("Wrote %s after delete id=%s", COLLECTION_KEYS[kind], record_id)

    async def save_current_project(self, project_id: str | None) -> None:
        await self._write(
            CURRENT_PROJECT_KEY, _CURRENT_ADAPTER.dump_json(project_id).decode("utf-8")
        )


__all__ = ["COLLECTION_KEYS", "CURRENT_PROJECT_KEY", "KeyValueBackend"]
