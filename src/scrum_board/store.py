"""The Scrum board store — single source of truth for board records.

``ScrumStore`` holds every project, task, story and sprint in memory,
mediates each read and write, and keeps the references between them
consistent.  Persistence is delegated to a
:class:`~scrum_board.storage.base.ScrumBackend`; the in-memory state changes
only after the backend confirms a write.

Error handling
--------------
The store does not raise to its caller for expected failures:

* backend failure -> logged at ``ERROR``, state left unchanged
* unknown id -> logged at ``WARNING``, no-op
* no current project on ``add_*`` -> logged at ``WARNING``, no-op
* dangling story/sprint reference -> logged at ``WARNING``, rejected

With ``ScrumConfig(strict_references=True)`` the last two raise
:class:`~scrum_board.core.exceptions.NoActiveProjectError` /
:class:`~scrum_board.core.exceptions.DanglingReferenceError` instead.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ValidationError

from scrum_board.core.config import ScrumConfig
from scrum_board.core.exceptions import (
    DanglingReferenceError,
    NoActiveProjectError,
    PersistenceError,
    ScrumError,
)
from scrum_board.core.types import (
    SPRINT_WORKFLOW_STATUSES,
    Project,
    ProjectDraft,
    RecordKind,
    Sprint,
    SprintDraft,
    SprintStatus,
    Story,
    StoryDraft,
    Task,
    TaskDraft,
    TaskStatus,
    new_id,
    utc_now,
)
from scrum_board.storage.factory import BackendFactory

if TYPE_CHECKING:
    from types import TracebackType

    from scrum_board.core.types import AnyRecord
    from scrum_board.storage.base import ScrumBackend

logger = logging.getLogger(__name__)

_D = TypeVar("_D", bound=BaseModel)


class ScrumStore:
    """In-memory board state backed by a pluggable persistence adapter.

    Construct one store per application session and pass it to whatever
    presents the board; there is no global instance.

    Example:
        ```python
        async with ScrumStore.from_config(ScrumConfig(backend="local")) as store:
            project = await store.add_project(ProjectDraft(title="Webshop"))
            task = await store.add_task(TaskDraft(title="Checkout page", story_points=5))
            sprint = await store.add_sprint(
                SprintDraft(name="Sprint 1", start_date=today, end_date=today + timedelta(14))
            )
            await store.assign_task_to_sprint(task.id, sprint.id)
            store.get_backlog_tasks()          # -> []
        ```

    Attributes:
        config: Store behaviour settings
        backend: Persistence adapter every write goes through
    """

    def __init__(
        self,
        backend: ScrumBackend | None = None,
        config: ScrumConfig | None = None,
    ) -> None:
        self.config = config if config is not None else ScrumConfig()
        self.backend = backend if backend is not None else BackendFactory.create(self.config)

        self._projects: dict[str, Project] = {}
        self._tasks: dict[str, Task] = {}
        self._stories: dict[str, Story] = {}
        self._sprints: dict[str, Sprint] = {}
        self._current_project_id: str | None = None
        self._loaded = False

        logger.info("ScrumStore created backend=%s", type(self.backend).__name__)

    @classmethod
    def from_config(cls, config: ScrumConfig) -> ScrumStore:
        """Build a store with the backend selected by *config*."""
        return cls(BackendFactory.create(config), config)

    #############
    # Lifecycle #
    #############

    async def load(self) -> None:
        """Initialise the backend and read every persisted record.

        A backend that cannot be read leaves the store empty; the failure is
        logged and the board keeps working on whatever it holds.
        """
        try:
            await self.backend.initialize()
            snapshot = await self.backend.load()
        except PersistenceError as exc:
            logger.error("Could not load board state: %s", exc)
            self._loaded = True
            return

        self._projects = {p.id: p for p in snapshot.projects}
        self._tasks = {t.id: t for t in snapshot.tasks}
        self._stories = {s.id: s for s in snapshot.stories}
        self._sprints = {s.id: s for s in snapshot.sprints}

        current = snapshot.current_project_id
        if current not in self._projects:
            current = next(iter(self._projects), None)
        self._current_project_id = current
        self._loaded = True

        logger.info(
            "Loaded board: %d projects, %d tasks, %d stories, %d sprints (current=%s)",
            len(self._projects), len(self._tasks), len(self._stories),
            len(self._sprints), current,
        )

    async def close(self) -> None:
        """Release backend resources."""
        await self.backend.close()
        logger.info("ScrumStore closed")

    async def __aenter__(self) -> ScrumStore:
        await self.load()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def loaded(self) -> bool:
        return self._loaded

    ##############
    # Read views #
    ##############

    @property
    def projects(self) -> list[Project]:
        return list(self._projects.values())

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks.values())

    @property
    def stories(self) -> list[Story]:
        return list(self._stories.values())

    @property
    def sprints(self) -> list[Sprint]:
        return list(self._sprints.values())

    @property
    def current_project_id(self) -> str | None:
        return self._current_project_id

    @property
    def current_project(self) -> Project | None:
        """The project that scopes ``add_*`` operations and query helpers."""
        if self._current_project_id is None:
            return None
        return self._projects.get(self._current_project_id)

    def get_project(self, project_id: str) -> Project | None:
        return self._projects.get(project_id)

    def get_task(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def get_story(self, story_id: str) -> Story | None:
        return self._stories.get(story_id)

    def get_sprint(self, sprint_id: str) -> Sprint | None:
        return self._sprints.get(sprint_id)

    ############
    # Projects #
    ############

    async def add_project(self, data: ProjectDraft | Mapping[str, Any]) -> Project | None:
        """Create a project; it becomes current if no project is current."""
        draft = self._coerce(ProjectDraft, data, "add_project")
        if draft is None:
            return None

        project = Project(id=new_id(), created_at=utc_now(), **draft.model_dump())
        if not await self._insert(RecordKind.PROJECTS, project):
            return None
        logger.info("Added project id=%s title=%r", project.id, project.title)

        if self.current_project is None:
            await self._save_current(project.id)
        return project

    async def update_project(self, project: Project) -> Project | None:
        """Replace a project by id."""
        if project.id not in self._projects:
            return self._missing("update_project", RecordKind.PROJECTS, project.id)
        if not await self._update(RecordKind.PROJECTS, project):
            return None
        logger.info("Updated project id=%s", project.id)
        return project

    async def delete_project(self, project_id: str) -> bool:
        """Delete a project and cascade to its tasks, stories and sprints.

        Children are removed first, each on its own confirmed write; if one
        fails the project itself is kept.  When the current project is
        deleted the first remaining project (or none) becomes current.
        """
        if project_id not in self._projects:
            self._missing("delete_project", RecordKind.PROJECTS, project_id)
            return False

        children: list[tuple[RecordKind, dict[str, Any]]] = [
            (RecordKind.TASKS, self._tasks),
            (RecordKind.STORIES, self._stories),
            (RecordKind.SPRINTS, self._sprints),
        ]
        for kind, collection in children:
            owned = [rid for rid, rec in collection.items() if rec.project_id == project_id]
            for record_id in owned:
                if not await self._remove(kind, record_id):
                    logger.error(
                        "Aborted cascade delete of project id=%s at %s id=%s",
                        project_id, kind, record_id,
                    )
                    return False

        if not await self._remove(RecordKind.PROJECTS, project_id):
            return False
        logger.info("Deleted project id=%s", project_id)

        if self._current_project_id == project_id:
            await self._save_current(next(iter(self._projects), None))
        return True

    async def set_current_project(self, project_id: str) -> Project | None:
        """Switch the project that scopes ``add_*`` operations and queries."""
        if project_id not in self._projects:
            return self._missing("set_current_project", RecordKind.PROJECTS, project_id)
        if not await self._save_current(project_id):
            return None
        return self._projects[project_id]

    #########
    # Tasks #
    #########

    async def add_task(self, data: TaskDraft | Mapping[str, Any]) -> Task | None:
        """Create a task in the current project.

        A draft that already names a sprint starts in ``To Do`` unless its
        status is one of the sprint workflow statuses.
        """
        project_id = self._require_project("add_task")
        if project_id is None:
            return None
        draft = self._coerce(TaskDraft, data, "add_task")
        if draft is None:
            return None
        if not self._references_ok(project_id, draft.story_id, draft.sprint_id):
            return None

        fields = draft.model_dump()
        if draft.sprint_id is not None and draft.status not in SPRINT_WORKFLOW_STATUSES:
            fields["status"] = TaskStatus.TO_DO
        task = Task(id=new_id(), created_at=utc_now(), project_id=project_id, **fields)
        if not await self._insert(RecordKind.TASKS, task):
            return None
        logger.info("Added task id=%s project=%s", task.id, project_id)
        return task

    async def update_task(self, task: Task) -> Task | None:
        """Replace a task by id after checking its story/sprint references."""
        existing = self._tasks.get(task.id)
        if existing is None:
            return self._missing("update_task", RecordKind.TASKS, task.id)
        if not self._same_project("update_task", existing.project_id, task.project_id):
            return None
        if not self._references_ok(task.project_id, task.story_id, task.sprint_id):
            return None
        return await self._save_task(task)

    async def delete_task(self, task_id: str) -> bool:
        if task_id not in self._tasks:
            self._missing("delete_task", RecordKind.TASKS, task_id)
            return False
        if not await self._remove(RecordKind.TASKS, task_id):
            return False
        logger.info("Deleted task id=%s", task_id)
        return True

    async def move_task_status(self, task_id: str, new_status: TaskStatus | str) -> Task | None:
        """Overwrite a task's status unconditionally (board column moves)."""
        task = self._tasks.get(task_id)
        if task is None:
            return self._missing("move_task_status", RecordKind.TASKS, task_id)
        try:
            status = TaskStatus(new_status)
        except ValueError:
            logger.warning("Ignored unknown task status %r for task id=%s", new_status, task_id)
            return None
        return await self._save_task(task.model_copy(update={"status": status}))

    ###########
    # Stories #
    ###########

    async def add_story(self, data: StoryDraft | Mapping[str, Any]) -> Story | None:
        """Create a story in the current project."""
        project_id = self._require_project("add_story")
        if project_id is None:
            return None
        draft = self._coerce(StoryDraft, data, "add_story")
        if draft is None:
            return None

        story = Story(id=new_id(), created_at=utc_now(), project_id=project_id, **draft.model_dump())
        if not await self._insert(RecordKind.STORIES, story):
            return None
        logger.info("Added story id=%s project=%s", story.id, project_id)
        return story

    async def update_story(self, story: Story) -> Story | None:
        existing = self._stories.get(story.id)
        if existing is None:
            return self._missing("update_story", RecordKind.STORIES, story.id)
        if not self._same_project("update_story", existing.project_id, story.project_id):
            return None
        if not await self._update(RecordKind.STORIES, story):
            return None
        logger.info("Updated story id=%s", story.id)
        return story

    async def delete_story(self, story_id: str) -> bool:
        """Delete a story; its tasks stay, with ``story_id`` cleared."""
        if story_id not in self._stories:
            self._missing("delete_story", RecordKind.STORIES, story_id)
            return False

        for task in self.get_story_tasks(story_id):
            if await self._save_task(task.model_copy(update={"story_id": None})) is None:
                return False

        if not await self._remove(RecordKind.STORIES, story_id):
            return False
        logger.info("Deleted story id=%s", story_id)
        return True

    async def assign_task_to_story(self, task_id: str, story_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        if task is None:
            return self._missing("assign_task_to_story", RecordKind.TASKS, task_id)
        if not self._references_ok(task.project_id, story_id, None):
            return None
        return await self._save_task(task.model_copy(update={"story_id": story_id}))

    async def remove_task_from_story(self, task_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        if task is None:
            return self._missing("remove_task_from_story", RecordKind.TASKS, task_id)
        return await self._save_task(task.model_copy(update={"story_id": None}))

    ###########
    # Sprints #
    ###########

    async def add_sprint(self, data: SprintDraft | Mapping[str, Any]) -> Sprint | None:
        """Create a sprint in the current project.

        A sprint's task list is derived (see :meth:`get_sprint_tasks`), so a
        new sprint starts with none.
        """
        project_id = self._require_project("add_sprint")
        if project_id is None:
            return None
        draft = self._coerce(SprintDraft, data, "add_sprint")
        if draft is None:
            return None

        sprint = Sprint(id=new_id(), project_id=project_id, **draft.model_dump())
        if not self._single_active_ok(sprint):
            return None
        if not await self._insert(RecordKind.SPRINTS, sprint):
            return None
        logger.info("Added sprint id=%s project=%s", sprint.id, project_id)
        return sprint

    async def update_sprint(self, sprint: Sprint) -> Sprint | None:
        existing = self._sprints.get(sprint.id)
        if existing is None:
            return self._missing("update_sprint", RecordKind.SPRINTS, sprint.id)
        if not self._same_project("update_sprint", existing.project_id, sprint.project_id):
            return None
        if not self._single_active_ok(sprint):
            return None
        if not await self._update(RecordKind.SPRINTS, sprint):
            return None
        logger.info("Updated sprint id=%s status=%s", sprint.id, sprint.status.value)
        return sprint

    async def delete_sprint(self, sprint_id: str) -> bool:
        """Delete a sprint; its tasks return to the backlog.

        Tasks in a sprint workflow status (To Do, In Progress, Review, Done)
        are reset to Ready.
        """
        if sprint_id not in self._sprints:
            self._missing("delete_sprint", RecordKind.SPRINTS, sprint_id)
            return False

        for task in self.get_sprint_tasks(sprint_id):
            if await self._save_task(self._detached_from_sprint(task)) is None:
                return False

        if not await self._remove(RecordKind.SPRINTS, sprint_id):
            return False
        logger.info("Deleted sprint id=%s", sprint_id)
        return True

    async def assign_task_to_sprint(self, task_id: str, sprint_id: str) -> Task | None:
        """Plan a task into a sprint; its status becomes To Do."""
        task = self._tasks.get(task_id)
        if task is None:
            return self._missing("assign_task_to_sprint", RecordKind.TASKS, task_id)
        if not self._references_ok(task.project_id, None, sprint_id):
            return None
        return await self._save_task(
            task.model_copy(update={"sprint_id": sprint_id, "status": TaskStatus.TO_DO})
        )

    async def remove_task_from_sprint(self, task_id: str) -> Task | None:
        """Return a task to the backlog.

        The status resets to Ready only from a sprint workflow status;
        otherwise it is left as is.
        """
        task = self._tasks.get(task_id)
        if task is None:
            return self._missing("remove_task_from_sprint", RecordKind.TASKS, task_id)
        return await self._save_task(self._detached_from_sprint(task))

    async def bulk_assign_tasks_to_sprint(
        self, task_ids: Iterable[str], sprint_id: str
    ) -> list[Task]:
        """Apply :meth:`assign_task_to_sprint` to each id; returns the tasks moved."""
        assigned = []
        for task_id in task_ids:
            task = await self.assign_task_to_sprint(task_id, sprint_id)
            if task is not None:
                assigned.append(task)
        logger.info("Bulk assigned %d tasks to sprint id=%s", len(assigned), sprint_id)
        return assigned

    ###########
    # Queries #
    ###########

    def get_project_tasks(self, project_id: str | None = None) -> list[Task]:
        pid = self._scope(project_id)
        return [t for t in self._tasks.values() if pid is not None and t.project_id == pid]

    def get_project_stories(self, project_id: str | None = None) -> list[Story]:
        pid = self._scope(project_id)
        return [s for s in self._stories.values() if pid is not None and s.project_id == pid]

    def get_project_sprints(self, project_id: str | None = None) -> list[Sprint]:
        pid = self._scope(project_id)
        return [s for s in self._sprints.values() if pid is not None and s.project_id == pid]

    def get_backlog_tasks(self, project_id: str | None = None) -> list[Task]:
        """Tasks of the project (current by default) not planned into any sprint."""
        return [t for t in self.get_project_tasks(project_id) if t.sprint_id is None]

    def get_sprint_tasks(self, sprint_id: str) -> list[Task]:
        return [t for t in self._tasks.values() if t.sprint_id == sprint_id]

    def get_story_tasks(self, story_id: str) -> list[Task]:
        return [t for t in self._tasks.values() if t.story_id == story_id]

    def get_current_sprint(self, project_id: str | None = None) -> Sprint | None:
        """The project's In Progress sprint; the first one if several are."""
        return next(
            (s for s in self.get_project_sprints(project_id) if s.status == SprintStatus.IN_PROGRESS),
            None,
        )

    ############
    # Internal #
    ############

    def _scope(self, project_id: str | None) -> str | None:
        return project_id if project_id is not None else self._current_project_id

    def _collection(self, kind: RecordKind) -> dict[str, Any]:
        return {
            RecordKind.PROJECTS: self._projects,
            RecordKind.TASKS: self._tasks,
            RecordKind.STORIES: self._stories,
            RecordKind.SPRINTS: self._sprints,
        }[kind]

    def _coerce(self, model: type[_D], data: _D | Mapping[str, Any], operation: str) -> _D | None:
        if isinstance(data, model):
            return data
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.warning("Rejected invalid input for %s: %s", operation, exc)
            return None

    def _missing(self, operation: str, kind: RecordKind, record_id: str) -> None:
        logger.warning("%s: no %s record with id=%s", operation, kind, record_id)

    def _require_project(self, operation: str) -> str | None:
        if self.current_project is not None:
            return self._current_project_id
        logger.warning("%s: no active project", operation)
        if self.config.strict_references:
            raise NoActiveProjectError(operation)
        return None

    def _same_project(self, operation: str, expected: str, actual: str) -> bool:
        if expected == actual:
            return True
        logger.warning("%s: records cannot move between projects (%s -> %s)", operation, expected, actual)
        return False

    def _references_ok(self, project_id: str, story_id: str | None, sprint_id: str | None) -> bool:
        """Resolve story/sprint references against *project_id*."""
        checks: list[tuple[str, str | None, Mapping[str, Story | Sprint]]] = [
            ("story_id", story_id, self._stories),
            ("sprint_id", sprint_id, self._sprints),
        ]
        for field, ref, collection in checks:
            if ref is None:
                continue
            target = collection.get(ref)
            if target is not None and target.project_id == project_id:
                continue
            logger.warning("Rejected dangling reference %s=%s (project=%s)", field, ref, project_id)
            if self.config.strict_references:
                raise DanglingReferenceError(field, ref, project_id)
            return False
        return True

    def _single_active_ok(self, sprint: Sprint) -> bool:
        if not self.config.enforce_single_active_sprint or not sprint.is_active():
            return True
        active = self.get_current_sprint(sprint.project_id)
        if active is None or active.id == sprint.id:
            return True
        logger.warning(
            "Rejected sprint id=%s: sprint id=%s is already In Progress in project %s",
            sprint.id, active.id, sprint.project_id,
        )
        return False

    @staticmethod
    def _detached_from_sprint(task: Task) -> Task:
        update: dict[str, Any] = {"sprint_id": None}
        if task.status in SPRINT_WORKFLOW_STATUSES:
            update["status"] = TaskStatus.READY
        return task.model_copy(update=update)

    async def _save_task(self, task: Task) -> Task | None:
        if not await self._update(RecordKind.TASKS, task):
            return None
        logger.debug("Saved task id=%s status=%s sprint=%s", task.id, task.status.value, task.sprint_id)
        return task

    async def _insert(self, kind: RecordKind, record: AnyRecord) -> bool:
        try:
            await self.backend.insert(kind, record)
        except ScrumError as exc:
            logger.error("Failed to insert %s id=%s: %s", kind, record.id, exc)
            return False
        self._collection(kind)[record.id] = record
        return True

    async def _update(self, kind: RecordKind, record: AnyRecord) -> bool:
        try:
            await self.backend.update(kind, record)
        except ScrumError as exc:
            logger.error("Failed to update %s id=%s: %s", kind, record.id, exc)
            return False
        self._collection(kind)[record.id] = record
        return True

    async def _remove(self, kind: RecordKind, record_id: str) -> bool:
        try:
            await self.backend.delete(kind, record_id)
        except ScrumError as exc:
            logger.error("Failed to delete %s id=%s: %s", kind, record_id, exc)
            return False
        self._collection(kind).pop(record_id, None)
        return True

    async def _save_current(self, project_id: str | None) -> bool:
        try:
            await self.backend.save_current_project(project_id)
        except ScrumError as exc:
            logger.error("Failed to save current project %s: %s", project_id, exc)
            return False
        self._current_project_id = project_id
        logger.info("Current project is now %s", project_id)
        return True


__all__ = ["ScrumStore"]
