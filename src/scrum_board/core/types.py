"""Core types and domain models for the Scrum board.

All persisted records are frozen pydantic models.  Field names are
snake_case in Python; the serialised form uses camelCase (``storyPoints``,
``createdAt``, ``projectId`` …) so that the key-value namespace keeps the
same record layout regardless of backend.
"""
from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class ProjectStatus(StrEnum):
    """Project lifecycle status."""
    ACTIVE = "Active"
    COMPLETED = "Completed"
    ON_HOLD = "On Hold"


class StoryStatus(StrEnum):
    """Story lifecycle status."""
    NEW = "New"
    READY = "Ready"
    IN_SPRINT = "In Sprint"


class SprintStatus(StrEnum):
    """Sprint lifecycle status."""
    PLANNED = "Planned"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class TaskPriority(StrEnum):
    """Task priority, highest first."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TaskStatus(StrEnum):
    """Task workflow status.

    ``New → Ready → (In Sprint | To Do) → In Progress → Review → Done``.
    Only the sprint mutators of :class:`~scrum_board.store.ScrumStore`
    enforce directional resets; ``move_task_status`` may jump anywhere.
    """
    NEW = "New"
    READY = "Ready"
    IN_SPRINT = "In Sprint"
    TO_DO = "To Do"
    IN_PROGRESS = "In Progress"
    REVIEW = "Review"
    DONE = "Done"


#: Statuses a task can only hold while it belongs to a sprint.
SPRINT_WORKFLOW_STATUSES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.TO_DO, TaskStatus.IN_PROGRESS, TaskStatus.REVIEW, TaskStatus.DONE}
)

#: Sort rank used by board views (lower sorts first).
PRIORITY_ORDER: dict[TaskPriority, int] = {
    TaskPriority.HIGH: 0,
    TaskPriority.MEDIUM: 1,
    TaskPriority.LOW: 2,
}


class RecordKind(StrEnum):
    """The four record collections a backend persists."""
    PROJECTS = "projects"
    TASKS = "tasks"
    STORIES = "stories"
    SPRINTS = "sprints"


def new_id() -> str:
    """Return a fresh unique record id."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(UTC)


Title = Annotated[str, Field(min_length=1, max_length=255)]


class _Record(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class _Draft(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


################
# Draft inputs #
################


class ProjectDraft(_Draft):
    """Caller-supplied fields of a new project."""

    title: Title
    description: str = ""
    start_date: date = Field(default_factory=date.today)
    estimated_duration: int = Field(default=12, ge=1, description="Weeks")
    sprint_duration: int = Field(default=2, ge=1, description="Weeks")
    status: ProjectStatus = ProjectStatus.ACTIVE


class StoryDraft(_Draft):
    """Caller-supplied fields of a new story."""

    title: Title
    description: str = ""
    status: StoryStatus = StoryStatus.NEW


class SprintDraft(_Draft):
    """Caller-supplied fields of a new sprint."""

    name: Title
    description: str = ""
    start_date: date
    end_date: date
    goal: str = ""
    capacity: int = Field(default=0, ge=0, description="Story points")
    status: SprintStatus = SprintStatus.PLANNED

    @model_validator(mode="after")
    def _check_dates(self) -> SprintDraft:
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class TaskDraft(_Draft):
    """Caller-supplied fields of a new task."""

    title: Title
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    story_points: int = Field(default=0, ge=0)
    status: TaskStatus = TaskStatus.NEW
    assignee: str | None = None
    story_id: str | None = None
    sprint_id: str | None = None


#################
# Domain models #
#################


class Project(_Record):
    """Root aggregate; owns tasks, stories and sprints through ``project_id``."""

    id: str = Field(..., min_length=1)
    title: Title
    description: str = ""
    start_date: date
    estimated_duration: int = Field(default=12, ge=1)
    sprint_duration: int = Field(default=2, ge=1)
    created_at: datetime = Field(default_factory=utc_now)
    status: ProjectStatus = ProjectStatus.ACTIVE


class Story(_Record):
    """A grouping of related tasks under a common goal."""

    id: str = Field(..., min_length=1)
    title: Title
    description: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    status: StoryStatus = StoryStatus.NEW
    project_id: str = Field(..., min_length=1)


class Sprint(_Record):
    """A time-boxed unit of work with a capacity budget in story points."""

    id: str = Field(..., min_length=1)
    name: Title
    description: str = ""
    start_date: date
    end_date: date
    goal: str = ""
    capacity: int = Field(default=0, ge=0)
    status: SprintStatus = SprintStatus.PLANNED
    project_id: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def _check_dates(self) -> Sprint:
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    def is_active(self) -> bool:
        """Return True if the sprint is In Progress."""
        return self.status == SprintStatus.IN_PROGRESS


class Task(_Record):
    """A backlog item, optionally grouped under a story and planned into a sprint."""

    id: str = Field(..., min_length=1)
    title: Title
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    story_points: int = Field(default=0, ge=0)
    status: TaskStatus = TaskStatus.NEW
    created_at: datetime = Field(default_factory=utc_now)
    assignee: str | None = None
    story_id: str | None = None
    sprint_id: str | None = None
    project_id: str = Field(..., min_length=1)

    def in_backlog(self) -> bool:
        """Return True if the task is not planned into any sprint."""
        return self.sprint_id is None


AnyRecord = Project | Task | Story | Sprint

#: Record model persisted under each :class:`RecordKind`.
RECORD_MODELS: dict[RecordKind, type[_Record]] = {
    RecordKind.PROJECTS: Project,
    RecordKind.TASKS: Task,
    RecordKind.STORIES: Story,
    RecordKind.SPRINTS: Sprint,
}


__all__ = [
    "PRIORITY_ORDER",
    "RECORD_MODELS",
    "SPRINT_WORKFLOW_STATUSES",
    "AnyRecord",
    "Project",
    "ProjectDraft",
    "ProjectStatus",
    "RecordKind",
    "Sprint",
    "SprintDraft",
    "SprintStatus",
    "Story",
    "StoryDraft",
    "StoryStatus",
    "Task",
    "TaskDraft",
    "TaskPriority",
    "TaskStatus",
    "new_id",
    "utc_now",
]
