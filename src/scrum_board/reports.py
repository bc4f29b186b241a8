"""Derived board metrics.

Pure functions over store contents: nothing here reads a backend or mutates
state, so every function can be called with any list of records.  The
dashboard helper :func:`build_dashboard` is the only one that takes a
:class:`~scrum_board.store.ScrumStore` and it only uses its query helpers.

Percentages are whole numbers rounded half-up (``62.5`` -> ``63``).
"""
from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from datetime import date
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from scrum_board.core.types import (
    PRIORITY_ORDER,
    Sprint,
    SprintStatus,
    Story,
    Task,
    TaskPriority,
    TaskStatus,
)

if TYPE_CHECKING:
    from scrum_board.store import ScrumStore

logger = logging.getLogger(__name__)

#: Columns of the sprint board, left to right.
BOARD_COLUMNS: tuple[TaskStatus, ...] = (
    TaskStatus.TO_DO,
    TaskStatus.IN_PROGRESS,
    TaskStatus.REVIEW,
    TaskStatus.DONE,
)


def percent(part: float, whole: float) -> int:
    """Return ``part / whole`` as a whole percentage, 0 when *whole* is 0."""
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class _Report(BaseModel):
    model_config = ConfigDict(frozen=True)


class SprintProgress(_Report):
    """Completion of a set of sprint tasks, by count and by story points."""

    total_tasks: int = 0
    completed_tasks: int = 0
    progress_percent: int = Field(default=0, ge=0, le=100)
    total_points: int = 0
    completed_points: int = 0
    points_percent: int = Field(default=0, ge=0, le=100)


class CapacityUsage(_Report):
    """Story points planned into a sprint against its capacity."""

    planned_points: int = 0
    capacity: int = 0
    percent: int = Field(default=0, ge=0, le=100)

    @property
    def over_capacity(self) -> bool:
        return self.planned_points > self.capacity


class StorySummary(_Report):
    story_id: str
    task_count: int = 0
    total_points: int = 0
    completed_points: int = 0


class DashboardMetrics(_Report):
    """Headline numbers of the project dashboard."""

    current_sprint: Sprint | None = None
    days_remaining: int | None = None
    completion_percent: int = 0
    backlog_size: int = 0
    high_priority_backlog: int = 0
    velocity: int = 0
    upcoming_tasks: list[Task] = Field(default_factory=list)


def sprint_progress(tasks: Iterable[Task]) -> SprintProgress:
    """Summarise how much of *tasks* is Done."""
    tasks = list(tasks)
    done = [t for t in tasks if t.status == TaskStatus.DONE]
    total_points = sum(t.story_points for t in tasks)
    done_points = sum(t.story_points for t in done)
    return SprintProgress(
        total_tasks=len(tasks),
        completed_tasks=len(done),
        progress_percent=percent(len(done), len(tasks)),
        total_points=total_points,
        completed_points=done_points,
        points_percent=percent(done_points, total_points),
    )


def capacity_usage(sprint: Sprint, tasks: Iterable[Task]) -> CapacityUsage:
    """Planned points of *sprint*'s tasks; the percentage is capped at 100.

    *tasks* may contain tasks of other sprints; only those planned into
    *sprint* are counted.
    """
    planned = sum(t.story_points for t in tasks if t.sprint_id == sprint.id)
    return CapacityUsage(
        planned_points=planned,
        capacity=sprint.capacity,
        percent=min(percent(planned, sprint.capacity), 100),
    )


def velocity(sprints: Iterable[Sprint], tasks: Iterable[Task], window: int = 3) -> int:
    """Average Done story points over the most recent completed sprints.

    The *window* Completed sprints with the latest end dates are averaged;
    returns 0 when no sprint is Completed.
    """
    if window < 1:
        raise ValueError("window must be at least 1")
    completed = sorted(
        (s for s in sprints if s.status == SprintStatus.COMPLETED),
        key=lambda s: s.end_date,
        reverse=True,
    )[:window]
    if not completed:
        return 0

    ids = {s.id for s in completed}
    done_points = sum(
        t.story_points for t in tasks if t.sprint_id in ids and t.status == TaskStatus.DONE
    )
    return round_half_up(done_points / len(completed))


def board_columns(tasks: Iterable[Task]) -> dict[TaskStatus, list[Task]]:
    """Group tasks into the sprint board columns.

    Tasks whose status is not a board column (New, Ready, In Sprint) are
    left out.
    """
    columns: dict[TaskStatus, list[Task]] = {status: [] for status in BOARD_COLUMNS}
    for task in tasks:
        if task.status in columns:
            columns[task.status].append(task)
    return columns


def sort_by_priority(tasks: Iterable[Task]) -> list[Task]:
    """Stable sort, High first."""
    return sorted(tasks, key=lambda t: PRIORITY_ORDER[t.priority])


def upcoming_tasks(tasks: Iterable[Task], limit: int = 4) -> list[Task]:
    """The first *limit* tasks not yet Done, highest priority first."""
    return sort_by_priority(t for t in tasks if t.status != TaskStatus.DONE)[:limit]


def story_summary(story: Story, tasks: Iterable[Task]) -> StorySummary:
    owned = [t for t in tasks if t.story_id == story.id]
    return StorySummary(
        story_id=story.id,
        task_count=len(owned),
        total_points=sum(t.story_points for t in owned),
        completed_points=sum(t.story_points for t in owned if t.status == TaskStatus.DONE),
    )


def days_remaining(sprint: Sprint, today: date) -> int:
    """Whole days until *sprint* ends (negative once it has ended)."""
    return (sprint.end_date - today).days


def build_dashboard(
    store: ScrumStore,
    today: date | None = None,
    project_id: str | None = None,
) -> DashboardMetrics:
    """Compute the dashboard of a project (the current one by default)."""
    today = today or date.today()
    sprint = store.get_current_sprint(project_id)
    backlog = store.get_backlog_tasks(project_id)
    project_tasks: Sequence[Task] = store.get_project_tasks(project_id)

    sprint_tasks = store.get_sprint_tasks(sprint.id) if sprint is not None else []
    metrics = DashboardMetrics(
        current_sprint=sprint,
        days_remaining=days_remaining(sprint, today) if sprint is not None else None,
        completion_percent=sprint_progress(sprint_tasks).progress_percent,
        backlog_size=len(backlog),
        high_priority_backlog=sum(1 for t in backlog if t.priority == TaskPriority.HIGH),
        velocity=velocity(
            store.get_project_sprints(project_id),
            project_tasks,
            window=store.config.velocity_window,
        ),
        upcoming_tasks=upcoming_tasks(sprint_tasks),
    )
    logger.debug("Built dashboard for project %s", project_id or store.current_project_id)
    return metrics


__all__ = [
    "BOARD_COLUMNS",
    "CapacityUsage",
    "DashboardMetrics",
    "SprintProgress",
    "StorySummary",
    "board_columns",
    "build_dashboard",
    "capacity_usage",
    "days_remaining",
    "percent",
    "round_half_up",
    "sort_by_priority",
    "story_summary",
    "sprint_progress",
    "upcoming_tasks",
    "velocity",
]
