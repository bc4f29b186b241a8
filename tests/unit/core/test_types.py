"""Unit tests for scrum_board.core.types"""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from scrum_board.core.types import (
    PRIORITY_ORDER,
    RECORD_MODELS,
    SPRINT_WORKFLOW_STATUSES,
    Project,
    ProjectDraft,
    ProjectStatus,
    RecordKind,
    Sprint,
    SprintDraft,
    SprintStatus,
    Task,
    TaskDraft,
    TaskPriority,
    TaskStatus,
    new_id,
)

START = date(2024, 3, 4)


class TestEnums:
    def test_status_values_match_display_names(self):
        assert ProjectStatus.ON_HOLD.value == "On Hold"
        assert TaskStatus.TO_DO.value == "To Do"
        assert SprintStatus.IN_PROGRESS.value == "In Progress"

    def test_sprint_workflow_statuses(self):
        assert SPRINT_WORKFLOW_STATUSES == {
            TaskStatus.TO_DO,
            TaskStatus.IN_PROGRESS,
            TaskStatus.REVIEW,
            TaskStatus.DONE,
        }
        assert TaskStatus.READY not in SPRINT_WORKFLOW_STATUSES

    def test_priority_order_high_first(self):
        ranked = sorted(TaskPriority, key=PRIORITY_ORDER.__getitem__)
        assert ranked == [TaskPriority.HIGH, TaskPriority.MEDIUM, TaskPriority.LOW]

    def test_every_kind_has_a_model(self):
        assert set(RECORD_MODELS) == set(RecordKind)


class TestNewId:
    def test_unique(self):
        assert len({new_id() for _ in range(100)}) == 100


class TestProjectDraft:
    def test_defaults(self):
        draft = ProjectDraft(title="Webshop")
        assert draft.estimated_duration == 12
        assert draft.sprint_duration == 2
        assert draft.status == ProjectStatus.ACTIVE
        assert draft.start_date == date.today()

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            ProjectDraft(title="   ")

    def test_zero_duration_rejected(self):
        with pytest.raises(ValidationError):
            ProjectDraft(title="x", sprint_duration=0)

    def test_camel_case_input_accepted(self):
        draft = ProjectDraft.model_validate({"title": "x", "sprintDuration": 3})
        assert draft.sprint_duration == 3


class TestSprintDraft:
    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            SprintDraft(name="S", start_date=START, end_date=START - timedelta(days=1))

    def test_same_day_sprint_allowed(self):
        draft = SprintDraft(name="S", start_date=START, end_date=START)
        assert draft.capacity == 0
        assert draft.status == SprintStatus.PLANNED

    def test_negative_capacity_rejected(self):
        with pytest.raises(ValidationError):
            SprintDraft(name="S", start_date=START, end_date=START, capacity=-1)


class TestTaskDraft:
    def test_defaults(self):
        draft = TaskDraft(title="Login")
        assert draft.priority == TaskPriority.MEDIUM
        assert draft.status == TaskStatus.NEW
        assert draft.story_points == 0
        assert draft.story_id is None and draft.sprint_id is None

    def test_unknown_fields_ignored(self):
        draft = TaskDraft.model_validate({"title": "x", "projectId": "p9", "id": "t9"})
        assert not hasattr(draft, "project_id")

    def test_invalid_priority_rejected(self):
        with pytest.raises(ValidationError):
            TaskDraft(title="x", priority="Urgent")


class TestRecords:
    def test_task_is_frozen(self):
        task = Task(id="t1", title="x", project_id="p1")
        with pytest.raises(ValidationError):
            task.status = TaskStatus.DONE

    def test_model_copy_update(self):
        task = Task(id="t1", title="x", project_id="p1")
        moved = task.model_copy(update={"sprint_id": "s1"})
        assert moved.sprint_id == "s1"
        assert task.sprint_id is None
        assert task.in_backlog() and not moved.in_backlog()

    def test_serialises_with_camel_case_aliases(self):
        task = Task(id="t1", title="x", project_id="p1", story_points=5)
        data = task.model_dump(by_alias=True)
        assert data["storyPoints"] == 5
        assert data["projectId"] == "p1"
        assert "createdAt" in data

    def test_sprint_is_active(self):
        sprint = Sprint(
            id="s1", name="S", start_date=START, end_date=START,
            status=SprintStatus.IN_PROGRESS, project_id="p1",
        )
        assert sprint.is_active()
        assert not sprint.model_copy(update={"status": SprintStatus.PLANNED}).is_active()

    def test_project_requires_id(self):
        with pytest.raises(ValidationError):
            Project(id="", title="x", start_date=START)
