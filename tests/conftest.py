"""Shared pytest fixtures for the scrum-board test suite.

- Every store fixture runs on the in-memory backend unless the test is about
  a specific backend.
- SQL tests use SQLite in-memory so no external database is needed; Redis is
  always mocked.
- Scope is "function" everywhere for full isolation.
"""
from __future__ import annotations

import asyncio
from datetime import date, timedelta

import pytest

from scrum_board.core.config import ScrumConfig
from scrum_board.core.types import (
    Project,
    ProjectDraft,
    SprintDraft,
    SprintStatus,
    StoryDraft,
    TaskDraft,
    TaskPriority,
    TaskStatus,
)
from scrum_board.storage.memory import InMemoryBackend
from scrum_board.store import ScrumStore

TODAY = date(2024, 3, 4)


@pytest.fixture(scope="session")
def event_loop_policy():
    return asyncio.DefaultEventLoopPolicy()


# ---------------------------------------------------------------------------
# Record builders
# ---------------------------------------------------------------------------

def _sprint_draft(name: str = "Sprint 1", **kwargs) -> SprintDraft:
    defaults = dict(
        name=name,
        start_date=TODAY,
        end_date=TODAY + timedelta(days=14),
        capacity=40,
    )
    defaults.update(kwargs)
    return SprintDraft(**defaults)


@pytest.fixture
def today() -> date:
    """Fixed "today" the board fixtures are built around."""
    return TODAY


@pytest.fixture
def make_sprint_draft():
    """Builder for a two-week SprintDraft starting ``today``."""
    return _sprint_draft


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def memory_config() -> ScrumConfig:
    return ScrumConfig(backend="memory")


@pytest.fixture
def strict_config() -> ScrumConfig:
    return ScrumConfig(backend="memory", strict_references=True)


# ---------------------------------------------------------------------------
# Storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def memory_backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
async def sqlite_backend():
    """SQLite-backed table store for integration tests."""
    from scrum_board.storage.sql import SQLAlchemyBackend

    backend = SQLAlchemyBackend("sqlite+aiosqlite:///:memory:", pool_size=1)
    await backend.initialize()
    yield backend
    await backend.close()


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
async def store(memory_backend: InMemoryBackend, memory_config: ScrumConfig) -> ScrumStore:
    """Empty, loaded store on the in-memory backend."""
    s = ScrumStore(memory_backend, memory_config)
    await s.load()
    return s


@pytest.fixture
async def project(store: ScrumStore) -> Project:
    """A project added to ``store``; it is the current project."""
    p = await store.add_project(ProjectDraft(title="Webshop", start_date=TODAY))
    assert p is not None
    return p


@pytest.fixture
async def board(store: ScrumStore, project: Project) -> ScrumStore:
    """Store with one project, one story, two sprints and four tasks.

    - "Sprint 1" is In Progress, "Sprint 0" is Completed
    - "Login" and "Checkout" are in the backlog, "Login" under the story
    - "Search" is planned into Sprint 1, "Cart" is Done in Sprint 0
    """
    story = await store.add_story(StoryDraft(title="Accounts"))
    current = await store.add_sprint(_sprint_draft("Sprint 1", status=SprintStatus.IN_PROGRESS))
    done = await store.add_sprint(
        _sprint_draft(
            "Sprint 0",
            start_date=TODAY - timedelta(days=14),
            end_date=TODAY,
            status=SprintStatus.COMPLETED,
        )
    )
    assert story and current and done

    await store.add_task(
        TaskDraft(title="Login", priority=TaskPriority.HIGH, story_points=3, story_id=story.id)
    )
    await store.add_task(TaskDraft(title="Checkout", priority=TaskPriority.LOW, story_points=5))
    await store.add_task(TaskDraft(title="Search", story_points=8, sprint_id=current.id))
    await store.add_task(
        TaskDraft(title="Cart", story_points=13, sprint_id=done.id, status=TaskStatus.DONE)
    )
    return store

