"""scrum-board — a Scrum board store with pluggable persistence.

Quick start
-----------
.. code-block:: python

    from scrum_board import ScrumConfig, ScrumStore, ProjectDraft, TaskDraft

    async with ScrumStore.from_config(ScrumConfig(backend="local")) as store:
        await store.add_project(ProjectDraft(title="Webshop"))
        await store.add_task(TaskDraft(title="Checkout page", story_points=5))
        store.get_backlog_tasks()

Public API
----------
Core types
    Project, Task, Story, Sprint, their drafts and status enums

Configuration
    ScrumConfig, StorageBackend

Store
    ScrumStore

Storage backends
    ScrumBackend (ABC), InMemoryBackend, LocalFileBackend, RedisBackend,
    SQLAlchemyBackend

Exceptions
    ScrumError and all its subclasses
"""
from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

try:
    __version__: str = _pkg_version("scrum-board")
except PackageNotFoundError:  # running from source without install
    __version__ = "0.0.0+dev"

__license__ = "MIT"

# Configuration
from scrum_board.core.config import ScrumConfig, StorageBackend

# Exceptions
from scrum_board.core.exceptions import (
    ConfigurationError,
    DanglingReferenceError,
    NoActiveProjectError,
    PersistenceError,
    RecordNotFoundError,
    ScrumError,
)
from scrum_board.core.types import (
    Project,
    ProjectDraft,
    ProjectStatus,
    RecordKind,
    Sprint,
    SprintDraft,
    SprintStatus,
    Story,
    StoryDraft,
    StoryStatus,
    Task,
    TaskDraft,
    TaskPriority,
    TaskStatus,
)

# Storage
from scrum_board.storage.base import BoardSnapshot, ScrumBackend
from scrum_board.storage.factory import BackendFactory
from scrum_board.storage.local import LocalFileBackend
from scrum_board.storage.memory import InMemoryBackend
from scrum_board.storage.redis import RedisBackend
from scrum_board.storage.sql import SQLAlchemyBackend

# Store
from scrum_board.store import ScrumStore

__all__ = [  # noqa: RUF022
    "__version__",
    # Types
    "Project",
    "ProjectDraft",
    "ProjectStatus",
    "Task",
    "TaskDraft",
    "TaskPriority",
    "TaskStatus",
    "Story",
    "StoryDraft",
    "StoryStatus",
    "Sprint",
    "SprintDraft",
    "SprintStatus",
    "RecordKind",
    # Config
    "ScrumConfig",
    "StorageBackend",
    # Exceptions
    "ScrumError",
    "RecordNotFoundError",
    "DanglingReferenceError",
    "NoActiveProjectError",
    "PersistenceError",
    "ConfigurationError",
    # Store
    "ScrumStore",
    # Storage
    "BoardSnapshot",
    "ScrumBackend",
    "BackendFactory",
    "InMemoryBackend",
    "LocalFileBackend",
    "RedisBackend",
    "SQLAlchemyBackend",
]
