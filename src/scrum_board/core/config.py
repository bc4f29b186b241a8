"""Configuration management for scrum-board.

Settings are loaded with Pydantic Settings from ``SCRUM_``-prefixed
environment variables (and an optional ``.env`` file) or passed directly.
"""

from __future__ import annotations

import re
import warnings
from enum import StrEnum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scrum_board.utils.db_compat import is_sync_url, mask_url_password


class StorageBackend(StrEnum):
    """Persistence adapter used by the store."""
    MEMORY = "memory"
    LOCAL = "local"
    SQL = "sql"
    REDIS = "redis"


class ScrumConfig(BaseSettings):
    """Main configuration for the Scrum board store.

    Example:
        ```python
        # SCRUM_BACKEND=sql
        # SCRUM_DATABASE_URL=postgresql+asyncpg://...
        config = ScrumConfig()

        # Or programmatically
        config = ScrumConfig(backend="local", storage_path="~/.scrum-board")
        ```

    Attributes:
        backend: Which persistence adapter to build
        database_url: Async SQLAlchemy URL (sql backend)
        storage_path: Directory of the local key-value files (local backend)
        redis_url: Redis connection URL (redis backend)
        strict_references: Raise instead of logging on dangling references
        enforce_single_active_sprint: Reject a second In Progress sprint
        velocity_window: Completed sprints averaged for velocity
    """

    model_config = SettingsConfigDict(
        env_prefix="SCRUM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __str__(self) -> str:
        """String representation with masked credentials."""
        return mask_url_password(super().__repr__())

    ###########
    # Backend #
    ###########

    backend: StorageBackend = Field(
        default=StorageBackend.MEMORY,
        description="Persistence adapter: memory, local, sql or redis",
    )

    database_url: str | None = Field(
        default=None,
        description="Async SQLAlchemy URL for the sql backend",
    )

    database_echo: bool = Field(
        default=False,
        description="Enable SQL statement logging (development only)",
    )

    storage_path: str = Field(
        default=".scrum-board",
        description="Directory holding the local backend's key files",
    )

    redis_url: str | None = Field(
        default=None,
        description="Redis connection URL for the redis backend",
    )

    redis_key_prefix: str = Field(
        default="scrum",
        description="Prefix for every Redis key written by the board",
    )

    ##################
    # Store behavior #
    ##################

    strict_references: bool = Field(
        default=False,
        description="Raise DanglingReferenceError/NoActiveProjectError instead of no-op",
    )

    enforce_single_active_sprint: bool = Field(
        default=True,
        description="Reject a sprint entering In Progress while another one is",
    )

    velocity_window: int = Field(
        default=3,
        ge=1,
        le=52,
        description="Number of recent completed sprints averaged for velocity",
    )

    ##############
    # Validators #
    ##############

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v: str | None) -> str | None:
        """Normalise the URL and warn about synchronous driver schemes."""
        if v is None:
            return None
        url_str = str(v).rstrip("/")
        if is_sync_url(url_str):
            warnings.warn(
                "Database URL uses a synchronous driver scheme. "
                "Use an async driver instead (e.g. postgresql+asyncpg, sqlite+aiosqlite).",
                stacklevel=4,
            )
        return url_str

    @field_validator("redis_key_prefix")
    @classmethod
    def validate_redis_key_prefix(cls, v: str) -> str:
        if not re.match(r"^[A-Za-z][A-Za-z0-9_\-]*$", v):
            raise ValueError(
                "redis_key_prefix must start with a letter and contain only "
                "letters, digits, underscores and hyphens"
            )
        return v

    def model_post_init(self, __context: object) -> None:
        """Run cross-field validation after model construction."""
        self.validate_configuration()

    def validate_configuration(self) -> None:
        """Validate that the selected backend has what it needs.

        Raises:
            ValueError: If configuration is inconsistent
        """
        if self.backend == StorageBackend.SQL and not self.database_url:
            raise ValueError("sql backend requires database_url to be set")
        if self.backend == StorageBackend.REDIS and not self.redis_url:
            raise ValueError("redis backend requires redis_url to be set")


__all__ = ["ScrumConfig", "StorageBackend"]
